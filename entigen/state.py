# File: entigen/state.py
"""
Entigen - Prior Generation State
=================================
Entities generated by a previous run are stored as ``<EntityName>.json``
files (by default under ``.jhipster/``).  Only their ``changelogDate`` is
read back, so that re-running the generator keeps every existing entity's
identity timestamp stable.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from entigen.utils import read_file

logger: logging.Logger = logging.getLogger("entigen.state")

DEFAULT_STATE_DIR: str = ".jhipster"

#: Entity name → previously recorded changelog date.
PriorState = Mapping[str, str]


def entity_file_path(directory: Path, name: str) -> Path:
    """Location of the stored JSON document of entity ``name``."""
    return directory / f"{name}.json"


def load_entity_file(path: Path) -> Optional[Dict[str, object]]:
    """
    Load one stored entity document.

    Returns ``None`` when the file doesn't exist.  Raises ``ValueError`` on
    invalid JSON or a non-object document.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(read_file(path))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level in {path}, got {type(data).__name__}."
        )
    return data


def load_prior_state(
    directory: Optional[Path],
    names: Iterable[str],
) -> Dict[str, str]:
    """
    Collect the stored changelog dates of ``names`` found in ``directory``.

    Entities never generated before, or stored without a date, are simply
    absent from the result.
    """
    state: Dict[str, str] = {}
    if directory is None or not directory.is_dir():
        logger.debug("No prior state directory at %s.", directory)
        return state
    for name in names:
        data = load_entity_file(entity_file_path(directory, name))
        if data is None:
            continue
        changelog_date = data.get("changelogDate")
        if changelog_date:
            state[name] = str(changelog_date)
    logger.info("Loaded prior state for %d entity(ies) from %s.", len(state), directory)
    return state


__all__: List[str] = [
    "DEFAULT_STATE_DIR",
    "PriorState",
    "entity_file_path",
    "load_entity_file",
    "load_prior_state",
]

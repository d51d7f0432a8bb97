# File: entigen/loader.py
"""
Entigen - Model Document Loader
================================
Reads a parsed-model document (JSON or YAML) into validated Pydantic models.

Expected top-level keys::

    model:          # the parsed model: classes, fields, types, enums, ...
    databaseType:   # storage family, e.g. "postgresql"
    options:        # optional per-entity overrides (listDTO, fluentMethods, ...)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from entigen.models import EntityOptions, ParsedModel
from entigen.utils import read_file

logger: logging.Logger = logging.getLogger("entigen.loader")


@dataclass(slots=True)
class ModelDocument:
    """A loaded model document."""

    model: ParsedModel
    database_type: Optional[str] = None
    options: EntityOptions = field(default_factory=EntityOptions)
    source_file: Optional[str] = None


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(read_file(path))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(read_file(path))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_raw_file(path: Path) -> Dict[str, Any]:
    """
    Load a model document, dispatching on the file extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Model path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)
    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_model_document(
    raw: Dict[str, Any], source_file: Optional[str] = None
) -> ModelDocument:
    """
    Validate a raw document into a ``ModelDocument``.

    Raises ``ValueError`` when the ``model`` key is missing or when the model
    or the options fail validation.
    """
    if "model" not in raw:
        raise ValueError(
            "Cannot find the parsed model in input. Expected top-level key: 'model'."
        )
    try:
        model: ParsedModel = ParsedModel.model_validate(raw["model"])
    except ValidationError as exc:
        raise ValueError(f"Model validation failed: {exc}") from exc

    try:
        options: EntityOptions = EntityOptions.model_validate(raw.get("options") or {})
    except ValidationError as exc:
        raise ValueError(f"Options validation failed: {exc}") from exc

    database_type: Optional[str] = raw.get("databaseType") or raw.get("database_type")
    return ModelDocument(
        model=model,
        database_type=database_type,
        options=options,
        source_file=source_file,
    )


def load_model_file(path: Path) -> ModelDocument:
    """Full load: read ``path`` and validate its content."""
    document: ModelDocument = parse_model_document(load_raw_file(path), str(path))
    logger.info("Loaded %r from %s.", document.model, path)
    return document


__all__: List[str] = [
    "ModelDocument",
    "load_raw_file",
    "parse_model_document",
    "load_model_file",
]

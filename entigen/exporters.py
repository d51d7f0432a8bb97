# File: entigen/exporters.py
"""
Entigen - Entity Exporter
==========================
Writes each entity descriptor to ``<output>/<EntityName>.json`` (pretty
printed, atomic writes).  The files double as the prior state of the next
run: their ``changelogDate`` is read back by ``entigen.state``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping

from entigen.models import EntityDescriptor, ParsedModel
from entigen.state import entity_file_path
from entigen.utils import ensure_directory, write_file

logger: logging.Logger = logging.getLogger("entigen.exporters")


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    entity_name: str
    path: str
    size_bytes: int


@dataclass(frozen=False, slots=True)
class ExportResult:
    """Outcome of an export run."""

    output_directory: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)


def render_entity(entity: EntityDescriptor) -> str:
    """JSON text of one entity, as consumed by the templates."""
    return json.dumps(entity.to_json_dict(), indent=4) + "\n"


class EntityExporter:
    """Writes entity descriptors, one JSON file per entity."""

    def __init__(self, *, atomic: bool = True) -> None:
        self._atomic: bool = atomic

    def export(
        self,
        entities: Mapping[str, EntityDescriptor],
        model: ParsedModel,
        output_dir: Path,
    ) -> ExportResult:
        """Write every entity under ``output_dir``, named after its class."""
        ensure_directory(output_dir)
        result: ExportResult = ExportResult(output_directory=str(output_dir))
        for class_id, entity in entities.items():
            name: str = model.classes[class_id].name
            path: Path = entity_file_path(output_dir, name)
            size: int = write_file(path, render_entity(entity), atomic=self._atomic)
            result.files.append(FileRecord(entity_name=name, path=str(path), size_bytes=size))
        logger.info(
            "Exported %d entity file(s), %d bytes to %s.",
            result.total_files,
            result.total_bytes,
            output_dir,
        )
        return result


__all__: List[str] = [
    "FileRecord",
    "ExportResult",
    "EntityExporter",
    "render_entity",
]

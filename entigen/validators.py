# File: entigen/validators.py
"""
Entigen - Model Checks & Diagnostics
=====================================
Fail-fast checks run before and during entity creation, and the diagnostic
container that records every irregularity corrected along the way.

The checks are deliberately narrow: mandatory inputs, storage/relationship
compatibility, and the structural validity of each association.  Overall
model well-formedness is the parser's responsibility.

Usage by downstream modules:
    from entigen.validators import check_storage_compatibility
    check_storage_compatibility(model, database_type)   # raises on failure
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from entigen.exceptions import (
    IncompatibleStorageModelError,
    InvalidAssociationError,
    MissingInputError,
)
from entigen.models import AssociationNode, DatabaseType, ParsedModel, RelationshipType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entigen.validators")

# ---------------------------------------------------------------------------
# Diagnostic codes
# ---------------------------------------------------------------------------

ONE_TO_MANY_REQUIRED_MANY_SIDE: str = "ONE_TO_MANY_REQUIRED_MANY_SIDE"
MANY_TO_ONE_REQUIRED_MANY_SIDE: str = "MANY_TO_ONE_REQUIRED_MANY_SIDE"
MANY_TO_MANY_REQUIRED: str = "MANY_TO_MANY_REQUIRED"
RESERVED_USER_ENTITY: str = "RESERVED_USER_ENTITY"
ONE_TO_MANY_UNIDIRECTIONAL: str = "ONE_TO_MANY_UNIDIRECTIONAL"


# ---------------------------------------------------------------------------
# Diagnostic container
# ---------------------------------------------------------------------------


class Diagnostic:
    """Lightweight diagnostic record (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class DiagnosticReport:
    """
    Accumulates the diagnostics of one entity creation run.

    Every entry is also forwarded to the module logger at the matching level,
    so callers that only watch logs lose nothing.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        logger.warning(message)
        self._items.append(Diagnostic("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        logger.info(message)
        self._items.append(Diagnostic("info", code, message, context))

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self._items if d.is_warning]

    @property
    def all_items(self) -> List[Diagnostic]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [d.code for d in self._items]

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self._items if d.is_warning)

    def summary(self) -> str:
        return (
            f"Diagnostics: {self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<DiagnosticReport {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = "⚠️" if item.is_warning else "ℹ️"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Fail-fast checks
# ---------------------------------------------------------------------------


def check_mandatory_inputs(
    model: Optional[ParsedModel],
    database_type: Union[DatabaseType, str, None],
) -> DatabaseType:
    """
    Both the parsed model and the database type are required.

    Returns the database type as a ``DatabaseType`` member.
    """
    if model is None or not database_type:
        raise MissingInputError(
            "The parsed data and database types are mandatory."
        )
    try:
        return DatabaseType(database_type)
    except ValueError as exc:
        raise MissingInputError(
            f"Unknown database type '{database_type}'. "
            f"Expected one of: {[d.value for d in DatabaseType]}"
        ) from exc


def check_storage_compatibility(
    model: ParsedModel, database_type: DatabaseType
) -> None:
    """
    NoSQL stores other than document stores cannot express relationships.

    Raises ``IncompatibleStorageModelError`` when such a store is targeted and
    the model declares at least one association.
    """
    if database_type.is_nosql and not database_type.is_document and model.associations:
        raise IncompatibleStorageModelError(
            f"NoSQL entities don't have relationships: '{database_type.value}' "
            f"cannot hold the {len(model.associations)} declared association(s)."
        )


def check_association_validity(
    association: Optional[AssociationNode],
    from_class_name: Optional[str],
    to_class_name: Optional[str],
) -> None:
    """
    Reject associations that cannot be resolved at all.

    Raises ``InvalidAssociationError`` carrying both class names and the
    association kind.
    """
    kind: Optional[str] = association.type if association is not None else None
    if association is None or association.type is None:
        raise InvalidAssociationError(
            "The association must not be nil and must have a type.",
            from_class=from_class_name,
            to_class=to_class_name,
            kind=kind,
        )
    if not from_class_name:
        raise InvalidAssociationError(
            f"The source class '{association.from_id}' of a {kind} association "
            f"to '{to_class_name}' does not exist.",
            from_class=from_class_name,
            to_class=to_class_name,
            kind=kind,
        )
    if not to_class_name:
        raise InvalidAssociationError(
            f"The destination class '{association.to_id}' of a {kind} association "
            f"from '{from_class_name}' does not exist.",
            from_class=from_class_name,
            to_class=to_class_name,
            kind=kind,
        )
    if kind == RelationshipType.ONE_TO_ONE and not association.injected_field_in_from:
        raise InvalidAssociationError(
            f"In the One-to-One relationship from {from_class_name} to "
            f"{to_class_name}, the source entity must possess the destination, "
            f"or you must invert the direction of the relationship.",
            from_class=from_class_name,
            to_class=to_class_name,
            kind=kind,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "Diagnostic",
    "DiagnosticReport",
    "check_mandatory_inputs",
    "check_storage_compatibility",
    "check_association_validity",
    "ONE_TO_MANY_REQUIRED_MANY_SIDE",
    "MANY_TO_ONE_REQUIRED_MANY_SIDE",
    "MANY_TO_MANY_REQUIRED",
    "RESERVED_USER_ENTITY",
    "ONE_TO_MANY_UNIDIRECTIONAL",
]

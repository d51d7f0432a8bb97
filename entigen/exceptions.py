# File: entigen/exceptions.py
"""
Entigen - Error kinds
=====================
Fatal failures abort the whole entity creation run with no partial output.
Everything else (illegal required flags, missing inverse names) is corrected
in place and reported as a warning instead.
"""

from __future__ import annotations

from typing import List, Optional


class EntityCreationError(ValueError):
    """Base class for fatal entity creation failures."""


class MissingInputError(EntityCreationError):
    """The parsed model or the database type was not supplied."""


class IncompatibleStorageModelError(EntityCreationError):
    """Relationships were declared for a storage that cannot hold them."""


class InvalidAssociationError(EntityCreationError):
    """An association is structurally inconsistent."""

    def __init__(
        self,
        message: str,
        *,
        from_class: Optional[str] = None,
        to_class: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.from_class: Optional[str] = from_class
        self.to_class: Optional[str] = to_class
        self.kind: Optional[str] = kind


__all__: List[str] = [
    "EntityCreationError",
    "MissingInputError",
    "IncompatibleStorageModelError",
    "InvalidAssociationError",
]

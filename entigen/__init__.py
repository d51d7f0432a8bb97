# File: entigen/__init__.py
"""
Entigen — Entity Descriptor Builder
====================================

Turns a parsed class model (classes, typed fields, enums, validations and
directional associations) into the normalized entity descriptors consumed
by the code-generation templates.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌─────────────────────┐
    │  CLI / Entry │────▶│ EntityCreator │────▶│ AssociationResolver │
    │   (cli.py)   │     │  (creator.py) │     │  (associations.py)  │
    └──────────────┘     └───────┬───────┘     └─────────────────────┘
                                 │
                    ┌────────────┼────────────┐
                    ▼            ▼            ▼
             ┌──────────┐ ┌───────────┐ ┌───────────┐
             │validators│ │  fields   │ │   state   │
             │  (.py)   │ │  (.py)    │ │   (.py)   │
             └──────────┘ └───────────┘ └───────────┘

Usage::

    # As a library
    from entigen import ParsedModel, create_entities
    entities = create_entities(model, "postgresql", {"fluentMethods": ["Blog"]})

    # From the command line
    python -m entigen --model model.yaml --output .jhipster --verbose
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from entigen.models import (
    AssociationNode,
    BlobContent,
    ClassNode,
    DatabaseType,
    EntityDescriptor,
    EntityOptions,
    EnumNode,
    FieldDescriptor,
    FieldNode,
    ParsedModel,
    RelationshipDescriptor,
    RelationshipType,
    TypeNode,
    ValidationNode,
)
from entigen.exceptions import (
    EntityCreationError,
    IncompatibleStorageModelError,
    InvalidAssociationError,
    MissingInputError,
)
from entigen.utils import FieldReference, to_field_reference
from entigen.validators import Diagnostic, DiagnosticReport
from entigen.associations import AssociationResolver, Placement
from entigen.fields import materialize_fields
from entigen.creator import CreationReport, EntityCreator, create_entities
from entigen.loader import ModelDocument, load_model_file
from entigen.state import load_prior_state
from entigen.exporters import EntityExporter

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "EntityCreator",
    "CreationReport",
    "create_entities",
    # Models
    "AssociationNode",
    "BlobContent",
    "ClassNode",
    "DatabaseType",
    "EntityDescriptor",
    "EntityOptions",
    "EnumNode",
    "FieldDescriptor",
    "FieldNode",
    "ParsedModel",
    "RelationshipDescriptor",
    "RelationshipType",
    "TypeNode",
    "ValidationNode",
    # Errors & diagnostics
    "EntityCreationError",
    "IncompatibleStorageModelError",
    "InvalidAssociationError",
    "MissingInputError",
    "Diagnostic",
    "DiagnosticReport",
    # Building blocks
    "AssociationResolver",
    "Placement",
    "FieldReference",
    "to_field_reference",
    "materialize_fields",
    # I/O
    "ModelDocument",
    "load_model_file",
    "load_prior_state",
    "EntityExporter",
]

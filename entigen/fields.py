# File: entigen/fields.py
"""
Entigen - Field Materializer
=============================
Turns the field ids of a class into ``FieldDescriptor`` instances: type
resolution against the primitive and enum registries, collapsing of the
large-object types, and attachment of validation rules.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from entigen.models import BlobContent, FieldDescriptor, FieldNode, ParsedModel
from entigen.utils import format_comment, to_camel_case

logger: logging.Logger = logging.getLogger("entigen.fields")

BINARY_TYPE: str = "byte[]"
REQUIRED_RULE: str = "required"

# Large-object type name → content kind; all of them become ``byte[]``.
_BLOB_TYPES: Dict[str, BlobContent] = {
    "Blob": BlobContent.ANY,
    "AnyBlob": BlobContent.ANY,
    "ImageBlob": BlobContent.IMAGE,
    "TextBlob": BlobContent.TEXT,
}


def resolve_field_type(
    model: ParsedModel, field: FieldNode
) -> Tuple[Optional[str], Optional[str]]:
    """
    Return ``(type name, comma-joined enum values)`` for a field.

    Primitive types win over enums sharing the same id; an unresolvable type
    yields ``(None, None)``.
    """
    type_node = model.get_type(field.type)
    if type_node is not None:
        return type_node.name, None
    enum_node = model.get_enum(field.type)
    if enum_node is not None:
        return enum_node.name, ",".join(enum_node.values)
    logger.debug("Field '%s' has unresolved type '%s'.", field.name, field.type)
    return None, None


def _validation_block(
    model: ParsedModel, field: FieldNode
) -> Tuple[Optional[List[str]], Dict[str, Any]]:
    if not field.validations:
        return None, {}
    rules: List[str] = []
    values: Dict[str, Any] = {}
    for validation_id in field.validations:
        validation = model.validations[validation_id]
        rules.append(validation.name)
        if validation.name != REQUIRED_RULE:
            values[validation.name] = validation.value
    return rules, values


def materialize_field(model: ParsedModel, field: FieldNode) -> FieldDescriptor:
    """Build the descriptor of a single field."""
    field_type, field_values = resolve_field_type(model, field)
    blob_content: Optional[BlobContent] = None
    if field_type in _BLOB_TYPES:
        blob_content = _BLOB_TYPES[field_type]
        field_type = BINARY_TYPE
    rules, values = _validation_block(model, field)
    return FieldDescriptor(
        field_name=to_camel_case(field.name),
        field_type=field_type,
        comment=format_comment(field.comment),
        field_values=field_values,
        field_type_blob_content=blob_content,
        field_validate_rules=rules,
        validation_values=values,
    )


def materialize_fields(model: ParsedModel, class_id: str) -> List[FieldDescriptor]:
    """Descriptors for every field of ``class_id``, in declaration order."""
    return [
        materialize_field(model, model.fields[field_id])
        for field_id in model.classes[class_id].fields
    ]


__all__: List[str] = [
    "BINARY_TYPE",
    "resolve_field_type",
    "materialize_field",
    "materialize_fields",
]

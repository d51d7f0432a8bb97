# File: entigen/models.py
"""
Entigen - Core Data Models
===========================
Pydantic V2 models for both ends of the entity creation pipeline:

    Parsed model (classes, fields, associations) → Entity descriptors

Input nodes mirror the documents produced by the modeling-notation parser
and accept its camelCase keys as aliases.  Output descriptors serialise back
to the same camelCase JSON shape consumed by the code-generation templates
(see ``to_json_dict``).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_serializer,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entigen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RelationshipType(str, Enum):
    """Association cardinalities."""

    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"
    MANY_TO_MANY = "many-to-many"


class DatabaseType(str, Enum):
    """Target storage families."""

    SQL = "sql"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    POSTGRESQL = "postgresql"
    ORACLE = "oracle"
    MSSQL = "mssql"
    H2 = "h2"
    MONGODB = "mongodb"
    CASSANDRA = "cassandra"

    @property
    def is_nosql(self) -> bool:
        return self in {DatabaseType.MONGODB, DatabaseType.CASSANDRA}

    @property
    def is_document(self) -> bool:
        return self is DatabaseType.MONGODB


class BlobContent(str, Enum):
    """Content kind attached to large-object fields."""

    ANY = "any"
    IMAGE = "image"
    TEXT = "text"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Parsed model nodes (input, read-only)
# ---------------------------------------------------------------------------


class ClassNode(BaseModel):
    """A class of the parsed domain model."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Class name.")
    table_name: Optional[str] = Field(
        default=None, alias="tableName", description="Table name hint."
    )
    comment: Optional[str] = Field(default=None, description="Documentation comment.")
    fields: List[str] = Field(
        default_factory=list, description="Ordered field ids."
    )
    dto: str = Field(default="no", description="DTO style.")
    pagination: str = Field(default="no", description="Pagination style.")
    service: str = Field(default="no", description="Service style.")
    microservice_name: Optional[str] = Field(
        default=None, alias="microserviceName", description="Owning microservice."
    )
    search_engine: Optional[str] = Field(
        default=None, alias="searchEngine", description="Search engine choice."
    )

    @model_validator(mode="after")
    def _default_table_name(self) -> "ClassNode":
        if not self.table_name:
            object.__setattr__(self, "table_name", self.name)
        return self

    def __repr__(self) -> str:
        return f"<Class {self.name} ({len(self.fields)} fields)>"


class FieldNode(BaseModel):
    """A field declared on a class."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    type: str = Field(
        ..., min_length=1, description="Id of a primitive type or of an enum."
    )
    comment: Optional[str] = Field(default=None, description="Documentation comment.")
    validations: List[str] = Field(
        default_factory=list, description="Ordered validation ids."
    )


class TypeNode(BaseModel):
    """An entry of the primitive type registry."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Type name, e.g. 'String'.")


class EnumNode(BaseModel):
    """An enumerated type with its ordered literal values."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Enum type name.")
    values: List[str] = Field(default_factory=list, description="Literal values.")

    @field_validator("values")
    @classmethod
    def _unique_values(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            dupes: List[str] = [x for x in v if v.count(x) > 1]
            raise ValueError(f"Duplicate enum values detected: {sorted(set(dupes))}")
        return v


class ValidationNode(BaseModel):
    """A validation rule attached to a field."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Rule name, e.g. 'required'.")
    value: Any = Field(default=None, description="Rule parameter, if any.")


class AssociationNode(BaseModel):
    """
    A directional association between two classes.

    ``from_id`` and ``to_id`` are class ids.  The injected-field strings use
    the ``relationshipName`` or ``relationshipName(otherField)`` syntax.
    """

    model_config = _SHARED_CONFIG

    from_id: str = Field(..., alias="from", description="Origin class id.")
    to_id: str = Field(..., alias="to", description="Destination class id.")
    type: Optional[RelationshipType] = Field(default=None, description="Cardinality.")
    injected_field_in_from: Optional[str] = Field(
        default=None, alias="injectedFieldInFrom"
    )
    injected_field_in_to: Optional[str] = Field(
        default=None, alias="injectedFieldInTo"
    )
    is_injected_field_in_from_required: bool = Field(
        default=False, alias="isInjectedFieldInFromRequired"
    )
    is_injected_field_in_to_required: bool = Field(
        default=False, alias="isInjectedFieldInToRequired"
    )
    comment_in_from: Optional[str] = Field(default=None, alias="commentInFrom")
    comment_in_to: Optional[str] = Field(default=None, alias="commentInTo")

    def __repr__(self) -> str:
        return f"<Association {self.from_id} -[{self.type}]-> {self.to_id}>"


class ParsedModel(BaseModel):
    """
    The whole parsed domain model, with id-keyed registries.

    Registries keep declaration order; ``class_names`` defaults to the class
    names in that order.
    """

    model_config = _SHARED_CONFIG

    classes: Dict[str, ClassNode] = Field(default_factory=dict)
    fields: Dict[str, FieldNode] = Field(default_factory=dict)
    types: Dict[str, TypeNode] = Field(default_factory=dict)
    enums: Dict[str, EnumNode] = Field(default_factory=dict)
    validations: Dict[str, ValidationNode] = Field(default_factory=dict)
    associations: Dict[str, AssociationNode] = Field(default_factory=dict)
    class_names: List[str] = Field(default_factory=list, alias="classNames")

    @model_validator(mode="after")
    def _default_class_names(self) -> "ParsedModel":
        if not self.class_names:
            object.__setattr__(
                self, "class_names", [c.name for c in self.classes.values()]
            )
        return self

    @model_validator(mode="after")
    def _validate_field_references(self) -> "ParsedModel":
        for class_id, node in self.classes.items():
            missing: List[str] = [f for f in node.fields if f not in self.fields]
            if missing:
                raise ValueError(
                    f"Class '{class_id}' references unknown fields: {missing}"
                )
        for field_id, node in self.fields.items():
            missing = [v for v in node.validations if v not in self.validations]
            if missing:
                raise ValueError(
                    f"Field '{field_id}' references unknown validations: {missing}"
                )
        return self

    def get_class(self, class_id: str) -> Optional[ClassNode]:
        return self.classes.get(class_id)

    def get_field(self, field_id: str) -> Optional[FieldNode]:
        return self.fields.get(field_id)

    def get_type(self, type_id: str) -> Optional[TypeNode]:
        return self.types.get(type_id)

    def get_enum(self, enum_id: str) -> Optional[EnumNode]:
        return self.enums.get(enum_id)

    def get_validation(self, validation_id: str) -> Optional[ValidationNode]:
        return self.validations.get(validation_id)

    def get_association(self, association_id: str) -> Optional[AssociationNode]:
        return self.associations.get(association_id)

    def __repr__(self) -> str:
        return (
            f"<ParsedModel {len(self.classes)} classes, "
            f"{len(self.fields)} fields, "
            f"{len(self.associations)} associations>"
        )


# ---------------------------------------------------------------------------
# Per-entity option overrides
# ---------------------------------------------------------------------------


class EntityOptions(BaseModel):
    """
    Option overrides applied per entity name.

    A value replaces the class's own setting only when the entity name is a
    key (mappings) or a member (lists).
    """

    model_config = _SHARED_CONFIG

    list_dto: Dict[str, str] = Field(default_factory=dict, alias="listDTO")
    list_pagination: Dict[str, str] = Field(
        default_factory=dict, alias="listPagination"
    )
    list_service: Dict[str, str] = Field(default_factory=dict, alias="listService")
    microservice_names: Dict[str, str] = Field(
        default_factory=dict, alias="microserviceNames"
    )
    search_engines: Dict[str, str] = Field(
        default_factory=dict, alias="searchEngines"
    )
    angular_suffixes: Dict[str, str] = Field(
        default_factory=dict, alias="angularSuffixes"
    )
    fluent_methods: List[str] = Field(default_factory=list, alias="fluentMethods")
    jpa_metamodel_filtering: List[str] = Field(
        default_factory=list, alias="jpaMetamodelFiltering"
    )
    no_user_management: bool = Field(default=False, alias="noUserManagement")


# ---------------------------------------------------------------------------
# Output descriptors
# ---------------------------------------------------------------------------


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:].lower()


class FieldDescriptor(BaseModel):
    """A resolved field of an entity."""

    model_config = _SHARED_CONFIG

    field_name: str = Field(..., alias="fieldName")
    field_type: Optional[str] = Field(default=None, alias="fieldType")
    comment: Optional[str] = Field(default=None)
    field_values: Optional[str] = Field(default=None, alias="fieldValues")
    field_type_blob_content: Optional[BlobContent] = Field(
        default=None, alias="fieldTypeBlobContent"
    )
    field_validate_rules: Optional[List[str]] = Field(
        default=None, alias="fieldValidateRules"
    )
    validation_values: Dict[str, Any] = Field(
        default_factory=dict,
        description="Rule parameter keyed by rule name ('required' never appears).",
    )

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Dict[str, Any]:
        data: Dict[str, Any] = handler(self)
        data.pop("validation_values", None)
        data.pop("validationValues", None)
        for rule, value in self.validation_values.items():
            if value is not None:
                data[f"fieldValidateRules{_capitalize(rule)}"] = value
        return data

    def __repr__(self) -> str:
        return f"<Field {self.field_name}: {self.field_type}>"


class RelationshipDescriptor(BaseModel):
    """One side of a resolved association, as seen by its owning entity."""

    model_config = _SHARED_CONFIG

    relationship_type: RelationshipType = Field(..., alias="relationshipType")
    relationship_name: str = Field(default="", alias="relationshipName")
    other_entity_name: str = Field(default="", alias="otherEntityName")
    other_entity_field: Optional[str] = Field(default=None, alias="otherEntityField")
    other_entity_relationship_name: Optional[str] = Field(
        default=None, alias="otherEntityRelationshipName"
    )
    owner_side: Optional[bool] = Field(default=None, alias="ownerSide")
    relationship_validate_rules: Optional[str] = Field(
        default=None, alias="relationshipValidateRules"
    )
    javadoc: Optional[str] = Field(default=None)

    @property
    def is_required(self) -> bool:
        return self.relationship_validate_rules == "required"

    def __repr__(self) -> str:
        return (
            f"<Relationship {self.relationship_name} "
            f"({self.relationship_type}) → {self.other_entity_name}>"
        )


class EntityDescriptor(BaseModel):
    """
    Fully resolved entity handed to the code-generation templates.

    Owns its field and relationship lists; both keep declaration order.
    """

    model_config = _SHARED_CONFIG

    fluent_methods: bool = Field(default=False, alias="fluentMethods")
    relationships: List[RelationshipDescriptor] = Field(default_factory=list)
    fields: List[FieldDescriptor] = Field(default_factory=list)
    changelog_date: str = Field(..., alias="changelogDate")
    dto: str = Field(default="no")
    pagination: str = Field(default="no")
    service: str = Field(default="no")
    microservice_name: Optional[str] = Field(default=None, alias="microserviceName")
    search_engine: Optional[str] = Field(default=None, alias="searchEngine")
    javadoc: Optional[str] = Field(default=None)
    entity_table_name: str = Field(..., alias="entityTableName")
    angular_js_suffix: Optional[str] = Field(default=None, alias="angularJSSuffix")
    jpa_metamodel_filtering: bool = Field(default=False, alias="jpaMetamodelFiltering")

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialise with camelCase keys, leaving out unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def __repr__(self) -> str:
        return (
            f"<Entity {self.entity_table_name} "
            f"({len(self.fields)} fields, {len(self.relationships)} rels)>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RelationshipType",
    "DatabaseType",
    "BlobContent",
    "ClassNode",
    "FieldNode",
    "TypeNode",
    "EnumNode",
    "ValidationNode",
    "AssociationNode",
    "ParsedModel",
    "EntityOptions",
    "FieldDescriptor",
    "RelationshipDescriptor",
    "EntityDescriptor",
]

logger.debug("entigen.models loaded — %d public symbols.", len(__all__))

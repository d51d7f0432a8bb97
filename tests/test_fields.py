"""
tests/test_fields.py
Tests for entigen.fields: type resolution, blob collapsing and validation
blocks.
"""

from __future__ import annotations

from entigen.fields import BINARY_TYPE, materialize_fields, resolve_field_type
from entigen.models import FieldNode, ParsedModel


class TestFieldMaterializer:
    def test_enum_field(self, enum_model: ParsedModel) -> None:
        status = materialize_fields(enum_model, "c1")[0]
        assert status.field_name == "status"
        assert status.field_type == "Status"
        assert status.field_values == "ACTIVE,CLOSED"
        assert status.field_validate_rules is None

    def test_fields_keep_declaration_order(self, enum_model: ParsedModel) -> None:
        names = [f.field_name for f in materialize_fields(enum_model, "c1")]
        assert names == ["status", "titleText", "attachment", "body"]

    def test_validation_rules_and_values(self, enum_model: ParsedModel) -> None:
        title = materialize_fields(enum_model, "c1")[1]
        assert title.field_type == "String"
        assert title.comment == "Short title"
        assert title.field_validate_rules == ["required", "maxlength", "pattern"]
        assert title.validation_values == {"maxlength": 42, "pattern": "^[A-Z]"}

    def test_blob_types_collapse_to_binary(self, enum_model: ParsedModel) -> None:
        fields = materialize_fields(enum_model, "c1")
        attachment, body = fields[2], fields[3]
        assert attachment.field_type == BINARY_TYPE
        assert attachment.field_type_blob_content == "any"
        assert body.field_type == BINARY_TYPE
        assert body.field_type_blob_content == "text"

    def test_serialized_shape(self, enum_model: ParsedModel) -> None:
        title = materialize_fields(enum_model, "c1")[1]
        data = title.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert data == {
            "fieldName": "titleText",
            "fieldType": "String",
            "comment": "Short title",
            "fieldValidateRules": ["required", "maxlength", "pattern"],
            "fieldValidateRulesMaxlength": 42,
            "fieldValidateRulesPattern": "^[A-Z]",
        }

    def test_no_validations_means_no_block(self, enum_model: ParsedModel) -> None:
        status = materialize_fields(enum_model, "c1")[0]
        data = status.model_dump(mode="json", by_alias=True, exclude_none=True)
        assert "fieldValidateRules" not in data
        assert not any(key.startswith("fieldValidateRules") for key in data)

    def test_image_blob(self) -> None:
        model = ParsedModel.model_validate(
            {
                "classes": {"c1": {"name": "Photo", "fields": ["f1"]}},
                "fields": {"f1": {"name": "picture", "type": "ImageBlob"}},
                "types": {"ImageBlob": {"name": "ImageBlob"}},
            }
        )
        picture = materialize_fields(model, "c1")[0]
        assert picture.field_type == BINARY_TYPE
        assert picture.field_type_blob_content == "image"


class TestResolveFieldType:
    def test_unknown_type(self, enum_model: ParsedModel) -> None:
        field = FieldNode(name="mystery", type="Nope")
        assert resolve_field_type(enum_model, field) == (None, None)

    def test_primitive_type_has_no_values(self, enum_model: ParsedModel) -> None:
        field = FieldNode(name="title", type="String")
        assert resolve_field_type(enum_model, field) == ("String", None)

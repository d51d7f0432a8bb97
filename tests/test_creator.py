"""
tests/test_creator.py
End-to-end tests for entity creation on the reference blogging model.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

import pytest

from conftest import FIXED_NOW, build_model, two_class_model
from entigen.creator import (
    EntityCreator,
    apply_options,
    changelog_base_time,
    coerce_options,
    create_entities,
)
from entigen.exceptions import (
    EntityCreationError,
    IncompatibleStorageModelError,
    MissingInputError,
)
from entigen.models import EntityDescriptor, EntityOptions, ParsedModel, RelationshipType
from entigen.validators import ONE_TO_MANY_UNIDIRECTIONAL, RESERVED_USER_ENTITY


def _create(model: ParsedModel, options: Any = None, **kwargs: Any):
    return create_entities(model, "postgresql", options, now=FIXED_NOW, **kwargs)


# ===========================================================================
# Reference model
# ===========================================================================


class TestReferenceModel:
    def test_user_entity_is_suppressed(
        self, example_model: ParsedModel, example_options: Dict[str, Any]
    ) -> None:
        entities = _create(example_model, example_options)
        assert list(entities) == ["b1", "p1", "t1"]

    def test_blog(self, example_model: ParsedModel, example_options: Dict[str, Any]) -> None:
        blog = _create(example_model, example_options)["b1"].to_json_dict()
        assert blog["changelogDate"] == "20261019120000"
        assert blog["entityTableName"] == "blog"
        assert blog["javadoc"] == "A blog and its posts."
        assert blog["dto"] == "mapstruct"
        assert blog["pagination"] == "no"
        assert blog["fluentMethods"] is True
        assert blog["jpaMetamodelFiltering"] is False
        assert blog["fields"] == [
            {
                "fieldName": "name",
                "fieldType": "String",
                "fieldValidateRules": ["required", "minlength"],
                "fieldValidateRulesMinlength": 3,
            },
            {"fieldName": "handle", "fieldType": "String"},
        ]
        assert blog["relationships"] == [
            {
                "relationshipType": "one-to-many",
                "relationshipName": "post",
                "otherEntityName": "post",
                "otherEntityRelationshipName": "blog",
            },
            {
                "relationshipType": "many-to-one",
                "relationshipName": "user",
                "otherEntityName": "user",
                "otherEntityField": "login",
            },
        ]

    def test_post(self, example_model: ParsedModel, example_options: Dict[str, Any]) -> None:
        post = _create(example_model, example_options)["p1"].to_json_dict()
        assert post["changelogDate"] == "20261019120001"
        assert post["entityTableName"] == "blog_post"
        assert post["pagination"] == "infinite-scroll"
        assert post["jpaMetamodelFiltering"] is True
        assert "javadoc" not in post
        assert [f["fieldName"] for f in post["fields"]] == [
            "title", "content", "status", "coverImage",
        ]
        assert post["fields"][1]["fieldType"] == "byte[]"
        assert post["fields"][1]["fieldTypeBlobContent"] == "text"
        assert post["fields"][2]["fieldValues"] == "ACTIVE,CLOSED"
        assert post["fields"][3]["fieldTypeBlobContent"] == "image"
        assert post["relationships"] == [
            {
                "relationshipType": "many-to-one",
                "relationshipName": "blog",
                "otherEntityName": "blog",
                "otherEntityField": "id",
            },
            {
                "relationshipType": "many-to-many",
                "relationshipName": "tag",
                "otherEntityName": "tag",
                "otherEntityField": "name",
                "otherEntityRelationshipName": "entry",
                "ownerSide": True,
            },
        ]

    def test_tag(self, example_model: ParsedModel) -> None:
        tag = _create(example_model)["t1"].to_json_dict()
        assert tag["changelogDate"] == "20261019120002"
        assert tag["fields"][0]["fieldValidateRulesMaxlength"] == 50
        assert tag["relationships"] == [
            {
                "relationshipType": "many-to-many",
                "relationshipName": "entry",
                "otherEntityName": "post",
                "otherEntityRelationshipName": "tag",
                "ownerSide": False,
            }
        ]

    def test_input_model_is_not_mutated(self, example_model: ParsedModel) -> None:
        before = example_model.model_dump()
        _create(example_model)
        assert example_model.model_dump() == before
        assert example_model.associations["a1"].type == RelationshipType.ONE_TO_MANY

    def test_repeatable_with_fixed_clock(self, example_model: ParsedModel) -> None:
        first = {k: v.to_json_dict() for k, v in _create(example_model).items()}
        second = {k: v.to_json_dict() for k, v in _create(example_model).items()}
        assert first == second

    def test_accented_names_survive(self) -> None:
        model = build_model(
            {
                "classes": {
                    "c1": {"name": "Café", "fields": ["f1"]},
                    "c2": {"name": "Commande"},
                },
                "fields": {"f1": {"name": "prénom", "type": "String"}},
                "types": {"String": {"name": "String"}},
                "associations": {
                    "a1": {"from": "c2", "to": "c1", "type": "many-to-one",
                           "injectedFieldInFrom": "café(prénom)"}
                },
            }
        )
        entities = _create(model)
        assert entities["c1"].entity_table_name == "café"
        assert entities["c1"].fields[0].field_name == "prénom"
        relationship = entities["c2"].relationships[0]
        assert relationship.relationship_name == "café"
        assert relationship.other_entity_name == "café"
        assert relationship.other_entity_field == "prénom"

    def test_result_is_read_only(self, example_model: ParsedModel) -> None:
        entities = _create(example_model)
        with pytest.raises(TypeError):
            entities["x1"] = entities["b1"]  # type: ignore[index]


# ===========================================================================
# Reserved User entity
# ===========================================================================


class TestUserManagement:
    def test_warning_is_reported(self, example_model: ParsedModel) -> None:
        report = EntityCreator(clock=lambda: FIXED_NOW).create(example_model, "postgresql")
        assert report.suppressed == ["u1"]
        assert report.diagnostics.codes == [RESERVED_USER_ENTITY, ONE_TO_MANY_UNIDIRECTIONAL]
        assert report.diagnostics.warning_count == 1

    def test_warning_is_logged(
        self, example_model: ParsedModel, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="entigen"):
            _create(example_model)
        assert any("'User'" in record.getMessage() for record in caplog.records)

    def test_no_user_management_keeps_user(self, example_model: ParsedModel) -> None:
        entities = _create(example_model, {"noUserManagement": True})
        assert list(entities) == ["b1", "p1", "t1", "u1"]
        user = entities["u1"]
        assert user.changelog_date == "20261019120003"
        assert [f.field_name for f in user.fields] == ["login"]

    def test_name_match_ignores_case(self) -> None:
        model = build_model({"classes": {"c1": {"name": "USER"}, "c2": {"name": "Team"}}})
        assert list(_create(model)) == ["c2"]


# ===========================================================================
# Changelog dates
# ===========================================================================


class TestChangelogDates:
    def test_prior_dates_are_reused(self, example_model: ParsedModel) -> None:
        entities = _create(example_model, prior_state={"Blog": "20200101000000"})
        assert entities["b1"].changelog_date == "20200101000000"
        assert entities["p1"].changelog_date == "20261019120001"

    def test_future_prior_date_pushes_base(self, example_model: ParsedModel) -> None:
        entities = _create(example_model, prior_state={"Blog": "20301231235959"})
        assert entities["b1"].changelog_date == "20301231235959"
        assert entities["p1"].changelog_date == "20310101000001"
        assert entities["t1"].changelog_date == "20310101000002"

    def test_fresh_dates_are_distinct(self, example_model: ParsedModel) -> None:
        entities = _create(example_model, {"noUserManagement": True})
        dates = [e.changelog_date for e in entities.values()]
        assert len(set(dates)) == len(dates)

    def test_base_time_ignores_malformed_dates(self) -> None:
        base = changelog_base_time(FIXED_NOW, {"Blog": "not-a-date"})
        assert base == FIXED_NOW

    def test_naive_clock_is_treated_as_utc(self) -> None:
        naive = datetime(2026, 10, 19, 12, 0, 0)
        assert changelog_base_time(naive, {}) == datetime(
            2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc
        )


# ===========================================================================
# Options
# ===========================================================================


class TestOptions:
    def test_coerce_from_mapping(self) -> None:
        options = coerce_options({"listService": {"Blog": "serviceImpl"}})
        assert isinstance(options, EntityOptions)
        assert options.list_service == {"Blog": "serviceImpl"}

    def test_coerce_none(self) -> None:
        assert coerce_options(None) == EntityOptions()

    def test_unlisted_entity_keeps_class_settings(self) -> None:
        entity = EntityDescriptor(changelog_date="20260101000000", entity_table_name="tag")
        options = EntityOptions.model_validate({"listDTO": {"Blog": "mapstruct"}})
        assert apply_options(entity, "Tag", options).dto == "no"

    def test_every_override(self) -> None:
        entity = EntityDescriptor(changelog_date="20260101000000", entity_table_name="blog")
        options = EntityOptions.model_validate(
            {
                "listService": {"Blog": "serviceClass"},
                "microserviceNames": {"Blog": "blogs"},
                "searchEngines": {"Blog": "elasticsearch"},
                "angularSuffixes": {"Blog": "mySuffix"},
            }
        )
        data = apply_options(entity, "Blog", options).to_json_dict()
        assert data["service"] == "serviceClass"
        assert data["microserviceName"] == "blogs"
        assert data["searchEngine"] == "elasticsearch"
        assert data["angularJSSuffix"] == "mySuffix"

    def test_class_settings_are_defaults(self) -> None:
        model = build_model(
            {"classes": {"c1": {"name": "Invoice", "dto": "mapstruct", "service": "serviceImpl"}}}
        )
        invoice = _create(model)["c1"]
        assert invoice.dto == "mapstruct"
        assert invoice.service == "serviceImpl"


# ===========================================================================
# Fatal errors
# ===========================================================================


class TestFatalErrors:
    def test_missing_model(self) -> None:
        with pytest.raises(MissingInputError):
            create_entities(None, "sql")

    @pytest.mark.parametrize("database_type", [None, "", "db2"])
    def test_missing_or_unknown_database_type(
        self, example_model: ParsedModel, database_type: Any
    ) -> None:
        with pytest.raises(MissingInputError):
            create_entities(example_model, database_type)

    def test_column_store_rejects_associations(self, example_model: ParsedModel) -> None:
        with pytest.raises(IncompatibleStorageModelError):
            create_entities(example_model, "cassandra")

    def test_column_store_without_associations(self) -> None:
        model = build_model({"classes": {"c1": {"name": "Event"}}})
        entities = create_entities(model, "cassandra", now=FIXED_NOW)
        assert entities["c1"].relationships == []

    def test_document_store_keeps_relationships(self, blog_post_model: ParsedModel) -> None:
        entities = create_entities(blog_post_model, "mongodb", now=FIXED_NOW)
        assert len(entities["b1"].relationships) == 1

    def test_invalid_association_aborts(self) -> None:
        model = build_model(two_class_model({"type": "one-to-one"}))
        with pytest.raises(EntityCreationError):
            _create(model)

    def test_errors_are_value_errors(self) -> None:
        with pytest.raises(ValueError):
            create_entities(None, None)

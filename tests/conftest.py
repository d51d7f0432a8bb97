"""
tests/conftest.py
Shared fixtures for the entigen test suite.

Models are built from plain dicts (the same shape as the YAML documents)
so each test can tweak them freely; real file I/O happens inside pytest's
tmp_path directories.
"""

from __future__ import annotations

import copy
import logging
import pathlib
from datetime import datetime, timezone
from typing import Any, Dict

import pytest
import yaml

from entigen.models import ParsedModel


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
MODEL_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "model_example.yaml"

FIXED_NOW: datetime = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def build_model(raw: Dict[str, Any]) -> ParsedModel:
    """Validate a raw model dict into a ``ParsedModel``."""
    return ParsedModel.model_validate(raw)


def two_class_model(association: Dict[str, Any]) -> Dict[str, Any]:
    """Blog (b1) and Post (p1) joined by ``association`` (id ``a1``)."""
    return {
        "classes": {
            "b1": {"name": "Blog", "fields": []},
            "p1": {"name": "Post", "fields": []},
        },
        "associations": {"a1": {"from": "b1", "to": "p1", **association}},
    }


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_entigen_logging():
    """The CLI reconfigures the entigen logger; undo it after every test."""
    yield
    root = logging.getLogger("entigen")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    logging.disable(logging.NOTSET)


# ---------------------------------------------------------------------------
# Raw document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_example_document() -> Dict[str, Any]:
    """Load model_example.yaml once per session and return it as a dict."""
    assert MODEL_EXAMPLE_PATH.exists(), (
        f"Reference model not found at {MODEL_EXAMPLE_PATH}."
    )
    with open(MODEL_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def example_document(raw_example_document: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_example_document)


@pytest.fixture()
def example_model(example_document: Dict[str, Any]) -> ParsedModel:
    return build_model(example_document["model"])


@pytest.fixture()
def example_options(example_document: Dict[str, Any]) -> Dict[str, Any]:
    return example_document["options"]


@pytest.fixture()
def blog_post_model() -> ParsedModel:
    """Blog → Post one-to-many with no inverse field declared."""
    return build_model(two_class_model({"type": "one-to-many"}))


@pytest.fixture()
def enum_model() -> ParsedModel:
    """One class with an enum field, a blob field and validations."""
    return build_model(
        {
            "classes": {
                "c1": {
                    "name": "Ticket",
                    "fields": ["f1", "f2", "f3", "f4"],
                }
            },
            "fields": {
                "f1": {"name": "status", "type": "Status"},
                "f2": {
                    "name": "title_text",
                    "type": "String",
                    "validations": ["v1", "v2", "v3"],
                    "comment": "Short title",
                },
                "f3": {"name": "attachment", "type": "Blob"},
                "f4": {"name": "body", "type": "TextBlob"},
            },
            "types": {
                "String": {"name": "String"},
                "Blob": {"name": "Blob"},
                "TextBlob": {"name": "TextBlob"},
            },
            "enums": {"Status": {"name": "Status", "values": ["ACTIVE", "CLOSED"]}},
            "validations": {
                "v1": {"name": "required"},
                "v2": {"name": "maxlength", "value": 42},
                "v3": {"name": "pattern", "value": "^[A-Z]"},
            },
        }
    )


@pytest.fixture()
def example_yaml_path(
    example_document: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write the example document to a temporary YAML file."""
    path = tmp_path / "model.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(example_document, fh, default_flow_style=False, allow_unicode=True)
    return path

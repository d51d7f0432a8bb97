# File: entigen/utils.py
"""
Entigen - Utility Functions & Helpers
======================================
Naming, comment and changelog-date helpers used throughout the entity
creation pipeline, plus the small file-I/O toolkit shared by the prior-state
reader and the exporter.

All string-conversion functions are pure and decorated with
``@lru_cache(maxsize=None)``: the same class and field names are converted
many times while both sides of every association are resolved.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import shutil
import tempfile
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entigen.utils")

# ---------------------------------------------------------------------------
# Constants & pre-compiled patterns
# ---------------------------------------------------------------------------

DEFAULT_OTHER_ENTITY_FIELD: str = "id"
CHANGELOG_DATE_FORMAT: str = "%Y%m%d%H%M%S"

_SEPARATOR_RE: re.Pattern[str] = re.compile(r"[\W_]+")
# Matched against a word's shape ("A" upper, "a" other letter, "0" digit).
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)
_COMMENT_LINE_PREFIX_RE: re.Pattern[str] = re.compile(r"^\**\s*")


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


def _char_shape(ch: str) -> str:
    if ch.isdigit():
        return "0"
    if ch.isupper():
        return "A"
    return "a"


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Extract individual words from any casing style.

    Letters outside ASCII are kept: ``"CaféCrème"`` gives ``("café", "crème")``.
    Returns a tuple (hashable for LRU cache) of lowercase word strings.
    """
    words: List[str] = []
    for chunk in _SEPARATOR_RE.split(name):
        if not chunk:
            continue
        shape: str = "".join(_char_shape(ch) for ch in chunk)
        words.extend(chunk[m.start():m.end()] for m in _SPLIT_WORDS_RE.finditer(shape))
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("BlogPost")
        'blogPost'
        >>> to_camel_case("order_item")
        'orderItem'
        >>> to_camel_case("XMLHttpRequest")
        'xmlHttpRequest'
    """
    if not name:
        return ""
    words: Tuple[str, ...] = _extract_words(name)
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case (used for table names).

    Examples:
        >>> to_snake_case("BlogPost")
        'blog_post'
        >>> to_snake_case("blog post")
        'blog_post'
    """
    if not name:
        return ""
    return "_".join(_extract_words(name))


@functools.lru_cache(maxsize=None)
def lower_first(name: str) -> str:
    """Lower-case only the first character: ``'BlogPost'`` → ``'blogPost'``."""
    if not name:
        return ""
    return name[0].lower() + name[1:]


def entity_name(class_name: str) -> str:
    """Entity-like identifier for a class name: lower-first camelCase."""
    return lower_first(to_camel_case(class_name))


# ---------------------------------------------------------------------------
# Field references: ``name`` or ``name(otherField)``
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldReference:
    """Parsed injected-field string."""

    relationship_name: str = ""
    other_entity_field: str = DEFAULT_OTHER_ENTITY_FIELD


@functools.lru_cache(maxsize=None)
def to_field_reference(raw: Optional[str]) -> FieldReference:
    """
    Parse ``relationshipName`` or ``relationshipName(otherEntityField)``.

    Examples:
        >>> to_field_reference("orders(name)")
        FieldReference(relationship_name='orders', other_entity_field='name')
        >>> to_field_reference(None)
        FieldReference(relationship_name='', other_entity_field='id')

    The display field defaults to ``id``; an absent reference yields an empty
    relationship name and the caller supplies its own fallback.
    """
    if not raw:
        return FieldReference()
    chunks: List[str] = raw.replace("(", "/", 1).replace(")", "", 1).split("/")
    if len(chunks) > 1:
        return FieldReference(chunks[0], chunks[1])
    return FieldReference(chunks[0])


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


def format_comment(comment: Optional[str]) -> Optional[str]:
    """
    Normalise a documentation comment for the generated sources.

    A one-line comment is returned as is; a multi-line (or ``*``-prefixed)
    comment has each line stripped of its leading ``*`` run and whitespace
    and the lines are joined with a literal ``\\n``.
    """
    if not comment:
        return None
    parts: List[str] = comment.strip().split("\n")
    if len(parts) == 1 and not parts[0].startswith("*"):
        return parts[0]
    return "\\n".join(
        _COMMENT_LINE_PREFIX_RE.sub("", part.strip(), count=1) for part in parts
    )


# ---------------------------------------------------------------------------
# Changelog dates (entity identity timestamps)
# ---------------------------------------------------------------------------


def format_changelog_date(moment: datetime) -> str:
    """Render a datetime as ``YYYYMMDDHHMMSS`` in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(CHANGELOG_DATE_FORMAT)


def parse_changelog_date(value: str) -> datetime:
    """Inverse of :func:`format_changelog_date`; raises ``ValueError`` on bad input."""
    return datetime.strptime(value, CHANGELOG_DATE_FORMAT).replace(tzinfo=timezone.utc)


def changelog_date(base: datetime, increment: int = 0) -> str:
    """Changelog date ``increment`` seconds after ``base``."""
    return format_changelog_date(base + timedelta(seconds=increment))


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file first then renames —
    this prevents partial writes on crash.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            shutil.move(tmp_path, str(path))
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("resolve associations") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_OTHER_ENTITY_FIELD",
    "CHANGELOG_DATE_FORMAT",
    "to_camel_case",
    "to_snake_case",
    "lower_first",
    "entity_name",
    "FieldReference",
    "to_field_reference",
    "format_comment",
    "format_changelog_date",
    "parse_changelog_date",
    "changelog_date",
    "ensure_directory",
    "write_file",
    "read_file",
    "Timer",
]

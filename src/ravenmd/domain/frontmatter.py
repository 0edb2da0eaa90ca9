"""Frontmatter reader: the optional leading ``---`` YAML block.

The block applies only when the first line is exactly ``---`` and a later
line is exactly ``---``. Without a closing delimiter the whole document
is body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor
from ruamel.yaml.error import YAMLError

from ravenmd.domain.errors import ParseError, ParseErrorCode
from ravenmd.domain.tags import normalize_tag_list
from ravenmd.domain.values import (
    NULL,
    ArrayValue,
    BoolValue,
    DatetimeValue,
    DateValue,
    NumberValue,
    RefValue,
    StringValue,
    Value,
    is_date_string,
    is_datetime_string,
    split_ref_literal,
)

FRONTMATTER_DELIMITER = "---"

# ---------------------------------------------------------------------------
# YAML parser
# ---------------------------------------------------------------------------


class _TextTimestampConstructor(SafeConstructor):
    """Safe constructor that leaves timestamp scalars as text.

    Date shapes are judged by :func:`_string_to_value`, so impossible
    dates like ``2025-13-45`` load instead of failing in ``datetime``.
    """


_TextTimestampConstructor.add_constructor(
    "tag:yaml.org,2002:timestamp", SafeConstructor.construct_yaml_str
)


def _new_yaml() -> YAML:
    """Create a fresh safe YAML loader.

    A new instance per call keeps parser state from leaking between
    documents parsed on different threads.
    """
    yaml = YAML(typ="safe", pure=True)
    yaml.Constructor = _TextTimestampConstructor
    return yaml


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Frontmatter:
    """A decoded frontmatter block.

    Attributes:
        object_type: Value of the ``type`` key when it is a string.
        tags: Normalized ``tags`` entries, in order.
        fields: Every other key, coerced to :data:`Value`.
        raw: The YAML text between the delimiters.
        end_line: 1-indexed line of the closing ``---``.
    """

    object_type: str | None = None
    tags: list[str] = field(default_factory=list)
    fields: dict[str, Value] = field(default_factory=dict)
    raw: str = ""
    end_line: int = 0

    @property
    def raw_start_line(self) -> int:
        """Line holding the first YAML line (the one after the opening ``---``)."""
        return 2


@dataclass(frozen=True)
class SplitDocument:
    """Frontmatter (if any) plus the body and the line the body starts on."""

    frontmatter: Frontmatter | None
    body: str
    body_start_line: int


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r") == FRONTMATTER_DELIMITER


def split_frontmatter(content: str) -> SplitDocument:
    """Split *content* into frontmatter and body.

    When no frontmatter is present the body is *content* unchanged and
    starts on line 1.

    Raises:
        ParseError: If the delimited block is not valid YAML or is not a
            mapping.
    """
    lines = content.split("\n")
    if not _is_delimiter(lines[0]):
        return SplitDocument(frontmatter=None, body=content, body_start_line=1)

    close_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if _is_delimiter(line):
            close_idx = i
            break

    if close_idx is None:
        return SplitDocument(frontmatter=None, body=content, body_start_line=1)

    raw = "\n".join(lines[1:close_idx])
    frontmatter = decode_frontmatter(raw, end_line=close_idx + 1)
    return SplitDocument(
        frontmatter=frontmatter,
        body="\n".join(lines[close_idx + 1 :]),
        body_start_line=close_idx + 2,
    )


def decode_frontmatter(raw: str, *, end_line: int = 0) -> Frontmatter:
    """Decode the YAML text of a frontmatter block.

    Raises:
        ParseError: On invalid YAML or a non-mapping document.
    """
    try:
        data = _new_yaml().load(raw)
    except YAMLError as exc:
        line = _yaml_error_line(exc)
        msg = f"Invalid frontmatter YAML: {_first_line(str(exc))}"
        raise ParseError(ParseErrorCode.FRONTMATTER, msg, line=line) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Frontmatter must be a mapping, got {type(data).__name__}"
        raise ParseError(ParseErrorCode.FRONTMATTER, msg, line=2)

    object_type: str | None = None
    tags: list[str] = []
    fields: dict[str, Value] = {}
    for key, value in data.items():
        name = str(key)
        if name == "type":
            if isinstance(value, str) and value.strip():
                object_type = value.strip()
        elif name == "tags":
            tags = normalize_tag_list(value)
        else:
            fields[name] = yaml_to_value(value)

    return Frontmatter(
        object_type=object_type,
        tags=tags,
        fields=fields,
        raw=raw,
        end_line=end_line,
    )


def yaml_to_value(value: Any) -> Value:
    """Convert a decoded YAML node into a :data:`Value`.

    Quoted ``"[[target]]"`` strings become references. An unquoted
    ``[[target]]`` is a nested YAML sequence and stays an array.
    Mappings and unknown node types degrade to null.
    """
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return BoolValue(value=value)
    if isinstance(value, int | float):
        return NumberValue(value=float(value))
    if isinstance(value, str):
        return _string_to_value(value)
    if isinstance(value, list):
        return ArrayValue(items=tuple(yaml_to_value(item) for item in value))
    return NULL


def _string_to_value(text: str) -> Value:
    ref = split_ref_literal(text)
    if ref is not None:
        return RefValue(target=ref[0])
    stripped = text.strip()
    if is_date_string(stripped):
        return DateValue(value=stripped)
    if is_datetime_string(stripped):
        return DatetimeValue(value=stripped)
    return StringValue(value=text)


def _yaml_error_line(exc: YAMLError) -> int | None:
    mark = getattr(exc, "problem_mark", None)
    if mark is None:
        return None
    # Marks are 0-indexed within the block; the block begins on line 2.
    return mark.line + 2


def _first_line(text: str) -> str:
    return text.strip().split("\n", 1)[0]

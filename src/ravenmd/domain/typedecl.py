"""Type declarations: ``::typename(key=value, ...)`` lines.

A declaration on the line right after a heading turns that heading into
a typed object. Any line whose trimmed text begins with ``::`` must match
the full shape; anything else there is a hard parse failure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ravenmd.domain.arguments import parse_arguments
from ravenmd.domain.errors import ParseError, ParseErrorCode
from ravenmd.domain.values import NullValue, Value, format_value, value_text

_DECL_PREFIX = "::"

# ::name(args) with nothing after the closing parenthesis.
_TYPE_DECL_PATTERN = re.compile(r"^::(\w[\w-]*)\s*\((.*)\)\s*$")


@dataclass(frozen=True)
class TypeDeclaration:
    """A parsed ``::type(...)`` line."""

    type_name: str
    line: int
    fields: dict[str, Value] = field(default_factory=dict)
    id: str | None = None  # explicit local id from the ``id`` argument


def is_declaration_line(line: str) -> bool:
    """Return True when *line* claims to be a type declaration."""
    return line.strip().startswith(_DECL_PREFIX)


def parse_type_declaration(line: str, line_number: int) -> TypeDeclaration | None:
    """Parse a type declaration from a single line.

    Returns None when the line does not start with ``::``.

    Raises:
        ParseError: If the line starts with ``::`` but is not a complete
            ``::name(args)`` declaration.
    """
    trimmed = line.strip()
    if not trimmed.startswith(_DECL_PREFIX):
        return None

    match = _TYPE_DECL_PATTERN.match(trimmed)
    if match is None:
        msg = f"Invalid type declaration syntax: {trimmed}"
        raise ParseError(ParseErrorCode.TYPE_DECLARATION, msg, line=line_number)

    fields = parse_arguments(match.group(2))
    declared_id: str | None = None
    if "id" in fields:
        declared_id = value_text(fields["id"]) or None

    return TypeDeclaration(
        type_name=match.group(1),
        line=line_number,
        fields=fields,
        id=declared_id,
    )


def serialize_type_declaration(type_name: str, fields: dict[str, Value]) -> str:
    """Render ``::type_name(k=v, ...)`` with keys sorted and nulls omitted."""
    parts = [
        f"{key}={format_value(fields[key])}"
        for key in sorted(fields)
        if not isinstance(fields[key], NullValue)
    ]
    return f"{_DECL_PREFIX}{type_name}({', '.join(parts)})"

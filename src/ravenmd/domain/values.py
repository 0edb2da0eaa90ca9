"""Typed field values and the value coercion parser.

Field bags are open mappings of ``name -> Value`` because the type system
is user-defined and loaded elsewhere. ``Value`` is a closed tagged union;
the ``kind`` discriminator lets documents serialize straight to JSON.

:func:`coerce_value` turns one trimmed textual fragment into a Value. It
is total: any shape it does not recognize degrades to a string.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Value variants
# ---------------------------------------------------------------------------


class StringValue(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["string"] = "string"
    value: str


class NumberValue(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["number"] = "number"
    value: float


class BoolValue(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["bool"] = "bool"
    value: bool


class DateValue(BaseModel):
    """ISO ``YYYY-MM-DD`` date, kept as text."""

    model_config = {"frozen": True}

    kind: Literal["date"] = "date"
    value: str


class DatetimeValue(BaseModel):
    """ISO 8601-ish datetime, kept as text."""

    model_config = {"frozen": True}

    kind: Literal["datetime"] = "datetime"
    value: str


class RefValue(BaseModel):
    """An unresolved reference to another object."""

    model_config = {"frozen": True}

    kind: Literal["ref"] = "ref"
    target: str


class ArrayValue(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["array"] = "array"
    items: tuple[Value, ...] = ()


class NullValue(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["null"] = "null"


Value = Annotated[
    StringValue
    | NumberValue
    | BoolValue
    | DateValue
    | DatetimeValue
    | RefValue
    | ArrayValue
    | NullValue,
    Field(discriminator="kind"),
]

ArrayValue.model_rebuild()

NULL = NullValue()

# ---------------------------------------------------------------------------
# Shape tests
# ---------------------------------------------------------------------------

# [[target]] or [[target|display]]; the target may not contain brackets.
_REF_LITERAL = re.compile(r"^\[\[([^\[\]|]+)(?:\|([^\[\]]*))?\]\]$")

_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")

# Characters that would be read as argument-list structure if left bare.
_STRUCTURAL_CHARS = frozenset(',()[]="')


def split_ref_literal(text: str) -> tuple[str, str | None] | None:
    """Split an exact ``[[target|display]]`` literal.

    Returns ``(target, display)`` with both parts trimmed, or None when
    *text* is not exactly one wikilink (including ``[[[x]]]``, which is an
    array holding a reference).
    """
    match = _REF_LITERAL.match(text.strip())
    if match is None:
        return None
    target = match.group(1).strip()
    if not target:
        return None
    display = match.group(2)
    return target, display.strip() if display is not None else None


def is_date_string(text: str) -> bool:
    """Return True for the ``YYYY-MM-DD`` shape (no calendar check)."""
    return _DATE.match(text) is not None


def is_datetime_string(text: str) -> bool:
    """Return True for a date prefix followed by a ``T`` time part."""
    return len(text) >= 16 and _DATE_PREFIX.match(text) is not None and "T" in text


def is_number_string(text: str) -> bool:
    return _NUMBER.match(text) is not None


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def coerce_value(text: str) -> Value:
    """Coerce a textual fragment into a :data:`Value`.

    First match wins: empty -> null, exact wikilink -> ref, bracketed ->
    array, double-quoted -> string, ``true``/``false`` -> bool, numeric ->
    number, ``YYYY-MM-DD`` -> date, date with ``T`` time -> datetime,
    ``HH:MM`` -> string, anything else -> string.
    """
    s = text.strip()
    if not s:
        return NULL

    ref = split_ref_literal(s)
    if ref is not None:
        return RefValue(target=ref[0])

    if s.startswith("[") and s.endswith("]"):
        return ArrayValue(items=tuple(_coerce_array_items(s[1:-1])))

    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        return StringValue(value=s[1:-1])

    if s == "true":
        return BoolValue(value=True)
    if s == "false":
        return BoolValue(value=False)

    if is_number_string(s):
        return NumberValue(value=float(s))

    if is_date_string(s):
        return DateValue(value=s)
    if is_datetime_string(s):
        return DatetimeValue(value=s)

    # Bare HH:MM times stay strings; there is no time variant.
    if len(s) == 5 and s[2] == ":":
        return StringValue(value=s)

    return StringValue(value=s)


def _coerce_array_items(inner: str) -> list[Value]:
    """Split array contents on top-level commas and coerce each item.

    Commas inside nested ``[...]`` or ``"..."`` do not split. Empty
    segments coerce to null and are dropped.
    """
    items: list[Value] = []
    current: list[str] = []
    depth = 0
    in_quotes = False

    def flush() -> None:
        item = coerce_value("".join(current))
        if not isinstance(item, NullValue):
            items.append(item)
        current.clear()

    for ch in inner:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "[" and not in_quotes:
            depth += 1
        elif ch == "]" and not in_quotes:
            depth = max(depth - 1, 0)
        elif ch == "," and not in_quotes and depth == 0:
            flush()
            continue
        current.append(ch)

    flush()
    return items


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def format_value(value: Value) -> str:
    """Render *value* in the textual form :func:`coerce_value` reads back."""
    match value:
        case NullValue():
            return ""
        case RefValue(target=target):
            return f"[[{target}]]"
        case ArrayValue(items=items):
            return "[" + ", ".join(format_value(item) for item in items) + "]"
        case BoolValue(value=flag):
            return "true" if flag else "false"
        case NumberValue(value=number):
            return format_number(number)
        case DateValue(value=text) | DatetimeValue(value=text):
            return text
        case StringValue(value=text):
            return _format_string(text)
    msg = f"Unknown value variant: {value!r}"
    raise TypeError(msg)


def _format_string(text: str) -> str:
    needs_quotes = (
        not text
        or text != text.strip()
        or any(ch in _STRUCTURAL_CHARS for ch in text)
        or coerce_value(text) != StringValue(value=text)
    )
    return f'"{text}"' if needs_quotes else text


def value_text(value: Value) -> str | None:
    """Return the scalar text of *value*, or None for refs, arrays and null."""
    match value:
        case StringValue(value=text) | DateValue(value=text) | DatetimeValue(value=text):
            return text
        case NumberValue(value=number):
            return format_number(number)
        case BoolValue(value=flag):
            return "true" if flag else "false"
    return None

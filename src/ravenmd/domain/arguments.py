"""Argument-list parser shared by ``::type(...)`` and ``@trait(...)``.

Arguments are comma-separated ``key=value`` pairs. Values go through
:func:`ravenmd.domain.values.coerce_value`. A ``=`` or ``,`` inside a
double-quoted string or inside brackets is part of the value, never a
delimiter.
"""

from __future__ import annotations

from ravenmd.domain.values import Value, coerce_value


def parse_arguments(args: str) -> dict[str, Value]:
    """Parse ``key=value, key2=[a, b], key3="x, y"`` into a field mapping.

    Pairs with an empty key are dropped. A later duplicate key overwrites
    an earlier one. The final pair is flushed without a trailing comma.

    Examples:
        >>> parse_arguments('id=standup, time=09:00')["id"].value
        'standup'
        >>> sorted(parse_arguments('note="a, b=c", n=2'))
        ['n', 'note']
    """
    fields: dict[str, Value] = {}
    if not args.strip():
        return fields

    key: list[str] = []
    value: list[str] = []
    in_key = True
    in_quotes = False
    depth = 0

    def flush() -> None:
        name = "".join(key).strip()
        if name:
            fields[name] = coerce_value("".join(value))
        key.clear()
        value.clear()

    for ch in args:
        buf = key if in_key else value
        if ch == '"' and depth == 0:
            in_quotes = not in_quotes
            buf.append(ch)
        elif ch == "[" and not in_quotes:
            depth += 1
            buf.append(ch)
        elif ch == "]" and not in_quotes:
            depth = max(depth - 1, 0)
            buf.append(ch)
        elif ch == "=" and in_key and not in_quotes and depth == 0:
            in_key = False
        elif ch == "," and not in_quotes and depth == 0:
            flush()
            in_key = True
        else:
            buf.append(ch)

    flush()
    return fields

"""Tag domain logic: inline ``#tag`` scanning and tag-list normalization."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

# '#' at line start or after whitespace, '(' or '['; then name characters.
_INLINE_TAG_PATTERN = re.compile(r"(?<![^\s(\[])#([A-Za-z0-9_-]+)")

_TAG_SEPARATORS = re.compile(r"[,\s]+")


def find_tags(line: str) -> list[str]:
    """Return inline tag names on *line*, in order.

    Tags starting with a digit are rejected so issue numbers stay prose.

    Examples:
        >>> find_tags("Thoughts on #productivity (#habits) and issue #123")
        ['productivity', 'habits']
    """
    return [
        match.group(1)
        for match in _INLINE_TAG_PATTERN.finditer(line)
        if not match.group(1)[0].isdigit()
    ]


def normalize_tag_list(raw: Any) -> list[str]:
    """Normalize a frontmatter ``tags`` value into a list of names.

    Accepts a single string (comma or whitespace separated) or a sequence
    of strings. A leading ``#`` is stripped from every token. Non-string
    entries are ignored.
    """
    if isinstance(raw, str):
        tokens: Iterable[str] = _TAG_SEPARATORS.split(raw)
    elif isinstance(raw, list | tuple):
        tokens = (item for item in raw if isinstance(item, str))
    else:
        return []

    tags: list[str] = []
    for token in tokens:
        name = token.strip().removeprefix("#").strip()
        if name:
            tags.append(name)
    return tags


def merge_tags(*groups: Iterable[str]) -> list[str]:
    """Concatenate tag groups, dropping case-sensitive duplicates in order."""
    merged: list[str] = []
    seen: set[str] = set()
    for group in groups:
        for tag in group:
            if tag not in seen:
                seen.add(tag)
                merged.append(tag)
    return merged

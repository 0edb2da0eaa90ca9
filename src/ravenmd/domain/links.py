"""Wikilink extraction and reference-target helpers.

Pure functions, no infrastructure dependencies. Targets are returned
raw; mapping them to object ids is :mod:`ravenmd.domain.resolver`'s job.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ravenmd.domain.values import split_ref_literal

# [[Target]] or [[Target|Display Text]]; the target may not contain [ ] or |.
_WIKILINK_PATTERN = re.compile(r"\[\[([^\]\[|]+)(?:\|([^\]]+))?\]\]")


@dataclass(frozen=True)
class WikiLink:
    """A wikilink found in a single line."""

    target: str
    line: int
    start: int
    end: int
    display: str | None = None
    # True when the link is preceded by ``[`` (an element of ``[[[a]], ...]``).
    nested: bool = False


def find_wikilinks(line: str, line_number: int) -> list[WikiLink]:
    """Return every ``[[wikilink]]`` on *line* with its character offsets.

    Array-wrapped links are returned with ``nested=True``; callers decide
    whether the surrounding context is an array value.
    """
    results: list[WikiLink] = []
    for match in _WIKILINK_PATTERN.finditer(line):
        target = match.group(1).strip()
        if not target:
            continue
        display = match.group(2)
        start = match.start()
        results.append(
            WikiLink(
                target=target,
                line=line_number,
                start=start,
                end=match.end(),
                display=display.strip() if display is not None else None,
                nested=start > 0 and line[start - 1] == "[",
            )
        )
    return results


def extract_wikilinks(text: str, *, start_line: int = 1) -> list[WikiLink]:
    """Extract top-level wikilinks from multi-line *text*.

    Array-wrapped links (``[[[x]]]``) are skipped.
    """
    results: list[WikiLink] = []
    for offset, line in enumerate(text.split("\n")):
        results.extend(
            link for link in find_wikilinks(line, start_line + offset) if not link.nested
        )
    return results


def parse_wikilink(text: str) -> tuple[str, str | None] | None:
    """Parse text that is exactly one wikilink into ``(target, display)``."""
    return split_ref_literal(text)


def short_name(target: str) -> str:
    """Return the last path component of a target.

    Examples:
        >>> short_name("people/alice")
        'alice'
    """
    return target.rsplit("/", 1)[-1]


def is_embedded_ref(target: str) -> bool:
    """Return True when *target* points inside a file (``file#id``)."""
    return "#" in target


def split_embedded_ref(target: str) -> tuple[str, str] | None:
    """Split ``file#id`` into ``(file, id)``; None for whole-file targets."""
    if "#" not in target:
        return None
    file_part, _, local = target.partition("#")
    return file_part, local

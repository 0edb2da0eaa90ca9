"""Trait annotations: ``@name`` or ``@name(key=value, ...)`` inside a line.

The ``@`` must open the line or follow whitespace or a list marker
(``-``/``*``), so ``alice@example.com`` is not a trait.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ravenmd.domain.arguments import parse_arguments
from ravenmd.domain.values import Value

_TRAIT_PATTERN = re.compile(r"(?:^|[\s\-*])@(\w+)(?:\s*\(([^)]*)\))?")


@dataclass(frozen=True)
class TraitAnnotation:
    """One trait occurrence on a line, before it is bound to an object."""

    name: str
    line: int
    content: str  # trimmed text after the annotation on the same line
    start: int  # offset of the ``@``
    end: int
    fields: dict[str, Value] = field(default_factory=dict)
    # Offsets of the text between the parentheses, when present.
    args_span: tuple[int, int] | None = None

    def covers(self, offset: int) -> bool:
        """Return True when *offset* falls inside this trait's argument list."""
        return self.args_span is not None and self.args_span[0] <= offset < self.args_span[1]


def parse_trait_annotations(line: str, line_number: int) -> list[TraitAnnotation]:
    """Return every trait annotation on *line*, in order of appearance."""
    results: list[TraitAnnotation] = []
    for match in _TRAIT_PATTERN.finditer(line):
        args = match.group(2)
        results.append(
            TraitAnnotation(
                name=match.group(1),
                line=line_number,
                content=line[match.end() :].strip(),
                start=match.start(1) - 1,
                end=match.end(),
                fields=parse_arguments(args) if args else {},
                args_span=match.span(2) if args is not None else None,
            )
        )
    return results

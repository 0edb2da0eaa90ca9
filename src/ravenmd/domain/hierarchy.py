"""Object hierarchy builder.

Turns the heading list plus the declaration map into one object per
heading, nested with a level stack seeded by the root object at level 0.
A heading whose next line is a ``::type(...)`` declaration becomes a
typed object; any other heading becomes a ``section``.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from collections.abc import Mapping, Sequence

from ravenmd.domain.frontmatter import Frontmatter
from ravenmd.domain.ids import IdAllocator, heading_slug, nested_id
from ravenmd.domain.markdown import BodyScan, Heading
from ravenmd.domain.models import SECTION_TYPE, ParsedObject, ParseOptions
from ravenmd.domain.tags import merge_tags
from ravenmd.domain.values import ArrayValue, NumberValue, StringValue, Value

logger = logging.getLogger(__name__)


def build_objects(
    file_id: str,
    frontmatter: Frontmatter | None,
    scan: BodyScan,
    tag_lines: Mapping[int, Sequence[str]],
    *,
    options: ParseOptions,
) -> list[ParsedObject]:
    """Build the ordered object list for one document.

    Args:
        file_id: Root object id.
        frontmatter: Decoded frontmatter, or None.
        scan: Structural scan of the body.
        tag_lines: Inline tags keyed by line number.
        options: Parser options.

    Returns:
        Objects in start-line order, root first, with end lines filled in.

    Raises:
        ParseError: On a duplicate declared id under the ``error`` policy.
    """
    root = _build_root(file_id, frontmatter, tag_lines, options=options)
    declared = {
        decl.id
        for heading in scan.headings
        if (decl := scan.declaration_after(heading)) is not None and decl.id
    }
    allocator = IdAllocator(reserved=declared, policy=options.duplicate_ids)

    nested: list[ParsedObject] = []
    stack: list[tuple[str, int]] = [(file_id, 0)]
    claimed_decl_lines: set[int] = set()
    tagged = _TagIndex(tag_lines)
    last_line = _last_line(scan)

    for idx, heading in enumerate(scan.headings):
        while len(stack) > 1 and stack[-1][1] >= heading.level:
            stack.pop()
        parent_id = stack[-1][0]

        decl = scan.declaration_after(heading)
        if decl is not None:
            claimed_decl_lines.add(decl.line)
            if decl.id:
                local_id = allocator.claim(decl.id, line=decl.line)
            else:
                local_id = allocator.derive(heading_slug(heading.text) or decl.type_name)
            object_type = decl.type_name
            fields: dict[str, Value] = dict(decl.fields)
        else:
            local_id = allocator.derive(heading_slug(heading.text) or f"section-{heading.line}")
            object_type = SECTION_TYPE
            fields = {
                "title": StringValue(value=heading.text),
                "level": NumberValue(value=float(heading.level)),
            }

        object_id = nested_id(file_id, local_id)
        subtree_end = _subtree_end(scan.headings, idx, last_line)
        nested.append(
            ParsedObject(
                id=object_id,
                type=object_type,
                fields=fields,
                tags=tagged.between(heading.line, subtree_end),
                heading=heading.text,
                heading_level=heading.level,
                parent_id=parent_id,
                line_start=heading.line,
            )
        )
        stack.append((object_id, heading.level))

    for line in sorted(set(scan.declarations) - claimed_decl_lines):
        logger.debug(
            "Type declaration on line %d does not follow a heading; ignored",
            line,
        )

    return [root, *_with_line_ends(nested)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_root(
    file_id: str,
    frontmatter: Frontmatter | None,
    tag_lines: Mapping[int, Sequence[str]],
    *,
    options: ParseOptions,
) -> ParsedObject:
    fm_tags = frontmatter.tags if frontmatter is not None else []
    tags = merge_tags(fm_tags, *(tag_lines[line] for line in sorted(tag_lines)))

    fields: dict[str, Value] = dict(frontmatter.fields) if frontmatter is not None else {}
    if tags:
        fields["tags"] = ArrayValue(items=tuple(StringValue(value=tag) for tag in tags))

    object_type = options.default_type
    if frontmatter is not None and frontmatter.object_type:
        object_type = frontmatter.object_type

    return ParsedObject(id=file_id, type=object_type, fields=fields, tags=tags, line_start=1)


def _with_line_ends(objects: list[ParsedObject]) -> list[ParsedObject]:
    """Set each object's end to the line before the next one's start."""
    ordered = sorted(objects, key=lambda obj: obj.line_start)
    if not ordered:
        return []
    result: list[ParsedObject] = []
    for obj, following in zip(ordered, [*ordered[1:], None], strict=True):
        line_end = following.line_start - 1 if following is not None else None
        result.append(obj.model_copy(update={"line_end": line_end}))
    return result


def _subtree_end(headings: Sequence[Heading], idx: int, last_line: int) -> int:
    """Last line owned by heading *idx* together with its descendants."""
    level = headings[idx].level
    for later in headings[idx + 1 :]:
        if later.level <= level:
            return later.line - 1
    return last_line


def _last_line(scan: BodyScan) -> int:
    candidates = [line.number for line in scan.lines]
    candidates.extend(scan.code_lines)
    return max(candidates, default=1)


class _TagIndex:
    """Inline tags by line, answering range queries in line order."""

    def __init__(self, tag_lines: Mapping[int, Sequence[str]]) -> None:
        self._lines = sorted(line for line, tags in tag_lines.items() if tags)
        self._tags = tag_lines

    def between(self, first: int, last: int) -> list[str]:
        lo = bisect_left(self._lines, first)
        hi = bisect_right(self._lines, last)
        return merge_tags(*(self._tags[line] for line in self._lines[lo:hi]))

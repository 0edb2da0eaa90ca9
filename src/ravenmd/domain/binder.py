"""Trait and reference binder.

The owner of a line is the non-root object with the greatest start line
that is <= the line, falling back to the root object. Object ranges are
contiguous and ordered, so a binary search over start lines suffices.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence

from ravenmd.domain.links import WikiLink
from ravenmd.domain.models import ParsedObject, ParsedRef, ParsedTrait
from ravenmd.domain.traits import TraitAnnotation


class ObjectLocator:
    """Line -> owning object id lookup over one document's objects."""

    def __init__(self, objects: Sequence[ParsedObject]) -> None:
        if not objects:
            msg = "ObjectLocator needs at least the root object"
            raise ValueError(msg)
        self._root_id = objects[0].id
        # The root starts on line 1 too; a heading on line 1 must win.
        nested = sorted(objects[1:], key=lambda obj: obj.line_start)
        self._starts = [obj.line_start for obj in nested]
        self._ids = [obj.id for obj in nested]

    @property
    def root_id(self) -> str:
        return self._root_id

    def owner_of(self, line: int) -> str:
        idx = bisect_right(self._starts, line) - 1
        return self._ids[idx] if idx >= 0 else self._root_id


def bind_traits(
    annotations: Iterable[TraitAnnotation],
    locator: ObjectLocator,
) -> list[ParsedTrait]:
    return [
        ParsedTrait(
            trait_type=annotation.name,
            content=annotation.content,
            fields=dict(annotation.fields),
            parent_object_id=locator.owner_of(annotation.line),
            line=annotation.line,
            start=annotation.start,
            end=annotation.end,
        )
        for annotation in annotations
    ]


def bind_refs(
    links: Iterable[WikiLink],
    locator: ObjectLocator,
    *,
    source_id: str | None = None,
) -> list[ParsedRef]:
    """Bind wikilinks to their source object.

    When *source_id* is given every link is attributed to it instead of
    the line owner (frontmatter links belong to the root).
    """
    return [
        ParsedRef(
            source_id=source_id if source_id is not None else locator.owner_of(link.line),
            target_raw=link.target,
            display_text=link.display,
            line=link.line,
            start=link.start,
            end=link.end,
        )
        for link in links
    ]

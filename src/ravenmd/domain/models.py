"""Parsed document graph models.

All models are frozen. A document is built fresh per parse and never
mutated afterwards; re-parsing a path produces a new value.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ravenmd.domain.ids import DuplicateIdPolicy
from ravenmd.domain.values import Value

DEFAULT_ROOT_TYPE = "page"
SECTION_TYPE = "section"


class ParseOptions(BaseModel):
    """Per-vault parser knobs."""

    model_config = {"frozen": True}

    default_type: str = DEFAULT_ROOT_TYPE
    duplicate_ids: DuplicateIdPolicy = DuplicateIdPolicy.ERROR
    objects_root: str = ""
    pages_root: str = ""


class ParsedObject(BaseModel):
    """The whole file (root) or a heading-scoped region within it.

    ``line_end`` is the inclusive last line; None means "to end of file".
    """

    model_config = {"frozen": True}

    id: str
    type: str
    fields: dict[str, Value] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    heading: str | None = None
    heading_level: int | None = None
    parent_id: str | None = None
    line_start: int
    line_end: int | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def contains_line(self, line: int) -> bool:
        if line < self.line_start:
            return False
        return self.line_end is None or line <= self.line_end


class ParsedTrait(BaseModel):
    """An inline ``@trait`` bound to its enclosing object."""

    model_config = {"frozen": True}

    trait_type: str
    content: str = ""
    fields: dict[str, Value] = Field(default_factory=dict)
    parent_object_id: str
    line: int
    start: int = 0
    end: int = 0


class ParsedRef(BaseModel):
    """An unresolved wikilink from an object to a raw target."""

    model_config = {"frozen": True}

    source_id: str
    target_raw: str
    display_text: str | None = None
    line: int
    start: int
    end: int


class ParsedDocument(BaseModel):
    """One parsed file: objects (root first), traits and references."""

    model_config = {"frozen": True}

    file_path: str
    objects: list[ParsedObject]
    traits: list[ParsedTrait] = Field(default_factory=list)
    refs: list[ParsedRef] = Field(default_factory=list)

    @property
    def root(self) -> ParsedObject:
        return self.objects[0]

    def get_object(self, object_id: str) -> ParsedObject | None:
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

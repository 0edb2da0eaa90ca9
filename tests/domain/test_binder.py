"""Tests for line-to-object binding."""

from __future__ import annotations

import pytest

from ravenmd.domain.binder import ObjectLocator, bind_refs, bind_traits
from ravenmd.domain.links import find_wikilinks
from ravenmd.domain.models import ParsedObject
from ravenmd.domain.traits import parse_trait_annotations


def _obj(object_id: str, start: int, parent: str | None = "doc") -> ParsedObject:
    return ParsedObject(id=object_id, type="section", parent_id=parent, line_start=start)


class TestObjectLocator:
    def test_greatest_start_wins(self) -> None:
        locator = ObjectLocator([_obj("doc", 1, None), _obj("doc#a", 1), _obj("doc#b", 5)])
        assert locator.owner_of(1) == "doc#a"
        assert locator.owner_of(4) == "doc#a"
        assert locator.owner_of(5) == "doc#b"
        assert locator.owner_of(100) == "doc#b"

    def test_lines_before_first_heading_go_to_root(self) -> None:
        locator = ObjectLocator([_obj("doc", 1, None), _obj("doc#a", 3)])
        assert locator.owner_of(2) == "doc"

    def test_root_only(self) -> None:
        locator = ObjectLocator([_obj("doc", 1, None)])
        assert locator.root_id == "doc"
        assert locator.owner_of(42) == "doc"

    def test_requires_root(self) -> None:
        with pytest.raises(ValueError):
            ObjectLocator([])


class TestBind:
    def test_bind_traits(self) -> None:
        locator = ObjectLocator([_obj("doc", 1, None), _obj("doc#a", 2)])
        (trait,) = bind_traits(parse_trait_annotations("@todo x", 3), locator)
        assert trait.parent_object_id == "doc#a"
        assert trait.trait_type == "todo"

    def test_bind_refs_source_override(self) -> None:
        locator = ObjectLocator([_obj("doc", 1, None), _obj("doc#a", 1)])
        links = find_wikilinks("[[x]]", 2)
        assert bind_refs(links, locator)[0].source_id == "doc#a"
        assert bind_refs(links, locator, source_id="doc")[0].source_id == "doc"

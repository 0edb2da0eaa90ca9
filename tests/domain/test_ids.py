"""Tests for identifier derivation and per-document allocation."""

from __future__ import annotations

import pytest

from ravenmd.domain.errors import ParseError, ParseErrorCode
from ravenmd.domain.ids import (
    DuplicateIdPolicy,
    IdAllocator,
    file_id_from_path,
    heading_slug,
    nested_id,
    normalize_relative_path,
)


class TestHeadingSlug:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Weekly Standup", "weekly-standup"),
            ("Hello, World!", "hello-world"),
            ("  Leading", "leading"),
            ("a -- b", "a-b"),
            ("snake_case:thing", "snake-case-thing"),
            ("Q&A", "qa"),
            ("Ünïcode", "ünïcode"),
            ("Trailing -", "trailing"),
            ("!!!", ""),
        ],
    )
    def test_slug(self, text: str, expected: str) -> None:
        assert heading_slug(text) == expected

    def test_nfkc(self) -> None:
        assert heading_slug("ﬁle") == "file"


class TestFileIdFromPath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("people/alice.md", "people/alice"),
            ("./notes/v1.2.md", "notes/v1.2"),
            ("notes\\a.md", "notes/a"),
            ("README", "README"),
        ],
    )
    def test_strips_extension(self, path: str, expected: str) -> None:
        assert file_id_from_path(path) == expected

    def test_objects_root(self) -> None:
        assert file_id_from_path("objects/people/alice.md", objects_root="objects/") == "people/alice"

    def test_pages_root(self) -> None:
        assert file_id_from_path("pages/home.md", pages_root="pages") == "home"

    def test_root_only_strips_prefix_directory(self) -> None:
        assert file_id_from_path("pagesx/home.md", pages_root="pages") == "pagesx/home"

    def test_normalize_relative_path(self) -> None:
        assert normalize_relative_path("/a//b\\c.md") == "a/b/c.md"

    def test_nested_id(self) -> None:
        assert nested_id("doc", "ideas") == "doc#ideas"


class TestIdAllocator:
    def test_derive_disambiguates_in_order(self) -> None:
        alloc = IdAllocator()
        assert [alloc.derive("ideas") for _ in range(3)] == ["ideas", "ideas-2", "ideas-3"]

    def test_derive_skips_reserved(self) -> None:
        alloc = IdAllocator(reserved={"ideas"})
        assert alloc.derive("ideas") == "ideas-2"

    def test_derive_skips_taken_suffix(self) -> None:
        alloc = IdAllocator()
        assert alloc.claim("a-2") == "a-2"
        assert alloc.derive("a") == "a"
        assert alloc.derive("a") == "a-3"

    def test_claim_duplicate_raises(self) -> None:
        alloc = IdAllocator()
        alloc.claim("x")
        with pytest.raises(ParseError) as exc_info:
            alloc.claim("x", line=7)
        assert exc_info.value.code is ParseErrorCode.DUPLICATE_ID
        assert exc_info.value.line == 7

    def test_claim_duplicate_disambiguates(self) -> None:
        alloc = IdAllocator(policy=DuplicateIdPolicy.DISAMBIGUATE)
        assert alloc.claim("x") == "x"
        assert alloc.claim("x") == "x-2"

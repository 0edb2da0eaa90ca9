"""Tests for inline tags and frontmatter tag lists."""

from __future__ import annotations

import pytest

from ravenmd.domain.tags import find_tags, merge_tags, normalize_tag_list


class TestFindTags:
    def test_inline_tags(self) -> None:
        assert find_tags("Thoughts on #productivity (#habits)") == ["productivity", "habits"]

    def test_issue_numbers_rejected(self) -> None:
        assert find_tags("issue #123") == []

    def test_must_follow_boundary(self) -> None:
        assert find_tags("a#b") == []
        assert find_tags("[#x]") == ["x"]

    def test_heading_marker_is_not_a_tag(self) -> None:
        assert find_tags("## Heading") == []

    def test_name_characters(self) -> None:
        assert find_tags("#a-b_c.") == ["a-b_c"]


class TestNormalizeTagList:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("#a, b c", ["a", "b", "c"]),
            (["#x", 3, "y"], ["x", "y"]),
            (None, []),
            (5, []),
            ([" ", "#"], []),
        ],
    )
    def test_normalize(self, raw: object, expected: list[str]) -> None:
        assert normalize_tag_list(raw) == expected


class TestMergeTags:
    def test_order_and_dedup(self) -> None:
        assert merge_tags(["a", "b"], ["b", "c"]) == ["a", "b", "c"]

    def test_case_sensitive(self) -> None:
        assert merge_tags(["A"], ["a"]) == ["A", "a"]

"""Tests for the structural body scan."""

from __future__ import annotations

import pytest

from ravenmd.domain.errors import ParseError
from ravenmd.domain.markdown import remove_inline_code, scan_body


class TestRemoveInlineCode:
    def test_masks_code_span(self) -> None:
        line = "see `#tag` here"
        masked = remove_inline_code(line)
        assert "#tag" not in masked
        assert len(masked) == len(line)
        assert masked.startswith("see ")
        assert masked.endswith(" here")

    def test_double_backticks(self) -> None:
        masked = remove_inline_code("a ``x ` y`` b")
        assert "x" not in masked
        assert masked[0] == "a"
        assert masked[-1] == "b"

    def test_unclosed_backtick_unchanged(self) -> None:
        assert remove_inline_code("a `b") == "a `b"


class TestScanBody:
    def test_headings_and_fences(self) -> None:
        scan = scan_body("# One\ntext\n## Two\n```\n# not heading\n```\n")
        assert [(h.text, h.level, h.line) for h in scan.headings] == [("One", 1, 1), ("Two", 2, 3)]
        assert scan.code_lines == {4, 5, 6}
        assert all(line.number not in scan.code_lines for line in scan.lines)

    def test_start_line_offset(self) -> None:
        scan = scan_body("\n# A\n", start_line=5)
        assert scan.headings[0].line == 6

    def test_setext_heading(self) -> None:
        scan = scan_body("Title\n=====\n::note()\n")
        (heading,) = scan.headings
        assert heading.text == "Title"
        assert heading.level == 1
        assert heading.end_line == 2
        decl = scan.declaration_after(heading)
        assert decl is not None
        assert decl.type_name == "note"

    def test_inline_code_dropped_from_heading_text(self) -> None:
        scan = scan_body("# Use `foo` now\n")
        assert "foo" not in scan.headings[0].text

    def test_declaration_needs_adjacent_line(self) -> None:
        scan = scan_body("# A\n\n::note()\n")
        assert scan.declaration_after(scan.headings[0]) is None
        assert 3 in scan.declarations

    def test_scanned_line_keeps_raw(self) -> None:
        scan = scan_body("@todo run `make`\n")
        line = scan.lines[0]
        assert line.number == 1
        assert "make" in line.raw
        assert "make" not in line.text


class TestDeclarationsInCode:
    def test_fenced_malformed_declaration_ignored(self) -> None:
        scan = scan_body("```\n::bad\n```\n")
        assert scan.declarations == {}

    def test_indented_code_ignored(self) -> None:
        scan = scan_body("    ::bad\n")
        assert scan.declarations == {}

    def test_malformed_declaration_raises(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            scan_body("text\n::bad\n")
        assert exc_info.value.line == 2

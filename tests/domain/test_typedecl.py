"""Tests for ``::type(...)`` declaration lines."""

from __future__ import annotations

import pytest

from ravenmd.domain.errors import ParseError, ParseErrorCode
from ravenmd.domain.typedecl import (
    is_declaration_line,
    parse_type_declaration,
    serialize_type_declaration,
)
from ravenmd.domain.values import NULL, NumberValue, StringValue


class TestParseTypeDeclaration:
    def test_with_id(self) -> None:
        decl = parse_type_declaration("::meeting(id=standup, time=09:00)", 2)
        assert decl is not None
        assert decl.type_name == "meeting"
        assert decl.id == "standup"
        assert decl.line == 2
        assert decl.fields["time"] == StringValue(value="09:00")

    def test_surrounding_whitespace(self) -> None:
        decl = parse_type_declaration("  ::person()  ", 1)
        assert decl is not None
        assert decl.type_name == "person"
        assert decl.fields == {}
        assert decl.id is None

    def test_numeric_id_is_text(self) -> None:
        decl = parse_type_declaration("::issue(id=2024)", 1)
        assert decl is not None
        assert decl.id == "2024"

    def test_parentheses_inside_value(self) -> None:
        decl = parse_type_declaration('::book(title="A (B)")', 1)
        assert decl is not None
        assert decl.fields["title"] == StringValue(value="A (B)")

    def test_not_a_declaration(self) -> None:
        assert parse_type_declaration("Just prose", 1) is None
        assert parse_type_declaration("a ::b()", 1) is None


class TestMalformedDeclaration:
    def test_missing_parentheses(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_type_declaration("::meeting", 5)
        assert exc_info.value.code is ParseErrorCode.TYPE_DECLARATION
        assert exc_info.value.line == 5

    def test_trailing_content(self) -> None:
        with pytest.raises(ParseError):
            parse_type_declaration("::meeting(id=x) trailing", 1)

    def test_missing_name(self) -> None:
        with pytest.raises(ParseError):
            parse_type_declaration("::(id=x)", 1)


class TestIsDeclarationLine:
    def test_detects_prefix(self) -> None:
        assert is_declaration_line("  ::x()")
        assert not is_declaration_line("text ::x()")


class TestSerializeTypeDeclaration:
    def test_sorted_keys_and_nulls_omitted(self) -> None:
        line = serialize_type_declaration(
            "meeting",
            {"time": StringValue(value="09:00"), "id": StringValue(value="standup"), "x": NULL},
        )
        assert line == "::meeting(id=standup, time=09:00)"

    def test_round_trip(self) -> None:
        fields = {"title": StringValue(value="Hello, world"), "n": NumberValue(value=3)}
        decl = parse_type_declaration(serialize_type_declaration("book", fields), 1)
        assert decl is not None
        assert decl.fields == fields

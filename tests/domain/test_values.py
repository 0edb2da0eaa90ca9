"""Tests for the Value union and the value coercion parser."""

from __future__ import annotations

import pytest

from ravenmd.domain.values import (
    NULL,
    ArrayValue,
    BoolValue,
    DatetimeValue,
    DateValue,
    NullValue,
    NumberValue,
    RefValue,
    StringValue,
    coerce_value,
    format_value,
    split_ref_literal,
    value_text,
)


class TestCoerceScalars:
    def test_empty_is_null(self) -> None:
        assert coerce_value("") == NULL
        assert coerce_value("   ") == NULL

    def test_bool_literals(self) -> None:
        assert coerce_value("true") == BoolValue(value=True)
        assert coerce_value("false") == BoolValue(value=False)

    def test_bool_is_case_sensitive(self) -> None:
        assert coerce_value("True") == StringValue(value="True")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("42", 42.0), ("-3.5", -3.5), ("+7", 7.0), ("1e3", 1000.0), (".5", 0.5)],
    )
    def test_numbers(self, text: str, expected: float) -> None:
        assert coerce_value(text) == NumberValue(value=expected)

    @pytest.mark.parametrize("text", ["nan", "inf", "-inf", "Infinity"])
    def test_non_finite_words_are_strings(self, text: str) -> None:
        assert coerce_value(text) == StringValue(value=text)

    def test_date(self) -> None:
        assert coerce_value("2025-02-03") == DateValue(value="2025-02-03")

    def test_datetime(self) -> None:
        assert coerce_value("2025-02-03T10:30:00") == DatetimeValue(value="2025-02-03T10:30:00")

    def test_short_datetime_falls_back_to_string(self) -> None:
        assert coerce_value("2025-02-03T10") == StringValue(value="2025-02-03T10")

    def test_bare_time_is_string(self) -> None:
        assert coerce_value("09:00") == StringValue(value="09:00")

    def test_quoted_string_strips_quotes(self) -> None:
        assert coerce_value('"true"') == StringValue(value="true")
        assert coerce_value('"a, b"') == StringValue(value="a, b")

    def test_fallback_string(self) -> None:
        assert coerce_value("hello world") == StringValue(value="hello world")

    def test_surrounding_whitespace_is_trimmed(self) -> None:
        assert coerce_value("  42  ") == NumberValue(value=42)


class TestCoerceRefsAndArrays:
    def test_reference(self) -> None:
        assert coerce_value("[[people/alice]]") == RefValue(target="people/alice")

    def test_reference_with_display_keeps_target(self) -> None:
        assert coerce_value("[[people/alice|Alice]]") == RefValue(target="people/alice")

    def test_array_of_scalars(self) -> None:
        value = coerce_value('[a, "b, c", 3]')
        assert value == ArrayValue(
            items=(StringValue(value="a"), StringValue(value="b, c"), NumberValue(value=3))
        )

    def test_array_of_references(self) -> None:
        value = coerce_value("[[[alice]], [[bob]]]")
        assert value == ArrayValue(items=(RefValue(target="alice"), RefValue(target="bob")))

    def test_single_wrapped_reference_is_array(self) -> None:
        assert coerce_value("[[[alice]]]") == ArrayValue(items=(RefValue(target="alice"),))

    def test_empty_array(self) -> None:
        assert coerce_value("[]") == ArrayValue(items=())

    def test_empty_segments_dropped(self) -> None:
        value = coerce_value("[a, , b,]")
        assert isinstance(value, ArrayValue)
        assert [item.value for item in value.items] == ["a", "b"]

    def test_nested_array(self) -> None:
        value = coerce_value("[[1, 2], x]")
        assert value == ArrayValue(
            items=(
                ArrayValue(items=(NumberValue(value=1), NumberValue(value=2))),
                StringValue(value="x"),
            )
        )


class TestSplitRefLiteral:
    def test_plain(self) -> None:
        assert split_ref_literal("[[a]]") == ("a", None)

    def test_display(self) -> None:
        assert split_ref_literal("[[a | Alice ]]") == ("a", "Alice")

    def test_not_exact(self) -> None:
        assert split_ref_literal("see [[a]]") is None
        assert split_ref_literal("[[[a]]]") is None


class TestRoundTrip:
    @pytest.mark.parametrize(
        "value",
        [
            StringValue(value="hello"),
            StringValue(value="hello world"),
            StringValue(value=""),
            StringValue(value="true"),
            StringValue(value="42"),
            StringValue(value="a, b"),
            StringValue(value=" padded "),
            StringValue(value="09:00"),
            StringValue(value="2025-02-03"),
            NumberValue(value=42),
            NumberValue(value=-3.5),
            NumberValue(value=1e20),
            BoolValue(value=True),
            BoolValue(value=False),
            DateValue(value="2025-02-03"),
            DatetimeValue(value="2025-02-03T10:30:00"),
        ],
    )
    def test_format_then_coerce_is_identity(self, value: object) -> None:
        assert coerce_value(format_value(value)) == value  # type: ignore[arg-type]

    def test_integral_numbers_have_no_decimal_point(self) -> None:
        assert format_value(NumberValue(value=3)) == "3"

    def test_reference_and_array_format(self) -> None:
        value = ArrayValue(items=(RefValue(target="a"), NumberValue(value=1)))
        assert format_value(value) == "[[[a]], 1]"
        assert coerce_value(format_value(value)) == value

    def test_null_formats_empty(self) -> None:
        assert format_value(NullValue()) == ""


class TestValueText:
    def test_scalars(self) -> None:
        assert value_text(StringValue(value="x")) == "x"
        assert value_text(NumberValue(value=2024)) == "2024"
        assert value_text(BoolValue(value=True)) == "true"

    def test_non_scalars(self) -> None:
        assert value_text(RefValue(target="x")) is None
        assert value_text(NULL) is None


class TestSerialization:
    def test_json_dump_carries_kind(self) -> None:
        value = ArrayValue(items=(RefValue(target="a"),))
        assert value.model_dump(mode="json") == {
            "kind": "array",
            "items": [{"kind": "ref", "target": "a"}],
        }

    def test_frozen(self) -> None:
        value = StringValue(value="x")
        with pytest.raises(Exception):
            value.value = "y"  # type: ignore[misc]

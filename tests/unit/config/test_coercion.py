"""Tests for raw string coercion."""

from __future__ import annotations

import pytest

from good_base.config.coercion import (
    coerce_value,
    encode_value,
    infer_value,
    parse_bool,
    parse_list,
    parse_number,
)
from good_base.config.errors import CoercionError
from good_base.config.schema import FieldType


class TestParseBool:
    @pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", "On", " true "])
    def test_true_values(self, raw: str) -> None:
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["false", "0", "no", "off", "", "maybe"])
    def test_everything_else_is_false(self, raw: str) -> None:
        assert parse_bool(raw) is False


class TestParseNumber:
    def test_integer(self) -> None:
        assert parse_number("8080") == 8080
        assert isinstance(parse_number("8080"), int)

    def test_negative_integer(self) -> None:
        assert parse_number("-5") == -5

    def test_decimal(self) -> None:
        assert parse_number("1.5") == 1.5
        assert parse_number(".5") == 0.5

    def test_whitespace_trimmed(self) -> None:
        assert parse_number(" 42 ") == 42

    @pytest.mark.parametrize("raw", ["abc", "", "1.2.3", "1e5", "12abc"])
    def test_invalid_raises(self, raw: str) -> None:
        with pytest.raises(CoercionError) as exc_info:
            parse_number(raw)
        assert exc_info.value.expected == "number"


class TestParseList:
    def test_comma_separated(self) -> None:
        assert parse_list("https://a.com,https://b.com") == [
            "https://a.com",
            "https://b.com",
        ]

    def test_tokens_trimmed_and_empties_dropped(self) -> None:
        assert parse_list(" a , ,b,, ") == ["a", "b"]

    def test_json_array(self) -> None:
        assert parse_list('["a", "b,c"]') == ["a", "b,c"]

    def test_invalid_json_array_falls_back_to_split(self) -> None:
        assert parse_list("[a, b]") == ["[a", "b]"]

    def test_empty_string(self) -> None:
        assert parse_list("") == []


class TestInferValue:
    def test_inference_order(self) -> None:
        assert infer_value("true") is True
        assert infer_value("False") is False
        assert infer_value("12") == 12
        assert infer_value('{"a": 1}') == {"a": 1}
        assert infer_value("hello") == "hello"

    def test_json_null_stays_string(self) -> None:
        assert infer_value("null") == "null"


class TestCoerceValue:
    def test_string_is_raw(self) -> None:
        assert coerce_value(" 123 ", FieldType.STRING) == " 123 "

    def test_object_json_or_raw(self) -> None:
        assert coerce_value('{"k": [1]}', FieldType.OBJECT) == {"k": [1]}
        assert coerce_value("not json", FieldType.OBJECT) == "not json"

    def test_untyped_infers(self) -> None:
        assert coerce_value("yes", None) == "yes"
        assert coerce_value("3", FieldType.ANY) == 3

    def test_number_failure_raises(self) -> None:
        with pytest.raises(CoercionError):
            coerce_value("eighty", FieldType.NUMBER)


class TestEncodeRoundTrip:
    """Encoding a typed value and coercing it back yields the same value."""

    @pytest.mark.parametrize(
        ("value", "field_type"),
        [
            (True, FieldType.BOOLEAN),
            (False, FieldType.BOOLEAN),
            (8080, FieldType.NUMBER),
            ("localhost", FieldType.STRING),
            (["https://a.com", "https://b.com"], FieldType.STRING_LIST),
        ],
    )
    def test_round_trip(self, value, field_type: FieldType) -> None:
        assert coerce_value(encode_value(value), field_type) == value

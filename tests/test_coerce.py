"""Tests for type coercion of parsed model output."""

import pytest

from nova_llm.structured.coerce import (
    coerce,
    coerce_bool,
    coerce_enum,
    coerce_number,
    parse_percentage,
)
from nova_llm.structured.schema import (
    ArrayField,
    BooleanField,
    EnumField,
    NumberField,
    ObjectField,
    Schema,
    StringField,
)


class TestParsePercentage:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("75%", 75),
            ("150%", 100),
            ("-10%", 0),
            ("75.5%", 76),
            (" 85 % ", 85),
            ("0%", 0),
            ("abc%", 0),
        ],
    )
    def test_cases(self, text, expected):
        assert parse_percentage(text) == expected


class TestCoerceNumber:
    def test_percentage_string(self):
        assert coerce_number("75%") == 75

    def test_numeric_string(self):
        assert coerce_number("42") == 42
        assert isinstance(coerce_number("42"), int)

    def test_fractional_string(self):
        assert coerce_number("3.5") == 3.5

    def test_integer_field_rounds(self):
        assert coerce_number("2.5", NumberField(integer=True)) == 3

    def test_non_numeric_string_becomes_zero(self):
        assert coerce_number("not a number") == 0

    def test_string_clamped_to_declared_bounds(self):
        kind = NumberField(minimum=1, maximum=10)
        assert coerce_number("15", kind) == 10
        assert coerce_number("not a number", kind) == 1
        assert coerce_number("4", kind) == 4

    def test_numbers_pass_through(self):
        assert coerce_number(7) == 7
        assert coerce_number(0.25) == 0.25

    def test_other_types_pass_through(self):
        assert coerce_number(None) is None
        assert coerce_number([1]) == [1]


class TestCoerceBool:
    @pytest.mark.parametrize("value", ["true", "TRUE", " yes ", "1", True, 1, 2, -1, 0.5])
    def test_truthy(self, value):
        assert coerce_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "no", "maybe", "", False, 0, 0.0])
    def test_falsy(self, value):
        assert coerce_bool(value) is False

    def test_other_values_untouched(self):
        assert coerce_bool(None) is None
        assert coerce_bool(["yes"]) == ["yes"]


class TestCoerceEnum:
    def test_case_insensitive_match(self):
        assert coerce_enum("HIGH", ("high", "medium", "low")) == "high"

    def test_returns_canonical_member(self):
        assert coerce_enum(" pass ", ("Pass", "Fail")) == "Pass"

    def test_unknown_member_untouched(self):
        assert coerce_enum("urgent", ("high", "low")) == "urgent"


class TestCoerce:
    schema = Schema.of(
        "review",
        grade=EnumField(("A", "B", "C")),
        coverage=NumberField(minimum=0, maximum=100),
        testsPresent=BooleanField(),
        suggestions=ArrayField(StringField()),
        summary=StringField(),
        issues=ArrayField(
            ObjectField(
                {
                    "line": NumberField(integer=True),
                    "severity": EnumField(("low", "high")),
                }
            )
        ),
    )

    def test_normalizes_all_kinds(self):
        value = {
            "grade": "b",
            "coverage": "80%",
            "testsPresent": "yes",
            "suggestions": ["add tests"],
            "summary": "fine",
            "issues": [{"line": "12", "severity": "HIGH"}],
        }
        assert coerce(value, self.schema) == {
            "grade": "B",
            "coverage": 80,
            "testsPresent": True,
            "suggestions": ["add tests"],
            "summary": "fine",
            "issues": [{"line": 12, "severity": "high"}],
        }

    def test_missing_arrays_and_strings_filled(self):
        result = coerce({"grade": "A"}, self.schema)
        assert result["suggestions"] == []
        assert result["issues"] == []
        assert result["summary"] == ""
        # No default is invented for numbers or booleans.
        assert "coverage" not in result
        assert "testsPresent" not in result

    def test_unknown_keys_kept(self):
        result = coerce({"grade": "A", "extra": {"x": 1}}, self.schema)
        assert result["extra"] == {"x": 1}

    def test_input_not_mutated(self):
        value = {"grade": "a", "coverage": "50%"}
        coerce(value, self.schema)
        assert value == {"grade": "a", "coverage": "50%"}

    def test_wrong_shapes_left_for_validation(self):
        assert coerce(["not", "an", "object"], self.schema) == ["not", "an", "object"]
        result = coerce({"suggestions": "one"}, self.schema)
        assert result["suggestions"] == "one"

    def test_accepts_bare_field_kind(self):
        assert coerce(["1", "2"], ArrayField(NumberField())) == [1, 2]

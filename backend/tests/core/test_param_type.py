"""Unit tests for core.param_type.coerce_value."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from dbmapper.core.param_type import ParamTypeError, coerce_value


class TestPassThrough:
    def test_none_passes_through(self):
        assert coerce_value(None, "integer") is None

    def test_no_data_type(self):
        obj = object()
        assert coerce_value(obj) is obj

    def test_unknown_data_type(self):
        assert coerce_value("x", "uuid-ish") == "x"


class TestCoercers:
    def test_string(self):
        assert coerce_value(5, "string") == "5"

    def test_integer(self):
        assert coerce_value("42", "int") == 42
        assert coerce_value(3.0, "integer") == 3

    def test_integer_rejects_fraction(self):
        with pytest.raises(ParamTypeError):
            coerce_value("1.5", "integer")

    def test_integer_rejects_bool(self):
        with pytest.raises(ParamTypeError):
            coerce_value(True, "integer")

    def test_number_with_scale(self):
        assert coerce_value("2.71828", "number", numeric_scale=2) == 2.72

    def test_decimal_with_scale(self):
        assert coerce_value(1.005, "decimal", numeric_scale=1) == Decimal("1.0")

    def test_decimal_invalid(self):
        with pytest.raises(ParamTypeError, match="Invalid decimal"):
            coerce_value("abc", "decimal")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("0", False), (1, True), ("No", False)])
    def test_boolean(self, raw, expected):
        assert coerce_value(raw, "bool") is expected

    def test_boolean_invalid(self):
        with pytest.raises(ParamTypeError):
            coerce_value("maybe", "boolean")

    def test_date(self):
        assert coerce_value("2024-02-29", "date") == date(2024, 2, 29)
        assert coerce_value(datetime(2024, 1, 2, 3, 4), "date") == date(2024, 1, 2)

    def test_datetime(self):
        assert coerce_value("2024-01-02T03:04:05", "timestamp") == datetime(2024, 1, 2, 3, 4, 5)
        assert coerce_value(date(2024, 1, 2), "datetime") == datetime(2024, 1, 2)

    def test_json(self):
        assert coerce_value({"a": [1, 2]}, "json") == '{"a": [1, 2]}'
        assert coerce_value('{"a": 1}', "json") == '{"a": 1}'

    def test_json_invalid_string(self):
        with pytest.raises(ParamTypeError, match="Invalid JSON"):
            coerce_value("{not json", "json")

"""
Parameter value coercion by ``ParameterMapping.data_type``.

Runs on every resolved value before it is handed to the driver. ``None``
always passes through (binds SQL NULL); an unknown or missing data_type
leaves the value untouched.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable


class ParamTypeError(ValueError):
    """Raised when a parameter value fails type coercion."""

    pass


def _coerce_string(value: Any) -> str:
    return str(value)


def _coerce_number(value: Any) -> float:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return float(value)
    s = str(value).strip()
    if not s:
        raise ParamTypeError("Value is empty")
    try:
        return float(s)
    except ValueError as e:
        raise ParamTypeError(f"Invalid number: {s!r}") from e


def _coerce_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ParamTypeError("Boolean not allowed for decimal")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    s = str(value).strip()
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise ParamTypeError(f"Invalid decimal: {s!r}") from e


def _coerce_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ParamTypeError("Boolean not allowed for integer")
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if value != int(value):
            raise ParamTypeError(f"Expected integer, got: {value}")
        return int(value)
    s = str(value).strip()
    if not s:
        raise ParamTypeError("Value is empty")
    try:
        x = float(s)
    except ValueError as e:
        raise ParamTypeError(f"Invalid integer: {s!r}") from e
    if not x.is_integer():
        raise ParamTypeError(f"Expected integer, got: {s!r}")
    return int(x)


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 0:
            return False
        if value == 1:
            return True
        raise ParamTypeError(f"Expected boolean, got integer: {value}")
    s = str(value).strip().lower()
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no"):
        return False
    raise ParamTypeError(f"Expected boolean (true/false, 1/0, yes/no), got: {value!r}")


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ParamTypeError(f"Invalid date (expected YYYY-MM-DD): {value!r}") from e


def _coerce_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ParamTypeError(f"Invalid datetime (expected ISO 8601): {value!r}") from e


def _coerce_json(value: Any) -> str:
    """Serialise dict/list for JSON columns; strings must already be valid JSON."""
    if isinstance(value, str):
        try:
            json.loads(value)
        except json.JSONDecodeError as e:
            raise ParamTypeError(f"Invalid JSON: {e}") from e
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        raise ParamTypeError(f"Value is not JSON serialisable: {e}") from e


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "string": _coerce_string,
    "str": _coerce_string,
    "number": _coerce_number,
    "float": _coerce_number,
    "decimal": _coerce_decimal,
    "integer": _coerce_integer,
    "int": _coerce_integer,
    "boolean": _coerce_boolean,
    "bool": _coerce_boolean,
    "date": _coerce_date,
    "datetime": _coerce_datetime,
    "timestamp": _coerce_datetime,
    "json": _coerce_json,
    "object": _coerce_json,
    "array": _coerce_json,
}


def coerce_value(value: Any, data_type: str | None = None, numeric_scale: int | None = None) -> Any:
    """
    Coerce *value* to *data_type*. None passes through; unknown types are a
    pass-through too. numeric_scale rounds number/decimal results.
    """
    if value is None or not data_type:
        return value
    coerce_fn = _COERCERS.get(data_type.strip().lower())
    if coerce_fn is None:
        return value
    out = coerce_fn(value)
    if numeric_scale is not None:
        if isinstance(out, Decimal):
            out = out.quantize(Decimal(1).scaleb(-numeric_scale))
        elif isinstance(out, float):
            out = round(out, numeric_scale)
    return out

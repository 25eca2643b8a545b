"""Primitive coercion shared by every step.

Step records accept either the native value or its string form.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from atf.core.models import ValueType

_TRUE_STRINGS = frozenset({"true", "1", "yes"})


def parse_bool(value: Any, default: bool = False) -> bool:
    """true | "true" | 1 | "1" | "yes" (any case) -> True, anything else False.

    None returns `default`.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value == 1
    return str(value).strip().lower() in _TRUE_STRINGS


def parse_int(value: Any) -> int | None:
    """Parse an int from an int, an integral float or a numeric string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        number = parse_float(text)
        if number is not None and number.is_integer():
            return int(number)
        return None


def parse_float(value: Any) -> float | None:
    """Parse a float from a number or a numeric string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_duration_seconds(value: Any) -> timedelta | None:
    """Durations in seconds: 5, 5.0, "5" -> timedelta(seconds=5); 0.5 -> 500 ms."""
    if value is None:
        return None
    if isinstance(value, timedelta):
        return value
    seconds = parse_float(value)
    if seconds is None:
        msg = f"not a duration in seconds: {value!r}"
        raise ValueError(msg)
    if seconds < 0:
        msg = f"duration must not be negative: {value!r}"
        raise ValueError(msg)
    return timedelta(seconds=seconds)


def duration_to_seconds(value: timedelta | None) -> int | float | None:
    """Serialize a duration to seconds: an int when whole, else a float."""
    if value is None:
        return None
    seconds = value.total_seconds()
    if seconds.is_integer():
        return int(seconds)
    return seconds


def coerce_value(value: Any, value_type: ValueType) -> Any:
    """Convert a resolved literal into the declared type.

    None stays None. Raises ValueError when the literal does not parse.
    """
    if value is None:
        return None
    if value_type == ValueType.BOOL:
        return parse_bool(value)
    if value_type == ValueType.INT:
        number = parse_int(value)
    elif value_type == ValueType.DOUBLE:
        number = parse_float(value)
    else:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
    if number is None:
        msg = f"cannot convert {value!r} to {value_type.value}"
        raise ValueError(msg)
    return number

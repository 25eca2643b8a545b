"""Tests for primitive coercion."""

from __future__ import annotations

from datetime import timedelta

import pytest

from atf.core.coercion import (
    coerce_value,
    duration_to_seconds,
    parse_bool,
    parse_duration_seconds,
    parse_float,
    parse_int,
)
from atf.core.models import ValueType


class TestParseBool:
    @pytest.mark.parametrize(
        "value", [True, "true", "TRUE", " True ", 1, "1", "yes", "Yes", 1.0]
    )
    def test_truthy(self, value: object) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, "false", 0, "0", "no", "", "on", 2, "y"])
    def test_falsy(self, value: object) -> None:
        assert parse_bool(value) is False

    def test_none_uses_default(self) -> None:
        assert parse_bool(None) is False
        assert parse_bool(None, default=True) is True


class TestParseNumbers:
    @pytest.mark.parametrize(
        ("value", "expected"), [(12, 12), ("12", 12), (12.0, 12), ("12.0", 12)]
    )
    def test_int(self, value: object, expected: int) -> None:
        assert parse_int(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", 1.5, True])
    def test_int_invalid(self, value: object) -> None:
        assert parse_int(value) is None

    def test_float(self) -> None:
        assert parse_float("1.5") == 1.5
        assert parse_float(2) == 2.0
        assert parse_float("x") is None
        assert parse_float(False) is None


class TestDurations:
    @pytest.mark.parametrize("value", [5, 5.0, "5", " 5 "])
    def test_parse(self, value: object) -> None:
        assert parse_duration_seconds(value) == timedelta(seconds=5)

    def test_none(self) -> None:
        assert parse_duration_seconds(None) is None

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="not a duration"):
            parse_duration_seconds("soon")

    def test_negative(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            parse_duration_seconds(-1)

    def test_to_seconds(self) -> None:
        assert duration_to_seconds(timedelta(seconds=7)) == 7
        assert duration_to_seconds(None) is None

    def test_fractional_seconds_survive(self) -> None:
        assert duration_to_seconds(timedelta(milliseconds=500)) == 0.5
        assert isinstance(duration_to_seconds(timedelta(seconds=3.0)), int)
        short = timedelta(seconds=0.2)
        assert parse_duration_seconds(duration_to_seconds(short)) == short


class TestCoerceValue:
    def test_bool(self) -> None:
        assert coerce_value("yes", ValueType.BOOL) is True

    def test_int(self) -> None:
        assert coerce_value("42", ValueType.INT) == 42

    def test_double(self) -> None:
        assert coerce_value("4.5", ValueType.DOUBLE) == 4.5

    def test_string(self) -> None:
        assert coerce_value(7, ValueType.STRING) == "7"
        assert coerce_value(True, ValueType.STRING) == "true"

    def test_none_passes_through(self) -> None:
        assert coerce_value(None, ValueType.INT) is None

    def test_invalid_number(self) -> None:
        with pytest.raises(ValueError, match="int"):
            coerce_value("forty", ValueType.INT)

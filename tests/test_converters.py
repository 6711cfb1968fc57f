from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Literal, Union

import pytest

from cliroute.converters import (
    coerce_bool,
    coerce_timedelta,
    coerce_value,
    is_supported_type,
    resolve_converter,
)
from cliroute.exceptions import CliConfigurationError


# --- Tests ---
@pytest.mark.parametrize(
    "value, target_type, expected",
    [
        ("42", int, 42),
        ("3.14", float, 3.14),
        ("True", bool, True),
        ("hello", str, "hello"),
        ("", str, ""),
        ("False", bool, False),
    ],
)
def test_coerce_value_basic(value, target_type, expected):
    assert coerce_value(value, target_type) == expected


@pytest.mark.parametrize(
    "value, target_type, expected",
    [
        ("42", int | float, 42),
        ("3.14", int | float, 3.14),
        ("hello", str | int, "hello"),
        ("1", bool | str, True),
    ],
)
def test_coerce_value_union_success(value, target_type, expected):
    assert coerce_value(value, target_type) == expected


def test_coerce_value_union_failure():
    with pytest.raises(ValueError) as excinfo:
        coerce_value("abc", int | float)
    assert "could not be coerced" in str(excinfo.value)


def test_coerce_value_typing_union_equivalent():
    assert coerce_value("123", Union[int, str]) == 123
    assert coerce_value("abc", Union[int, str]) == "abc"
    assert coerce_value("7", Union[int, None]) == 7


def test_coerce_value_enum():
    class Color(Enum):
        RED = "red"
        GREEN = "green"

    assert coerce_value("red", Color) == Color.RED
    assert coerce_value("GREEN", Color) == Color.GREEN

    with pytest.raises(ValueError):
        coerce_value("yellow", Color)


def test_coerce_value_int_enum():
    class Status(Enum):
        SUCCESS = 0
        FAILURE = 1

    assert coerce_value("0", Status) == Status.SUCCESS
    assert coerce_value("failure", Status) == Status.FAILURE

    with pytest.raises(ValueError):
        coerce_value("3", Status)


def test_literal_coercion():
    assert coerce_value("dev", Literal["dev", "prod"]) == "dev"
    with pytest.raises(ValueError):
        coerce_value("staging", Literal["dev", "prod"])


def test_path_coercion():
    result = coerce_value("/tmp/test.txt", Path)
    assert isinstance(result, Path)
    assert str(result) == "/tmp/test.txt"


def test_datetime_coercion():
    result = coerce_value("2023-10-01T13:00:00", datetime)
    assert isinstance(result, datetime)
    assert result.year == 2023 and result.month == 10

    assert coerce_value("2024-02-29", date) == date(2024, 2, 29)

    with pytest.raises(ValueError):
        coerce_value("not-a-date", datetime)


def test_decimal_coercion():
    assert coerce_value("1.10", Decimal) == Decimal("1.10")
    with pytest.raises(ValueError):
        coerce_value("one", Decimal)


def test_bool_coercion():
    assert coerce_bool("true") is True
    assert coerce_bool("0") is False
    assert coerce_bool("yes") is True
    assert coerce_bool("off") is False
    with pytest.raises(ValueError):
        coerce_bool("maybe")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("90", timedelta(seconds=90)),
        ("2.5", timedelta(seconds=2.5)),
        ("5m", timedelta(minutes=5)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("250ms", timedelta(milliseconds=250)),
        ("1d", timedelta(days=1)),
        ("01:30", timedelta(minutes=1, seconds=30)),
        ("01:00:05", timedelta(hours=1, seconds=5)),
    ],
)
def test_timedelta_coercion(value, expected):
    assert coerce_timedelta(value) == expected
    assert coerce_value(value, timedelta) == expected


def test_timedelta_rejects_garbage():
    with pytest.raises(ValueError):
        coerce_timedelta("soon")


def test_supported_types():
    assert is_supported_type(int)
    assert is_supported_type(Path)
    assert is_supported_type(int | None)
    assert not is_supported_type(dict)
    assert not is_supported_type(object)


def test_resolve_converter_unsupported_type():
    class Opaque:
        pass

    with pytest.raises(CliConfigurationError):
        resolve_converter(Opaque)


def test_resolve_converter_rejects_non_callable():
    with pytest.raises(CliConfigurationError):
        resolve_converter(str, converter="not callable")


def test_resolve_converter_explicit_wins():
    convert = resolve_converter(int, converter=lambda text: text.upper())
    assert convert("abc") == "ABC"
    assert resolve_converter(int)("12") == 12

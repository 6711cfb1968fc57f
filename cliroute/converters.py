# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Value coercion for operand materializers.

Every option and positional argument declares a target type. `resolve_converter`
turns that declaration into a one-argument converter once, at registration time,
and raises `CliConfigurationError` when no converter exists for the type. The
materializers then call the converter for each decoded literal.

Converters report malformed user text by raising `ValueError`. The materializers
turn `ValueError` into a user error and any other exception into a configuration
error, so custom converters should follow the same convention.

Functions:
- coerce_bool: Convert a string to a boolean.
- coerce_enum: Convert a string or raw value to an Enum instance.
- coerce_timedelta: Convert `90`, `90s`, `1h30m` or `01:30:00` to a timedelta.
- coerce_value: General-purpose coercion to a supported target type.
- resolve_converter: Resolve the converter for a declared target type.
"""
from __future__ import annotations

import functools
import re
import types
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import EnumMeta
from pathlib import Path
from typing import Any, Callable, Literal, Union, get_args, get_origin

from dateutil import parser as date_parser

from cliroute.exceptions import CliConfigurationError

Converter = Callable[[str], Any]

SIMPLE_TYPES: tuple[type, ...] = (str, int, float, complex, Path, uuid.UUID)

_DURATION_PART = re.compile(r"(?P<amount>\d+(?:\.\d+)?)(?P<unit>ms|[dhms])")
_DURATION = re.compile(r"^(?:\d+(?:\.\d+)?(?:ms|[dhms]))+$")
_DURATION_UNITS = {
    "d": "days",
    "h": "hours",
    "m": "minutes",
    "s": "seconds",
    "ms": "milliseconds",
}


def coerce_bool(value: str) -> bool:
    """
    Convert a string to a boolean.

    Accepts various truthy and falsy representations such as 'true', 'yes', '0', 'off', etc.

    Raises:
        ValueError: If the text is not a recognized boolean.
    """
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in {"true", "t", "1", "yes", "y", "on"}:
        return True
    elif normalized in {"false", "f", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"'{value}' is not a valid boolean")


def coerce_enum(value: Any, enum_type: EnumMeta) -> Any:
    """
    Convert a raw value or string to an Enum instance.

    Tries to resolve by name, value, or coerced base type.

    Raises:
        ValueError: If the value cannot be resolved to a valid Enum member.
    """
    if isinstance(value, enum_type):
        return value

    if isinstance(value, str):
        try:
            return enum_type[value]
        except KeyError:
            pass
        for member in enum_type:
            if member.name.lower() == value.lower():
                return member

    base_type = type(next(iter(enum_type)).value)
    try:
        coerced_value = base_type(value)
        return enum_type(coerced_value)
    except (ValueError, TypeError):
        values = [str(enum.value) for enum in enum_type]
        raise ValueError(f"'{value}' should be one of {{{', '.join(values)}}}") from None


def coerce_timedelta(value: str) -> timedelta:
    """
    Convert a duration to a `timedelta`.

    Accepted forms: plain seconds (`90`, `2.5`), unit suffixes that may be
    combined (`90s`, `5m`, `1h30m`, `1d`, `250ms`) and clock notation
    (`MM:SS`, `HH:MM:SS`).

    Raises:
        ValueError: If the text is not a duration.
    """
    text = value.strip().lower()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        try:
            return timedelta(seconds=seconds)
        except OverflowError as error:
            raise ValueError(f"'{value}' is out of range for a duration") from error

    if _DURATION.match(text):
        parts: dict[str, float] = {}
        for match in _DURATION_PART.finditer(text):
            unit = _DURATION_UNITS[match.group("unit")]
            parts[unit] = parts.get(unit, 0.0) + float(match.group("amount"))
        return timedelta(**parts)

    pieces = text.split(":")
    if 2 <= len(pieces) <= 3 and all(piece.isdigit() for piece in pieces):
        numbers = [int(piece) for piece in pieces]
        if len(numbers) == 2:
            numbers.insert(0, 0)
        hours, minutes, seconds = numbers
        return timedelta(hours=hours, minutes=minutes, seconds=seconds)

    raise ValueError(f"'{value}' is not a valid duration")


def coerce_value(value: str, target_type: Any) -> Any:
    """
    Attempt to convert a string to the given target type.

    Handles typing constructs such as Union, Optional and Literal, plus Enum,
    bool, datetime, date, timedelta and Decimal.

    Raises:
        ValueError: If conversion fails or the value is invalid.
    """
    origin = get_origin(target_type)
    args = get_args(target_type)

    if target_type is Any:
        return value

    if origin is Literal:
        for arg in args:
            if value == str(arg):
                return arg
        raise ValueError(f"Value '{value}' is not a valid literal for type {target_type}")

    if isinstance(target_type, types.UnionType) or origin is Union:
        for arg in args:
            if arg is type(None):
                continue
            try:
                return coerce_value(value, arg)
            except ValueError:
                continue
        raise ValueError(f"Value '{value}' could not be coerced to any of {args}")

    if isinstance(target_type, EnumMeta):
        return coerce_enum(value, target_type)

    if target_type is bool:
        return coerce_bool(value)

    if target_type is datetime:
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError) as error:
            raise ValueError(f"Value '{value}' could not be parsed as a datetime") from error

    if target_type is date:
        try:
            return date_parser.parse(value).date()
        except (ValueError, OverflowError) as error:
            raise ValueError(f"Value '{value}' could not be parsed as a date") from error

    if target_type is timedelta:
        return coerce_timedelta(value)

    if target_type is Decimal:
        try:
            return Decimal(value)
        except InvalidOperation as error:
            raise ValueError(f"Value '{value}' is not a valid decimal") from error

    return target_type(value)


def is_supported_type(target_type: Any) -> bool:
    """Return True if `coerce_value` knows how to build `target_type` from text."""
    origin = get_origin(target_type)
    if target_type is Any or origin is Literal:
        return True
    if isinstance(target_type, types.UnionType) or origin is Union:
        members = [arg for arg in get_args(target_type) if arg is not type(None)]
        return bool(members) and all(is_supported_type(arg) for arg in members)
    if isinstance(target_type, EnumMeta):
        return True
    return target_type in SIMPLE_TYPES or target_type in (
        bool,
        datetime,
        date,
        timedelta,
        Decimal,
    )


def type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", None) or str(target_type)


def resolve_converter(target_type: Any = str, converter: Converter | None = None) -> Converter:
    """
    Resolve the converter for a declared target type.

    Args:
        target_type (Any): Declared element type.
        converter (Callable | None): Explicit converter, used as is when given.

    Returns:
        Callable[[str], Any]: A one-argument converter.

    Raises:
        CliConfigurationError: If the converter is not callable or no converter
            exists for `target_type`.
    """
    if converter is not None:
        if not callable(converter):
            raise CliConfigurationError(f"Converter {converter!r} is not callable.")
        return converter
    if target_type is str:
        return str
    if not is_supported_type(target_type):
        raise CliConfigurationError(
            f"No converter is registered for type '{type_name(target_type)}'. "
            "Pass an explicit converter."
        )
    return functools.partial(coerce_value, target_type=target_type)

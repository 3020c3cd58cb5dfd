"""Destination type conversion for resolved field values.

Resolved fields always arrive as strings. This module turns them into
the value a destination column stores, keyed by destination type name.
"""

from __future__ import annotations

import json
import re
from typing import Callable

from core.constants import SUPPORTED_DESTINATION_TYPES
from core.errors import ValueConversionError

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_BOOLEAN_LITERALS = {"true": True, "false": False}


def convert_value(raw_value: str, destination_type: str) -> object:
    """Convert a resolved string into its destination representation.

    Args:
        raw_value: String form of the resolved field.
        destination_type: One of ``SUPPORTED_DESTINATION_TYPES``.

    Returns:
        Converted value.

    Raises:
        ValueConversionError: If the type is unknown or the value is malformed.
    """
    converter = _CONVERTERS.get(destination_type)
    if converter is None:
        supported_rows = ", ".join(SUPPORTED_DESTINATION_TYPES)
        raise ValueConversionError(
            f"Unsupported destination type '{destination_type}'. Use one of: {supported_rows}."
        )
    try:
        return converter(raw_value)
    except (ValueError, TypeError) as error:
        raise ValueConversionError(
            f"Cannot convert '{raw_value}' to {destination_type}: {error}"
        ) from error


def parse_integer(raw_value: str) -> int:
    """Parse a base-10 integer literal such as an epoch-millis timestamp.

    Raises:
        ValueError: If the literal has a fraction, exponent, or stray characters.
    """
    if not _INTEGER_PATTERN.fullmatch(raw_value):
        raise ValueError(f"invalid integer literal '{raw_value}'")
    return int(raw_value)


def _to_boolean(raw_value: str) -> bool:
    normalized_value = raw_value.strip().lower()
    if normalized_value not in _BOOLEAN_LITERALS:
        raise ValueError("expected true or false")
    return _BOOLEAN_LITERALS[normalized_value]


def _to_bytes(raw_value: str) -> bytes:
    return raw_value.encode("utf-8")


_CONVERTERS: dict[str, Callable[[str], object]] = {
    "string": str,
    "int": parse_integer,
    "long": parse_integer,
    "float": float,
    "double": float,
    "boolean": _to_boolean,
    "bytes": _to_bytes,
    "json": json.loads,
}

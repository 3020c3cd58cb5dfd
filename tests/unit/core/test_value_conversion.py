"""Unit tests for destination type conversion."""

from __future__ import annotations

import pytest

from core.errors import ValueConversionError
from core.value_conversion import convert_value, parse_integer


@pytest.mark.parametrize(
    ("raw_value", "destination_type", "expected"),
    [
        ("Ada", "string", "Ada"),
        ("42", "int", 42),
        ("-1700000000000", "long", -1700000000000),
        ("1.50", "double", 1.5),
        ("2e3", "float", 2000.0),
        ("TRUE", "boolean", True),
        ("false", "boolean", False),
        ("héllo", "bytes", "héllo".encode("utf-8")),
        ('{"a": [1]}', "json", {"a": [1]}),
    ],
)
def test_convert_value_supported_types(
    raw_value: str,
    destination_type: str,
    expected: object,
) -> None:
    """Each destination type should convert its canonical literal."""
    assert convert_value(raw_value, destination_type) == expected


@pytest.mark.parametrize(
    ("raw_value", "destination_type"),
    [
        ("old", "long"),
        ("1.5", "int"),
        ("1_000", "int"),
        ("yes", "boolean"),
        ("abc", "double"),
        ("{", "json"),
        ("x", "decimal"),
    ],
)
def test_convert_value_rejects_malformed_literals(raw_value: str, destination_type: str) -> None:
    """Malformed literals and unknown types should raise conversion errors."""
    with pytest.raises(ValueConversionError):
        convert_value(raw_value, destination_type)

    assert True


def test_parse_integer_rejects_whitespace() -> None:
    """Timestamp literals must be bare integers."""
    with pytest.raises(ValueError):
        parse_integer(" 12")

    assert parse_integer("+12") == 12

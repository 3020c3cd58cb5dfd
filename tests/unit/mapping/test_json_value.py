"""Unit tests for JSON record parsing and node classification."""

from __future__ import annotations

import pytest

from core.errors import MalformedRecordError
from mapping.json_value import JsonNumber, json_kind, parse_json_record, scalar_text


def test_parse_json_record_returns_object() -> None:
    """A JSON object line should parse to a mapping."""
    tree = parse_json_record('{"a": {"b": 1}}')

    assert json_kind(tree) == "object"


def test_parse_json_record_wraps_numbers_as_literals() -> None:
    """Numbers should be kept as their literal text."""
    tree = parse_json_record('{"n": 10.0}')

    assert isinstance(tree["n"], JsonNumber) and tree["n"] == "10.0"


@pytest.mark.parametrize("raw_record", ["not valid json", "", '{"a": 1', '{"a": NaN}'])
def test_parse_json_record_rejects_invalid_json(raw_record: str) -> None:
    """Invalid JSON should raise a malformed record error."""
    with pytest.raises(MalformedRecordError):
        parse_json_record(raw_record)


@pytest.mark.parametrize("raw_record", ["[1, 2]", '"text"', "42", "null"])
def test_parse_json_record_rejects_non_objects(raw_record: str) -> None:
    """Records must be JSON objects."""
    with pytest.raises(MalformedRecordError):
        parse_json_record(raw_record)


def test_json_kind_classifies_every_kind() -> None:
    """Every JSON kind should have exactly one classification."""
    values = [{}, [], "s", JsonNumber("1"), 1, 1.5, True, None]

    assert [json_kind(value) for value in values] == [
        "object",
        "array",
        "string",
        "number",
        "number",
        "number",
        "boolean",
        "null",
    ]


def test_json_kind_rejects_foreign_types() -> None:
    """Non-JSON Python objects should not be silently classified."""
    with pytest.raises(TypeError):
        json_kind(object())


def test_scalar_text_rejects_containers() -> None:
    """Only scalars have a text form."""
    with pytest.raises(TypeError):
        scalar_text({"a": "b"})


def test_parse_json_record_rejects_excessive_nesting() -> None:
    """Nesting deeper than the parser can handle is a malformed record."""
    with pytest.raises(MalformedRecordError):
        parse_json_record("[" * 100000 + "]" * 100000)

    assert True

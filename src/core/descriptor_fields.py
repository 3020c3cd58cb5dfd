"""Type-safe field parsing helpers for import descriptors.

This module centralizes primitive parsing so descriptor validation
produces consistent error messages for every nested section.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.errors import DescriptorError


def expect_mapping(value: object, context: str) -> Mapping[str, object]:
    """Return ``value`` as a string-keyed mapping."""
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise DescriptorError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise DescriptorError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def expect_sequence(value: object, context: str) -> Sequence[object]:
    """Return ``value`` as a non-string sequence."""
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise DescriptorError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def required_string(mapping: Mapping[str, object], field_name: str, context: str) -> str:
    """Read a required non-blank string field."""
    value = optional_string(mapping, field_name, context)
    if value is None:
        raise DescriptorError(f"Invalid {context}: missing required field '{field_name}'.")
    return value


def optional_string(mapping: Mapping[str, object], field_name: str, context: str) -> str | None:
    """Read an optional string field, treating blank values as absent."""
    value = mapping.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise DescriptorError(
        f"Invalid {context}: field '{field_name}' must be a string when provided."
    )


def reject_unknown_keys(
    mapping: Mapping[str, object],
    allowed_keys: set[str],
    context: str,
) -> None:
    """Fail on keys outside ``allowed_keys``."""
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise DescriptorError(f"{context} contains unknown fields: {', '.join(unknown_keys)}.")

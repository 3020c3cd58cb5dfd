"""Import descriptor loading and validation.

This module loads the YAML (or JSON) file that maps record fields onto
destination columns and validates it into an immutable descriptor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, cast

from core.constants import (
    DEFAULT_DESTINATION_TYPE,
    DESCRIPTOR_VERSION,
    SUPPORTED_DESTINATION_TYPES,
)
from core.descriptor_fields import (
    expect_mapping,
    expect_sequence,
    optional_string,
    reject_unknown_keys,
    required_string,
)
from core.errors import DependencyError, DescriptorError
from core.types import ColumnMapping, ImportDescriptor, JsonPath, ValueConverter
from core.value_conversion import convert_value


def load_import_descriptor(
    descriptor_path: str,
    converters: Mapping[str, ValueConverter] | None = None,
) -> ImportDescriptor:
    """Load and validate an import descriptor from disk.

    Args:
        descriptor_path: File path to a YAML or JSON descriptor.
        converters: Optional custom converters keyed by ``family:qualifier``.

    Returns:
        Fully validated descriptor.

    Raises:
        DependencyError: If PyYAML is unavailable.
        DescriptorError: If the file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(descriptor_path)
    return parse_import_descriptor(payload, converters)


def parse_import_descriptor(
    payload: object,
    converters: Mapping[str, ValueConverter] | None = None,
) -> ImportDescriptor:
    """Validate an already-parsed descriptor payload.

    Args:
        payload: Descriptor root object.
        converters: Optional custom converters keyed by ``family:qualifier``.

    Returns:
        Immutable import descriptor.

    Raises:
        DescriptorError: If schema checks fail.
    """
    root_mapping = expect_mapping(payload, "descriptor root")
    reject_unknown_keys(
        root_mapping,
        {"version", "name", "entity_id_source", "override_timestamp_source", "families"},
        "Descriptor",
    )
    _parse_version(root_mapping)
    name = required_string(root_mapping, "name", "descriptor root")
    entity_id_source = required_string(root_mapping, "entity_id_source", "descriptor root")
    timestamp_source = optional_string(
        root_mapping, "override_timestamp_source", "descriptor root"
    )
    columns = _parse_families(root_mapping, converters or {})
    _reject_unused_converters(columns, converters or {})
    return ImportDescriptor(
        name=name,
        entity_id_source=JsonPath.parse(entity_id_source),
        columns=columns,
        timestamp_source=JsonPath.parse(timestamp_source) if timestamp_source else None,
    )


def _load_yaml_payload(descriptor_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise DependencyError(
            "Descriptor loading requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    descriptor_file = Path(descriptor_path).expanduser().resolve()
    if not descriptor_file.exists():
        raise DescriptorError(
            f"Descriptor file does not exist at {descriptor_file}. Provide a valid file path."
        )
    try:
        payload = cast(object, yaml.safe_load(descriptor_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise DescriptorError(
            f"Failed to read descriptor at {descriptor_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise DescriptorError(
            f"Failed to parse descriptor at {descriptor_file}: {error}. Fix the syntax and retry."
        ) from error
    if payload is None:
        raise DescriptorError(
            f"Descriptor at {descriptor_file} is empty. Define 'entity_id_source' and 'families'."
        )
    return payload


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version", DESCRIPTOR_VERSION)
    if isinstance(raw_version, bool) or not isinstance(raw_version, int):
        raise DescriptorError("Descriptor field 'version' must be an integer. Set version: 1.")
    if raw_version != DESCRIPTOR_VERSION:
        raise DescriptorError(
            f"Unsupported descriptor version {raw_version}. Use version: {DESCRIPTOR_VERSION}."
        )
    return raw_version


def _parse_families(
    root_mapping: Mapping[str, object],
    converters: Mapping[str, ValueConverter],
) -> tuple[ColumnMapping, ...]:
    raw_families = root_mapping.get("families")
    if raw_families is None:
        raise DescriptorError(
            "Descriptor missing required field 'families'. Add at least one column family."
        )
    family_rows = expect_sequence(raw_families, "descriptor families")
    columns: list[ColumnMapping] = []
    for family_index, family_value in enumerate(family_rows):
        context = f"descriptor family #{family_index + 1}"
        family_mapping = expect_mapping(family_value, context)
        reject_unknown_keys(family_mapping, {"name", "columns"}, context.capitalize())
        family_name = required_string(family_mapping, "name", context)
        column_rows = expect_sequence(family_mapping.get("columns", []), f"{context} columns")
        for column_index, column_value in enumerate(column_rows):
            column_context = f"{family_name} column #{column_index + 1}"
            columns.append(_parse_column(family_name, column_value, column_context, converters))
    if not columns:
        raise DescriptorError("Descriptor must map at least one destination column.")
    return tuple(columns)


def _parse_column(
    family_name: str,
    column_value: object,
    context: str,
    converters: Mapping[str, ValueConverter],
) -> ColumnMapping:
    column_mapping = expect_mapping(column_value, context)
    reject_unknown_keys(column_mapping, {"name", "source", "type"}, context.capitalize())
    qualifier = required_string(column_mapping, "name", context)
    source = required_string(column_mapping, "source", context)
    destination_type = (
        optional_string(column_mapping, "type", context) or DEFAULT_DESTINATION_TYPE
    )
    if destination_type not in SUPPORTED_DESTINATION_TYPES:
        supported_rows = ", ".join(SUPPORTED_DESTINATION_TYPES)
        raise DescriptorError(
            f"Invalid {context}: unsupported type '{destination_type}'. "
            f"Use one of: {supported_rows}."
        )
    return ColumnMapping(
        family=family_name,
        qualifier=qualifier,
        source_path=JsonPath.parse(source),
        destination_type=destination_type,
        value_converter=converters.get(f"{family_name}:{qualifier}", convert_value),
    )


def _reject_unused_converters(
    columns: tuple[ColumnMapping, ...],
    converters: Mapping[str, ValueConverter],
) -> None:
    column_names = {column.column_name for column in columns}
    unknown_names = sorted(set(converters) - column_names)
    if unknown_names:
        raise DescriptorError(
            f"Custom converters reference unmapped columns: {', '.join(unknown_names)}."
        )

"""Per-record production of destination writes.

This module maps one JSON record onto the destination columns of an
import descriptor. Missing fields are soft failures reported per column;
malformed records and unconvertible values propagate to the caller.
"""

from __future__ import annotations

from typing import Callable, Mapping

from core.errors import TimestampConversionError, ValueConversionError
from core.types import (
    ColumnMapping,
    ConversionPolicy,
    ImportDescriptor,
    IncompleteColumn,
    ProduceOutcome,
)
from core.value_conversion import parse_integer
from mapping.json_value import parse_json_record
from mapping.path_resolver import NOT_FOUND, resolve_path
from store.write_sink import WriteSink

IncompleteHandler = Callable[[str, IncompleteColumn], None]

_UNRESOLVED = object()


class RecordMapper:
    """Maps records onto one import descriptor.

    The mapper keeps no per-record state, so one instance can be shared
    across threads as long as the sink tolerates concurrent ``put`` calls.
    """

    def __init__(
        self,
        descriptor: ImportDescriptor,
        incomplete_handler: IncompleteHandler | None = None,
        conversion_policy: ConversionPolicy = "abort",
    ) -> None:
        if conversion_policy not in ("abort", "skip"):
            raise ValueError(f"Unsupported conversion policy '{conversion_policy}'.")
        self._descriptor = descriptor
        self._incomplete_handler = incomplete_handler
        self._conversion_policy = conversion_policy

    @property
    def descriptor(self) -> ImportDescriptor:
        return self._descriptor

    def produce(self, raw_record: str, sink: WriteSink) -> ProduceOutcome:
        """Emit writes for every resolvable column of one record.

        Args:
            raw_record: One input line holding a JSON object.
            sink: Destination for writes and entity id construction.

        Returns:
            Outcome with the write count and incomplete columns.

        Raises:
            MalformedRecordError: If the record is not a JSON object.
            ValueConversionError: If a value cannot be converted under the
                ``abort`` conversion policy.
            TimestampConversionError: If the override timestamp is missing
                or not an integer.
        """
        tree = parse_json_record(raw_record)
        entity_source = resolve_path(tree, self._descriptor.entity_id_source)
        if entity_source is NOT_FOUND:
            return ProduceOutcome(
                abandoned=True,
                missing_entity_id_source=str(self._descriptor.entity_id_source),
            )
        entity_id = sink.entity_id_of(entity_source)
        timestamp: object = _UNRESOLVED
        writes_emitted = 0
        incomplete_columns: list[IncompleteColumn] = []
        for column in self._descriptor.columns:
            field_value = resolve_path(tree, column.source_path)
            if field_value is NOT_FOUND:
                self._report(raw_record, _incomplete(column, "missing"), incomplete_columns)
                continue
            try:
                converted_value = _convert_column(column, field_value)
            except ValueConversionError:
                if self._conversion_policy == "abort":
                    raise
                self._report(
                    raw_record, _incomplete(column, "conversion_failed"), incomplete_columns
                )
                continue
            if timestamp is _UNRESOLVED:
                timestamp = self._resolve_timestamp(tree)
            sink.put(entity_id, column.family, column.qualifier, converted_value, timestamp)
            writes_emitted += 1
        return ProduceOutcome(
            writes_emitted=writes_emitted,
            incomplete_columns=tuple(incomplete_columns),
        )

    def _resolve_timestamp(self, tree: Mapping[str, object]) -> int | None:
        timestamp_source = self._descriptor.timestamp_source
        if timestamp_source is None:
            return None
        raw_timestamp = resolve_path(tree, timestamp_source)
        if raw_timestamp is NOT_FOUND:
            raise TimestampConversionError(
                f"Missing override timestamp field: {timestamp_source}. "
                "Every record must carry the timestamp source when one is configured."
            )
        try:
            return parse_integer(raw_timestamp)
        except ValueError as error:
            raise TimestampConversionError(
                f"Invalid override timestamp '{raw_timestamp}' at {timestamp_source}: "
                "expected integer epoch milliseconds."
            ) from error

    def _report(
        self,
        raw_record: str,
        column: IncompleteColumn,
        incomplete_columns: list[IncompleteColumn],
    ) -> None:
        incomplete_columns.append(column)
        if self._incomplete_handler is not None:
            self._incomplete_handler(raw_record, column)


def produce_record(
    raw_record: str,
    descriptor: ImportDescriptor,
    sink: WriteSink,
    incomplete_handler: IncompleteHandler | None = None,
    conversion_policy: ConversionPolicy = "abort",
) -> ProduceOutcome:
    """Map one record with a throwaway mapper.

    Args:
        raw_record: One input line holding a JSON object.
        descriptor: Column mapping configuration.
        sink: Destination for writes.
        incomplete_handler: Optional callback per incomplete column.
        conversion_policy: ``abort`` or ``skip`` on conversion failures.

    Returns:
        Outcome for the record.
    """
    mapper = RecordMapper(descriptor, incomplete_handler, conversion_policy)
    return mapper.produce(raw_record, sink)


def _convert_column(column: ColumnMapping, field_value: str) -> object:
    """Convert a resolved value, wrapping converter errors with column context."""
    try:
        return column.convert(field_value)
    except ValueConversionError:
        raise
    except (ValueError, TypeError) as error:
        raise ValueConversionError(
            f"Cannot convert '{field_value}' for column {column.column_name}: {error}"
        ) from error


def _incomplete(column: ColumnMapping, reason: str) -> IncompleteColumn:
    return IncompleteColumn(
        column_name=column.column_name,
        source_path=str(column.source_path),
        reason=reason,  # type: ignore[arg-type]
    )

"""Bulk import orchestration.

This module feeds source lines through the record mapper, reports
incomplete columns through structured logs, and applies the job-level
policy for records that fail hard.
"""

from __future__ import annotations

from typing import Iterable

from core.config import JsonBulkConfig
from core.errors import MappingError
from core.logging_config import get_logger
from core.types import (
    BulkImportSummary,
    EntityId,
    ImportDescriptor,
    ImportOptions,
    IncompleteColumn,
    SourceLine,
)
from ingest.input_reader import read_source_lines
from mapping.record_mapper import RecordMapper
from store.write_sink import WriteSink

_LOGGER = get_logger(__name__)


class BulkImportRunner:
    """Runs one descriptor over a stream of source lines.

    A runner is single-use per thread: it tracks the line being mapped
    so incompleteness reports carry their source location.
    """

    def __init__(
        self,
        descriptor: ImportDescriptor,
        sink: WriteSink,
        options: ImportOptions | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._sink = _CountingSink(sink)
        self._options = options or ImportOptions()
        self._mapper = RecordMapper(
            descriptor,
            incomplete_handler=self._on_incomplete,
            conversion_policy=self._options.conversion_policy,
        )
        self._summary = BulkImportSummary()
        self._current_line: SourceLine | None = None

    def run(self, lines: Iterable[SourceLine]) -> BulkImportSummary:
        """Map every line and return accumulated counters.

        Args:
            lines: Source lines in input order.

        Returns:
            Summary counters for the run.

        Raises:
            MappingError: If a record fails hard under the ``abort`` policy.
        """
        for line in lines:
            self._import_line(line)
            self._summary.writes_emitted = self._sink.cells_put
        self._current_line = None
        return self._summary

    def _import_line(self, line: SourceLine) -> None:
        self._current_line = line
        self._summary.records_read += 1
        try:
            outcome = self._mapper.produce(line.text, self._sink)
        except MappingError as error:
            if self._options.failure_policy == "abort":
                _LOGGER.error("record_failed", location=line.location, error=str(error))
                raise
            self._summary.records_failed += 1
            _LOGGER.warning("record_skipped", location=line.location, error=str(error))
            return
        if outcome.abandoned:
            self._summary.records_abandoned += 1
            _LOGGER.warning(
                "record_abandoned",
                location=line.location,
                entity_id_source=outcome.missing_entity_id_source,
            )
            return
        self._summary.records_imported += 1

    def _on_incomplete(self, raw_record: str, column: IncompleteColumn) -> None:
        counts = self._summary.incomplete_fields
        counts[column.source_path] = counts.get(column.source_path, 0) + 1
        _LOGGER.warning(
            "column_incomplete",
            location=self._current_line.location if self._current_line else None,
            column=column.column_name,
            source_path=column.source_path,
            reason=column.reason,
            detail=column.describe(),
        )


def import_source(
    source_uri: str,
    descriptor: ImportDescriptor,
    sink: WriteSink,
    config: JsonBulkConfig,
    options: ImportOptions | None = None,
) -> BulkImportSummary:
    """Import every line of a source into a sink.

    Args:
        source_uri: Local file, directory, or ``s3://`` prefix.
        descriptor: Column mapping configuration.
        sink: Destination for writes.
        config: Runtime configuration.
        options: Runner options; defaults follow ``config``.

    Returns:
        Summary counters for the run.

    Raises:
        IngestError: If the source cannot be read.
        MappingError: If a record fails hard under the ``abort`` policy.
    """
    import_options = options or ImportOptions(
        failure_policy=config.failure_policy,
        conversion_policy=config.conversion_policy,
    )
    runner = BulkImportRunner(descriptor, sink, import_options)
    summary = runner.run(read_source_lines(source_uri, config))
    _LOGGER.info(
        "bulk_import_completed",
        descriptor=descriptor.name,
        source_uri=source_uri,
        **summary.to_payload(),
    )
    return summary


class _CountingSink:
    """Write sink wrapper counting every cell handed to the destination."""

    def __init__(self, sink: WriteSink) -> None:
        self._sink = sink
        self.cells_put = 0

    def entity_id_of(self, raw_key: str) -> EntityId:
        return self._sink.entity_id_of(raw_key)

    def put(
        self,
        entity_id: EntityId,
        family: str,
        qualifier: str,
        value: object,
        timestamp: int | None = None,
    ) -> None:
        self._sink.put(entity_id, family, qualifier, value, timestamp)
        self.cells_put += 1

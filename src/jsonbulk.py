"""Public SDK surface for jsonbulk.

This module provides a stable import path for library users.
It re-exports the mapping engine, sinks, and typed models.
"""

from __future__ import annotations

from core.config import JsonBulkConfig
from core.descriptor import load_import_descriptor, parse_import_descriptor
from core.types import (
    BulkImportSummary,
    ColumnMapping,
    EntityId,
    ImportDescriptor,
    ImportOptions,
    IncompleteColumn,
    JsonPath,
    ProduceOutcome,
    Write,
)
from core.value_conversion import convert_value
from ingest.bulk_import import BulkImportRunner, import_source
from mapping.path_resolver import NOT_FOUND, resolve_path
from mapping.record_mapper import RecordMapper, produce_record
from store.entity_id import EntityIdFactory
from store.jsonl_sink import JsonlWriteSink
from store.write_sink import InMemoryTableSink, WriteSink

__all__ = [
    "BulkImportRunner",
    "BulkImportSummary",
    "ColumnMapping",
    "EntityId",
    "EntityIdFactory",
    "ImportDescriptor",
    "ImportOptions",
    "IncompleteColumn",
    "InMemoryTableSink",
    "JsonBulkConfig",
    "JsonPath",
    "JsonlWriteSink",
    "NOT_FOUND",
    "ProduceOutcome",
    "RecordMapper",
    "Write",
    "WriteSink",
    "convert_value",
    "import_source",
    "load_import_descriptor",
    "parse_import_descriptor",
    "produce_record",
    "resolve_path",
]

"""Shared typed models.

This module defines immutable data models used by the mapping, store,
and ingest layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal

from core.constants import DEFAULT_DESTINATION_TYPE, PATH_DELIMITER
from core.errors import DescriptorError
from core.value_conversion import convert_value

FailurePolicy = Literal["abort", "skip"]
ConversionPolicy = Literal["abort", "skip"]
RowKeyFormat = Literal["raw", "hashed"]
IncompleteReason = Literal["missing", "conversion_failed"]
ValueConverter = Callable[[str, str], object]


@dataclass(frozen=True)
class JsonPath:
    """Compiled dot-delimited path expression.

    Attributes:
        expression: Original path text, e.g. ``user.address.city``.
        components: Ordered keys to descend through.
    """

    expression: str
    components: tuple[str, ...]

    @classmethod
    def parse(cls, expression: str) -> "JsonPath":
        """Split a path expression into components.

        Literal dots inside key names cannot be escaped. Trailing empty
        components are dropped, so ``a.b.`` addresses the same field as ``a.b``.
        A path made only of delimiters has no components and addresses the
        root, while the empty expression addresses the empty key.
        """
        if not expression:
            return cls(expression=expression, components=("",))
        components = expression.split(PATH_DELIMITER)
        while components and components[-1] == "":
            components.pop()
        return cls(expression=expression, components=tuple(components))

    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class EntityId:
    """Row-addressing key derived from a record identifier.

    Attributes:
        raw_key: Identifier string resolved from the record.
        row_key: Encoded row key bytes used by the store.
    """

    raw_key: str
    row_key: bytes


@dataclass(frozen=True)
class ColumnMapping:
    """One destination column and where its value comes from.

    Attributes:
        family: Destination column family.
        qualifier: Destination column qualifier.
        source_path: Path of the source field inside each record.
        destination_type: Destination type name passed to the converter.
        value_converter: Callable turning the resolved string into the stored value.
    """

    family: str
    qualifier: str
    source_path: JsonPath
    destination_type: str = DEFAULT_DESTINATION_TYPE
    value_converter: ValueConverter = convert_value

    @property
    def column_name(self) -> str:
        """Return the ``family:qualifier`` display name."""
        return f"{self.family}:{self.qualifier}"

    def convert(self, raw_value: str) -> object:
        """Convert a resolved string using this column's converter."""
        return self.value_converter(raw_value, self.destination_type)


@dataclass(frozen=True)
class ImportDescriptor:
    """Read-only mapping from record fields to destination columns.

    Attributes:
        name: Destination table name.
        entity_id_source: Path of the field holding the entity id.
        columns: Ordered destination column mappings.
        timestamp_source: Optional path of the write timestamp override.
    """

    name: str
    entity_id_source: JsonPath
    columns: tuple[ColumnMapping, ...]
    timestamp_source: JsonPath | None = None

    def __post_init__(self) -> None:
        seen_columns: set[tuple[str, str]] = set()
        for column in self.columns:
            key = (column.family, column.qualifier)
            if key in seen_columns:
                raise DescriptorError(
                    f"Duplicate destination column '{column.column_name}' in descriptor "
                    f"'{self.name}'. Each family:qualifier may be mapped once."
                )
            seen_columns.add(key)

    @property
    def overrides_timestamp(self) -> bool:
        """Return whether writes take their timestamp from the record."""
        return self.timestamp_source is not None


@dataclass(frozen=True)
class Write:
    """One cell write handed to a sink.

    Attributes:
        entity_id: Destination row.
        family: Destination column family.
        qualifier: Destination column qualifier.
        value: Converted cell value.
        timestamp: Cell timestamp in epoch millis, ``None`` for ingest time.
    """

    entity_id: EntityId
    family: str
    qualifier: str
    value: object
    timestamp: int | None = None


@dataclass(frozen=True)
class IncompleteColumn:
    """A mapped column that produced no write for one record.

    Attributes:
        column_name: Destination ``family:qualifier``.
        source_path: Source path expression that failed.
        reason: ``missing`` when the path did not resolve, ``conversion_failed``
            when the value could not be converted under the skip policy.
    """

    column_name: str
    source_path: str
    reason: IncompleteReason = "missing"

    def describe(self) -> str:
        """Return a human-readable description for the incompleteness channel."""
        if self.reason == "missing":
            return f"Detected missing field: {self.source_path}"
        return f"Failed to convert field {self.source_path} for column {self.column_name}"


@dataclass(frozen=True)
class ProduceOutcome:
    """Per-record mapping result.

    Attributes:
        writes_emitted: Number of writes handed to the sink.
        incomplete_columns: Columns that produced no write, in descriptor order.
        abandoned: Whether the record was dropped for lack of an entity id.
        missing_entity_id_source: Entity id path when the record was abandoned.
    """

    writes_emitted: int = 0
    incomplete_columns: tuple[IncompleteColumn, ...] = ()
    abandoned: bool = False
    missing_entity_id_source: str | None = None

    @property
    def is_complete(self) -> bool:
        """Return whether every mapped column was written."""
        return not self.abandoned and not self.incomplete_columns


@dataclass(frozen=True)
class ImportOptions:
    """Bulk import runner options.

    Attributes:
        failure_policy: ``abort`` re-raises hard record failures, ``skip`` counts them.
        conversion_policy: ``abort`` fails the record on a bad value, ``skip``
            drops only the offending column.
    """

    failure_policy: FailurePolicy = "abort"
    conversion_policy: ConversionPolicy = "abort"


@dataclass
class BulkImportSummary:
    """Counters accumulated over one bulk import run.

    ``writes_emitted`` counts every cell handed to the sink, including cells
    a skipped record wrote before it failed.
    """

    records_read: int = 0
    records_imported: int = 0
    records_abandoned: int = 0
    records_failed: int = 0
    writes_emitted: int = 0
    incomplete_fields: dict[str, int] = field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        """Serialize summary counters into a JSON-safe payload."""
        return {
            "records_read": self.records_read,
            "records_imported": self.records_imported,
            "records_abandoned": self.records_abandoned,
            "records_failed": self.records_failed,
            "writes_emitted": self.writes_emitted,
            "incomplete_fields": dict(sorted(self.incomplete_fields.items())),
        }


@dataclass(frozen=True)
class SourceLine:
    """One raw input line with its origin.

    Attributes:
        source_uri: File path or URI the line was read from.
        line_number: One-based line number inside the source.
        text: Raw line text without the trailing newline.
    """

    source_uri: str
    line_number: int
    text: str

    @property
    def location(self) -> str:
        """Return ``source_uri:line_number`` for log and error messages."""
        return f"{self.source_uri}:{self.line_number}"

"""Unit tests for per-record write production."""

from __future__ import annotations

import pytest

from core.errors import MalformedRecordError, TimestampConversionError, ValueConversionError
from core.types import ColumnMapping, EntityId, ImportDescriptor, IncompleteColumn, JsonPath
from mapping.record_mapper import RecordMapper, produce_record
from store.write_sink import InMemoryTableSink


class _RecordingSink(InMemoryTableSink):
    """In-memory sink that also records entity id lookups."""

    def __init__(self) -> None:
        super().__init__()
        self.entity_lookups: list[str] = []

    def entity_id_of(self, raw_key: str) -> EntityId:
        self.entity_lookups.append(raw_key)
        return super().entity_id_of(raw_key)


def _column(
    family: str,
    qualifier: str,
    source: str,
    destination_type: str = "string",
) -> ColumnMapping:
    return ColumnMapping(
        family=family,
        qualifier=qualifier,
        source_path=JsonPath.parse(source),
        destination_type=destination_type,
    )


def _descriptor(*columns: ColumnMapping, timestamp_source: str | None = None) -> ImportDescriptor:
    return ImportDescriptor(
        name="users",
        entity_id_source=JsonPath.parse("user.id"),
        columns=columns,
        timestamp_source=JsonPath.parse(timestamp_source) if timestamp_source else None,
    )


def test_produce_emits_write_for_resolved_column() -> None:
    """A fully populated record should produce one write per column."""
    sink = InMemoryTableSink()
    mapper = RecordMapper(_descriptor(_column("info", "name", "user.name")))

    outcome = mapper.produce('{"user": {"id": "42", "name": "Ada"}}', sink)

    write = sink.writes[0]
    assert outcome.writes_emitted == 1 and outcome.is_complete
    assert (write.entity_id.raw_key, write.family, write.qualifier, write.value) == (
        "42",
        "info",
        "name",
        "Ada",
    )
    assert write.timestamp is None


def test_produce_reports_missing_column_and_keeps_entity() -> None:
    """A missing field is incomplete but the entity id still resolves."""
    sink = _RecordingSink()
    mapper = RecordMapper(_descriptor(_column("info", "name", "user.name")))

    outcome = mapper.produce('{"user": {"id": "42"}}', sink)

    assert outcome.writes_emitted == 0 and not outcome.abandoned
    assert outcome.incomplete_columns == (IncompleteColumn("info:name", "user.name", "missing"),)
    assert sink.entity_lookups == ["42"] and sink.writes == ()


def test_produce_writes_other_columns_when_one_is_missing() -> None:
    """Other resolvable columns are still written in descriptor order."""
    sink = InMemoryTableSink()
    descriptor = _descriptor(
        _column("info", "name", "user.name"),
        _column("info", "email", "user.email"),
        _column("info", "age", "user.age", "int"),
    )
    record = '{"user": {"id": "7", "name": "Lin", "age": 30}}'

    outcome = RecordMapper(descriptor).produce(record, sink)

    assert [(write.qualifier, write.value) for write in sink.writes] == [
        ("name", "Lin"),
        ("age", 30),
    ]
    assert [column.column_name for column in outcome.incomplete_columns] == ["info:email"]


def test_produce_abandons_record_without_entity_id() -> None:
    """A record without an entity id produces no writes and no column reports."""
    sink = _RecordingSink()
    reports: list[IncompleteColumn] = []
    mapper = RecordMapper(
        _descriptor(_column("info", "name", "user.name")),
        incomplete_handler=lambda raw_record, column: reports.append(column),
    )

    outcome = mapper.produce('{"user": {"name": "Ada"}}', sink)

    assert outcome.abandoned and outcome.missing_entity_id_source == "user.id"
    assert outcome.writes_emitted == 0 and sink.writes == () and sink.entity_lookups == []
    assert reports == []


def test_produce_raises_for_malformed_record() -> None:
    """Malformed input propagates instead of being skipped."""
    sink = InMemoryTableSink()
    mapper = RecordMapper(_descriptor(_column("info", "name", "user.name")))

    with pytest.raises(MalformedRecordError):
        mapper.produce("not valid json", sink)

    assert sink.writes == ()


def test_produce_applies_override_timestamp_to_every_write() -> None:
    """A configured timestamp source stamps all writes of the record."""
    sink = InMemoryTableSink()
    descriptor = _descriptor(
        _column("info", "name", "user.name"),
        _column("info", "city", "user.city"),
        timestamp_source="event.ts",
    )
    record = (
        '{"user": {"id": "1", "name": "Ada", "city": "London"}, '
        '"event": {"ts": "1700000000000"}}'
    )

    RecordMapper(descriptor).produce(record, sink)

    assert [write.timestamp for write in sink.writes] == [1700000000000, 1700000000000]


def test_produce_accepts_numeric_timestamp() -> None:
    """Timestamp fields may be JSON numbers."""
    sink = InMemoryTableSink()
    descriptor = _descriptor(_column("info", "name", "user.name"), timestamp_source="ts")

    record = '{"user": {"id": "1", "name": "Ada"}, "ts": 1700000000000}'

    RecordMapper(descriptor).produce(record, sink)

    assert sink.writes[0].timestamp == 1700000000000


@pytest.mark.parametrize(
    "record",
    [
        '{"user": {"id": "1", "name": "Ada"}, "ts": "yesterday"}',
        '{"user": {"id": "1", "name": "Ada"}, "ts": 17.5}',
        '{"user": {"id": "1", "name": "Ada"}}',
    ],
)
def test_produce_raises_for_bad_timestamp(record: str) -> None:
    """Malformed or missing timestamps are hard failures."""
    descriptor = _descriptor(_column("info", "name", "user.name"), timestamp_source="ts")

    with pytest.raises(TimestampConversionError):
        RecordMapper(descriptor).produce(record, InMemoryTableSink())

    assert True


def test_produce_skips_timestamp_when_no_column_resolves() -> None:
    """The timestamp is only needed once a write is emitted."""
    sink = InMemoryTableSink()
    descriptor = _descriptor(_column("info", "name", "user.name"), timestamp_source="ts")

    outcome = RecordMapper(descriptor).produce('{"user": {"id": "1"}}', sink)

    assert outcome.writes_emitted == 0 and len(outcome.incomplete_columns) == 1


def test_produce_conversion_failure_aborts_by_default() -> None:
    """A malformed numeric literal propagates under the abort policy."""
    descriptor = _descriptor(_column("info", "age", "user.age", "long"))

    with pytest.raises(ValueConversionError):
        RecordMapper(descriptor).produce('{"user": {"id": "1", "age": "old"}}', InMemoryTableSink())

    assert True


def test_produce_conversion_failure_skips_column_under_skip_policy() -> None:
    """The skip policy reports the column and keeps the rest of the record."""
    sink = InMemoryTableSink()
    reports: list[str] = []
    descriptor = _descriptor(
        _column("info", "age", "user.age", "long"),
        _column("info", "name", "user.name"),
    )
    mapper = RecordMapper(
        descriptor,
        incomplete_handler=lambda raw_record, column: reports.append(column.describe()),
        conversion_policy="skip",
    )

    outcome = mapper.produce('{"user": {"id": "1", "age": "old", "name": "Ada"}}', sink)

    assert outcome.writes_emitted == 1 and sink.row("1") == {"info:name": "Ada"}
    assert outcome.incomplete_columns[0].reason == "conversion_failed"
    assert reports == ["Failed to convert field user.age for column info:age"]


def test_produce_uses_injected_converter() -> None:
    """Columns may carry their own converter strategy."""
    sink = InMemoryTableSink()
    column = ColumnMapping(
        family="info",
        qualifier="name",
        source_path=JsonPath.parse("user.name"),
        value_converter=lambda raw_value, destination_type: raw_value.upper(),
    )

    RecordMapper(_descriptor(column)).produce('{"user": {"id": "1", "name": "Ada"}}', sink)

    assert sink.writes[0].value == "ADA"


def test_produce_wraps_converter_value_errors() -> None:
    """Plain ValueErrors from custom converters become conversion failures."""

    def _strict(raw_value: str, destination_type: str) -> object:
        raise ValueError("rejected")

    column = ColumnMapping(
        family="info",
        qualifier="name",
        source_path=JsonPath.parse("user.name"),
        value_converter=_strict,
    )

    with pytest.raises(ValueConversionError):
        RecordMapper(_descriptor(column)).produce(
            '{"user": {"id": "1", "name": "Ada"}}', InMemoryTableSink()
        )

    assert True


def test_produce_invokes_handler_once_per_incomplete_column() -> None:
    """The incompleteness callback receives the raw record and the column."""
    calls: list[tuple[str, str]] = []
    descriptor = _descriptor(
        _column("info", "name", "user.name"),
        _column("info", "email", "user.email"),
    )
    record = '{"user": {"id": "1"}}'

    produce_record(
        record,
        descriptor,
        InMemoryTableSink(),
        incomplete_handler=lambda raw_record, column: calls.append((raw_record, column.describe())),
    )

    assert calls == [
        (record, "Detected missing field: user.name"),
        (record, "Detected missing field: user.email"),
    ]


def test_mapper_rejects_unknown_conversion_policy() -> None:
    """Only abort and skip policies exist."""
    with pytest.raises(ValueError):
        RecordMapper(
            _descriptor(_column("info", "name", "user.name")),
            conversion_policy="ignore",  # type: ignore[arg-type]
        )

    assert True


def test_produce_accepts_lone_surrogate_entity_id() -> None:
    """An unpaired surrogate escape in the entity id still yields a row key."""
    sink = InMemoryTableSink()
    mapper = RecordMapper(_descriptor(_column("info", "name", "user.name")))

    outcome = mapper.produce('{"user": {"id": "\\ud800", "name": "Ada"}}', sink)

    assert outcome.writes_emitted == 1
    assert sink.writes[0].entity_id.row_key == b"\xed\xa0\x80"

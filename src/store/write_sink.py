"""Write sink contract and in-memory implementation.

The record mapper only depends on ``WriteSink``. The in-memory sink
keeps every write and a latest-value view per row for inspection.
"""

from __future__ import annotations

from typing import Protocol

from core.types import EntityId, Write
from store.entity_id import EntityIdFactory


class WriteSink(Protocol):
    """Destination for cell writes produced by the record mapper."""

    def entity_id_of(self, raw_key: str) -> EntityId: ...

    def put(
        self,
        entity_id: EntityId,
        family: str,
        qualifier: str,
        value: object,
        timestamp: int | None = None,
    ) -> None: ...


class InMemoryTableSink:
    """Write sink that collects cells in memory."""

    def __init__(self, entity_ids: EntityIdFactory | None = None) -> None:
        self._entity_ids = entity_ids or EntityIdFactory()
        self._writes: list[Write] = []
        self._rows: dict[str, dict[str, object]] = {}

    @property
    def writes(self) -> tuple[Write, ...]:
        """Return all writes in arrival order."""
        return tuple(self._writes)

    def entity_id_of(self, raw_key: str) -> EntityId:
        return self._entity_ids.entity_id_of(raw_key)

    def put(
        self,
        entity_id: EntityId,
        family: str,
        qualifier: str,
        value: object,
        timestamp: int | None = None,
    ) -> None:
        """Record one cell write."""
        self._writes.append(
            Write(
                entity_id=entity_id,
                family=family,
                qualifier=qualifier,
                value=value,
                timestamp=timestamp,
            )
        )
        self._rows.setdefault(entity_id.raw_key, {})[f"{family}:{qualifier}"] = value

    def row(self, raw_key: str) -> dict[str, object]:
        """Return the latest value per ``family:qualifier`` for one row."""
        return dict(self._rows.get(raw_key, {}))

    def row_keys(self) -> list[str]:
        """Return raw keys of rows that received writes, in first-write order."""
        return list(self._rows)

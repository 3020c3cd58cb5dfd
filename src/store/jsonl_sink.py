"""JSONL bulk-load output for cell writes.

This module serializes each write as one JSON line so a separate
loader can apply them to the wide-column store later.
"""

from __future__ import annotations

import base64
import json
import time
from pathlib import Path
from types import TracebackType
from typing import Callable, TextIO

from core.errors import StoreError
from core.types import EntityId
from store.entity_id import EntityIdFactory


def current_time_millis() -> int:
    """Return wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class JsonlWriteSink:
    """Write sink appending one JSON line per cell to a file.

    Writes without an override timestamp are stamped with ingest time.
    """

    def __init__(
        self,
        output_path: Path,
        entity_ids: EntityIdFactory | None = None,
        clock: Callable[[], int] = current_time_millis,
    ) -> None:
        self._output_path = output_path
        self._entity_ids = entity_ids or EntityIdFactory()
        self._clock = clock
        self._handle: TextIO | None = None
        self.cells_written = 0

    def __enter__(self) -> "JsonlWriteSink":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """Open the output file for writing, truncating previous content.

        Raises:
            StoreError: If the output file cannot be created.
        """
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._output_path.open("w", encoding="utf-8")
        except OSError as error:
            raise StoreError(
                f"Failed to open write output at {self._output_path}: {error}. "
                "Check the output directory and retry."
            ) from error

    def close(self) -> None:
        """Flush and close the output file."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

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
        """Append one cell write.

        Raises:
            StoreError: If the sink is not open or the write fails.
        """
        if self._handle is None:
            raise StoreError(
                f"Write sink for {self._output_path} is not open. Call open() before put()."
            )
        payload = cell_to_payload(
            entity_id,
            family,
            qualifier,
            value,
            timestamp if timestamp is not None else self._clock(),
        )
        try:
            self._handle.write(json.dumps(payload, sort_keys=True) + "\n")
        except OSError as error:
            raise StoreError(f"Failed to write cell to {self._output_path}: {error}") from error
        self.cells_written += 1


def cell_to_payload(
    entity_id: EntityId,
    family: str,
    qualifier: str,
    value: object,
    timestamp: int,
) -> dict[str, object]:
    """Serialize one cell write into a JSON-safe payload.

    Args:
        entity_id: Destination row.
        family: Column family.
        qualifier: Column qualifier.
        value: Converted cell value.
        timestamp: Cell timestamp in epoch millis.

    Returns:
        Dictionary payload for JSON encoding.
    """
    payload: dict[str, object] = {
        "entity_id": entity_id.raw_key,
        "row_key": entity_id.row_key.hex(),
        "family": family,
        "qualifier": qualifier,
        "timestamp": timestamp,
    }
    if isinstance(value, bytes):
        payload["value"] = base64.b64encode(value).decode("ascii")
        payload["encoding"] = "base64"
    else:
        payload["value"] = value
    return payload

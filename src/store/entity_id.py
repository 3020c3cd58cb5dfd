"""Entity id construction for destination rows.

Row keys are either the raw identifier bytes or an MD5 prefix followed by
the identifier, which spreads sequential ids across the key space.
"""

from __future__ import annotations

import hashlib

from core.config import JsonBulkConfig
from core.constants import DEFAULT_HASH_SIZE, HASH_ALGORITHM, MAX_HASH_SIZE
from core.errors import ConfigError
from core.types import EntityId, RowKeyFormat


class EntityIdFactory:
    """Builds ``EntityId`` values for one row key format."""

    def __init__(
        self,
        row_key_format: RowKeyFormat = "raw",
        hash_size: int = DEFAULT_HASH_SIZE,
    ) -> None:
        if row_key_format not in ("raw", "hashed"):
            raise ConfigError(
                f"Unsupported row key format '{row_key_format}'. Use one of: raw, hashed."
            )
        if not 1 <= hash_size <= MAX_HASH_SIZE:
            raise ConfigError(f"Invalid hash size {hash_size}: expected 1-{MAX_HASH_SIZE}.")
        self._row_key_format = row_key_format
        self._hash_size = hash_size

    @classmethod
    def from_config(cls, config: JsonBulkConfig) -> "EntityIdFactory":
        """Build a factory from runtime configuration."""
        return cls(row_key_format=config.row_key_format, hash_size=config.hash_size)

    @property
    def row_key_format(self) -> RowKeyFormat:
        return self._row_key_format

    def entity_id_of(self, raw_key: str) -> EntityId:
        """Build the entity id for a resolved identifier string.

        Lone surrogates from JSON escapes are kept as their UTF-8 style
        byte sequences so construction never fails on a resolved string.

        Args:
            raw_key: Identifier resolved from the record.

        Returns:
            Entity id carrying the encoded row key.
        """
        key_bytes = raw_key.encode("utf-8", "surrogatepass")
        if self._row_key_format == "raw":
            return EntityId(raw_key=raw_key, row_key=key_bytes)
        digest = hashlib.new(HASH_ALGORITHM, key_bytes).digest()
        return EntityId(raw_key=raw_key, row_key=digest[: self._hash_size] + key_bytes)

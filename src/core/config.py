"""Runtime configuration model for jsonbulk.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from core.constants import (
    DEFAULT_CONVERSION_POLICY,
    DEFAULT_FAILURE_POLICY,
    DEFAULT_HASH_SIZE,
    DEFAULT_ROW_KEY_FORMAT,
    MAX_HASH_SIZE,
    SUPPORTED_CONVERSION_POLICIES,
    SUPPORTED_FAILURE_POLICIES,
    SUPPORTED_ROW_KEY_FORMATS,
)
from core.errors import ConfigError
from core.types import ConversionPolicy, FailurePolicy, RowKeyFormat


@dataclass(frozen=True)
class JsonBulkConfig:
    """Validated runtime configuration.

    Attributes:
        failure_policy: What the import runner does on a hard record failure.
        conversion_policy: Whether a column conversion failure aborts the record.
        row_key_format: Entity id encoding used by write sinks.
        hash_size: Number of hash prefix bytes for hashed row keys.
        s3_region: Optional default AWS region for S3 reads.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    failure_policy: FailurePolicy = DEFAULT_FAILURE_POLICY
    conversion_policy: ConversionPolicy = DEFAULT_CONVERSION_POLICY
    row_key_format: RowKeyFormat = DEFAULT_ROW_KEY_FORMAT
    hash_size: int = DEFAULT_HASH_SIZE
    s3_region: str | None = None
    s3_profile: str | None = None

    @classmethod
    def from_env(cls) -> "JsonBulkConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        return cls(
            failure_policy=_parse_choice(
                "JSONBULK_FAILURE_POLICY",
                os.getenv("JSONBULK_FAILURE_POLICY", DEFAULT_FAILURE_POLICY),
                SUPPORTED_FAILURE_POLICIES,
            ),
            conversion_policy=_parse_choice(
                "JSONBULK_CONVERSION_POLICY",
                os.getenv("JSONBULK_CONVERSION_POLICY", DEFAULT_CONVERSION_POLICY),
                SUPPORTED_CONVERSION_POLICIES,
            ),
            row_key_format=_parse_choice(
                "JSONBULK_ROW_KEY_FORMAT",
                os.getenv("JSONBULK_ROW_KEY_FORMAT", DEFAULT_ROW_KEY_FORMAT),
                SUPPORTED_ROW_KEY_FORMATS,
            ),
            hash_size=_parse_hash_size(os.getenv("JSONBULK_HASH_SIZE", str(DEFAULT_HASH_SIZE))),
            s3_region=os.getenv("JSONBULK_S3_REGION"),
            s3_profile=os.getenv("JSONBULK_S3_PROFILE"),
        )


def _parse_choice(variable_name: str, raw_value: str, choices: tuple[str, ...]) -> Any:
    """Validate an enumerated environment value.

    Raises:
        ConfigError: If value is not one of the supported choices.
    """
    normalized_value = raw_value.strip().lower()
    if normalized_value in choices:
        return normalized_value
    raise ConfigError(
        f"Invalid {variable_name} value '{raw_value}'. Use one of: {', '.join(choices)}."
    )


def _parse_hash_size(raw_value: str) -> int:
    """Parse the hashed row key prefix size.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed prefix size in bytes.

    Raises:
        ConfigError: If value is not an integer in range.
    """
    try:
        hash_size = int(raw_value)
    except ValueError as error:
        raise ConfigError(
            "Invalid JSONBULK_HASH_SIZE value: "
            f"expected integer, got '{raw_value}'. "
            "Set JSONBULK_HASH_SIZE to a numeric value."
        ) from error
    if not 1 <= hash_size <= MAX_HASH_SIZE:
        raise ConfigError(
            f"Invalid JSONBULK_HASH_SIZE value {hash_size}: expected 1-{MAX_HASH_SIZE}."
        )
    return hash_size

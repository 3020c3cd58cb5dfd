"""jsonbulk exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class JsonBulkError(Exception):
    """Base exception for all jsonbulk failures."""


class ConfigError(JsonBulkError):
    """Raised for invalid runtime configuration."""


class DescriptorError(JsonBulkError):
    """Raised for invalid or unreadable import descriptors."""


class IngestError(JsonBulkError):
    """Raised for input source reading failures."""


class MappingError(JsonBulkError):
    """Raised when a record cannot be mapped onto destination columns."""


class MalformedRecordError(MappingError):
    """Raised when an input line is not a JSON object."""


class ValueConversionError(MappingError):
    """Raised when a resolved value cannot be converted to its destination type."""


class TimestampConversionError(ValueConversionError):
    """Raised when the override timestamp is missing or not an integer."""


class StoreError(JsonBulkError):
    """Raised for write sink failures."""


class DependencyError(JsonBulkError):
    """Raised when an optional runtime dependency is missing."""

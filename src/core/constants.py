"""Core constants used across jsonbulk modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

PATH_DELIMITER = "."
DESCRIPTOR_VERSION = 1
DEFAULT_DESTINATION_TYPE = "string"
SUPPORTED_DESTINATION_TYPES = (
    "string",
    "int",
    "long",
    "float",
    "double",
    "boolean",
    "bytes",
    "json",
)
SUPPORTED_FAILURE_POLICIES = ("abort", "skip")
SUPPORTED_CONVERSION_POLICIES = ("abort", "skip")
SUPPORTED_ROW_KEY_FORMATS = ("raw", "hashed")
DEFAULT_FAILURE_POLICY = "abort"
DEFAULT_CONVERSION_POLICY = "abort"
DEFAULT_ROW_KEY_FORMAT = "raw"
DEFAULT_HASH_SIZE = 16
MAX_HASH_SIZE = 16
HASH_ALGORITHM = "md5"
SUPPORTED_INPUT_EXTENSIONS = (".json", ".jsonl")
INPUT_ENCODING = "utf-8"

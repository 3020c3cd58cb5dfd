"""Source line readers for bulk import.

This module loads JSON-lines input from local paths or S3 prefixes.
It yields typed source lines so the runner can report exact locations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Iterator

from core.config import JsonBulkConfig
from core.constants import INPUT_ENCODING, SUPPORTED_INPUT_EXTENSIONS
from core.errors import DependencyError, IngestError
from core.s3_uri import S3Location, parse_s3_uri
from core.types import SourceLine


def read_source_lines(source_uri: str, config: JsonBulkConfig) -> Iterator[SourceLine]:
    """Yield non-blank input lines from local files or S3.

    Args:
        source_uri: Local file, local directory, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Iterator over source lines in file order.

    Raises:
        IngestError: If the source cannot be read.
    """
    if source_uri.startswith("s3://"):
        return _read_s3_lines(source_uri, config)
    return _read_local_lines(Path(source_uri).expanduser())


def _read_local_lines(source_path: Path) -> Iterator[SourceLine]:
    """Read lines from a local file or directory.

    Raises:
        IngestError: If path is missing or holds no supported files.
    """
    if not source_path.exists():
        raise IngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Provide an existing file or directory."
        )
    if source_path.is_file():
        return _read_file_lines(source_path)
    file_paths = [
        file_path
        for file_path in sorted(source_path.rglob("*"))
        if file_path.is_file() and _is_supported(file_path.name)
    ]
    if not file_paths:
        raise IngestError(
            f"No JSON-lines files found under {source_path}. "
            f"Supported extensions: {SUPPORTED_INPUT_EXTENSIONS}."
        )
    return _chain_files(file_paths)


def _chain_files(file_paths: list[Path]) -> Iterator[SourceLine]:
    for file_path in file_paths:
        yield from _read_file_lines(file_path)


def _read_file_lines(file_path: Path) -> Iterator[SourceLine]:
    """Stream lines from one local file.

    Raises:
        IngestError: If the file cannot be opened or decoded.
    """
    try:
        with file_path.open("r", encoding=INPUT_ENCODING) as handle:
            yield from split_source_lines(str(file_path), handle)
    except (OSError, UnicodeDecodeError) as error:
        raise IngestError(
            f"Failed to read source file {file_path}: {error}. "
            "Check the file is readable UTF-8 text."
        ) from error


def split_source_lines(source_uri: str, lines: Iterable[str]) -> Iterator[SourceLine]:
    """Wrap raw text lines as source lines, skipping blank ones.

    Args:
        source_uri: Origin used in line locations.
        lines: Raw lines, with or without trailing newlines.

    Returns:
        Iterator over non-blank lines with one-based line numbers.
    """
    for line_number, line in enumerate(lines, 1):
        text = line.rstrip("\r\n")
        if not text.strip():
            continue
        yield SourceLine(source_uri=source_uri, line_number=line_number, text=text)


def _read_s3_lines(source_uri: str, config: JsonBulkConfig) -> Iterator[SourceLine]:
    """Read lines from S3 objects under a prefix.

    Raises:
        IngestError: If no supported objects exist under the prefix.
    """
    location = parse_s3_uri(source_uri)
    s3_client = _create_s3_client(config)
    object_keys = _list_s3_keys(s3_client, location)
    if not object_keys:
        raise IngestError(
            f"No JSON-lines objects found for {source_uri}. "
            "Upload .json/.jsonl files and retry the import."
        )
    return _download_s3_lines(s3_client, location.bucket, object_keys)


def _create_s3_client(config: JsonBulkConfig) -> Any:
    """Create a boto3 S3 client.

    Raises:
        DependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise DependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to import from s3:// sources."
        ) from error
    session_kwargs = _build_boto3_session_kwargs(config)
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _build_boto3_session_kwargs(config: JsonBulkConfig) -> dict[str, str]:
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    """List supported object keys under an S3 prefix, sorted."""
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.prefix)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if _is_supported(key):
                keys.append(key)
    return sorted(keys)


def _download_s3_lines(
    s3_client: Any,
    bucket: str,
    object_keys: Iterable[str],
) -> Iterator[SourceLine]:
    for key in object_keys:
        body = s3_client.get_object(Bucket=bucket, Key=key)["Body"].read().decode(INPUT_ENCODING)
        yield from split_source_lines(f"s3://{bucket}/{key}", body.splitlines())


def _is_supported(name: str) -> bool:
    """Return whether a file name or object key has a supported extension."""
    return Path(name).suffix.lower() in SUPPORTED_INPUT_EXTENSIONS

"""jsonbulk CLI entry points.
This module exposes bulk import and descriptor inspection commands.
It maps argparse commands onto ingest and mapping calls.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.resolve_command import add_resolve_command, run_resolve_command
from core.config import JsonBulkConfig
from core.constants import (
    SUPPORTED_CONVERSION_POLICIES,
    SUPPORTED_FAILURE_POLICIES,
    SUPPORTED_ROW_KEY_FORMATS,
)
from core.descriptor import load_import_descriptor
from core.errors import JsonBulkError
from core.logging_config import configure_cli_logging
from core.types import ImportOptions
from ingest.bulk_import import import_source
from store.entity_id import EntityIdFactory
from store.jsonl_sink import JsonlWriteSink


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="jsonbulk", description="JSON bulk import CLI")
    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr events")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_import_command(subparsers)
    _add_validate_descriptor_command(subparsers)
    add_resolve_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the jsonbulk CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(args.log_level)
    config = JsonBulkConfig.from_env()
    if args.command == "import":
        return _run_import_command(config, args)
    if args.command == "validate-descriptor":
        return _run_validate_descriptor_command(args)
    if args.command == "resolve":
        return run_resolve_command(args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_import_command(config: JsonBulkConfig, args: argparse.Namespace) -> int:
    """Handle import command.

    Args:
        config: Runtime configuration from the environment.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    config = _apply_overrides(config, args)
    options = ImportOptions(
        failure_policy=config.failure_policy,
        conversion_policy=config.conversion_policy,
    )
    try:
        descriptor = load_import_descriptor(args.descriptor)
        entity_ids = EntityIdFactory.from_config(config)
        with JsonlWriteSink(Path(args.output), entity_ids) as sink:
            summary = import_source(args.source, descriptor, sink, config, options)
    except JsonBulkError as error:
        print(f"import_error={error}")
        return 1
    print(json.dumps(summary.to_payload(), sort_keys=True))
    return 0


def _run_validate_descriptor_command(args: argparse.Namespace) -> int:
    """Handle validate-descriptor command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    try:
        descriptor = load_import_descriptor(args.descriptor)
    except JsonBulkError as error:
        print(f"descriptor_error={error}")
        return 1
    print(f"name={descriptor.name}")
    print(f"entity_id_source={descriptor.entity_id_source}")
    timestamp_source = descriptor.timestamp_source if descriptor.overrides_timestamp else "-"
    print(f"override_timestamp_source={timestamp_source}")
    for column in descriptor.columns:
        print(f"{column.column_name}\t{column.source_path}\t{column.destination_type}")
    return 0


def _apply_overrides(config: JsonBulkConfig, args: argparse.Namespace) -> JsonBulkConfig:
    """Apply CLI policy flags over environment configuration."""
    overrides: dict[str, object] = {}
    if args.failure_policy:
        overrides["failure_policy"] = args.failure_policy
    if args.conversion_policy:
        overrides["conversion_policy"] = args.conversion_policy
    if args.row_key_format:
        overrides["row_key_format"] = args.row_key_format
    return replace(config, **overrides) if overrides else config


def _add_import_command(subparsers: Any) -> None:
    """Register import subcommand."""
    parser = subparsers.add_parser(
        "import",
        help="Import a JSON-lines file, directory, or S3 prefix",
    )
    parser.add_argument("source", help="Source file, directory, or s3://bucket/prefix")
    parser.add_argument("--descriptor", required=True, help="Import descriptor YAML/JSON file")
    parser.add_argument("--output", required=True, help="Output JSONL file for cell writes")
    parser.add_argument(
        "--failure-policy",
        choices=SUPPORTED_FAILURE_POLICIES,
        help="Abort the run or skip records that fail hard",
    )
    parser.add_argument(
        "--conversion-policy",
        choices=SUPPORTED_CONVERSION_POLICIES,
        help="Abort the record or skip only the column when a value cannot be converted",
    )
    parser.add_argument(
        "--row-key-format",
        choices=SUPPORTED_ROW_KEY_FORMATS,
        help="Entity id encoding for row keys",
    )


def _add_validate_descriptor_command(subparsers: Any) -> None:
    """Register validate-descriptor subcommand."""
    parser = subparsers.add_parser(
        "validate-descriptor",
        help="Validate an import descriptor and list its columns",
    )
    parser.add_argument("descriptor", help="Import descriptor YAML/JSON file")

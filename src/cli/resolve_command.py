"""Path resolution command wiring for jsonbulk CLI."""

from __future__ import annotations

import argparse
import sys
from typing import Any

from core.errors import MalformedRecordError
from mapping.json_value import parse_json_record
from mapping.path_resolver import NOT_FOUND, resolve_path


def add_resolve_command(subparsers: Any) -> None:
    """Register resolve subcommand."""
    parser = subparsers.add_parser(
        "resolve",
        help="Resolve a dot-delimited path against one JSON record",
    )
    parser.add_argument("path", help="Path expression, e.g. user.address.city")
    parser.add_argument(
        "--record",
        help="JSON object text; read from stdin when omitted",
    )


def run_resolve_command(args: argparse.Namespace) -> int:
    """Print the resolved value, or exit 1 when the path does not resolve."""
    raw_record = args.record if args.record is not None else sys.stdin.read()
    try:
        tree = parse_json_record(raw_record.strip())
    except MalformedRecordError as error:
        print(f"record_error={error}")
        return 1
    value = resolve_path(tree, args.path)
    if value is NOT_FOUND:
        print("not_found")
        return 1
    print(value)
    return 0

"""Unit tests for CLI command handling."""

from __future__ import annotations

import json
from pathlib import Path

from cli.main import main
from tests.fixture_paths import fixture_path


def test_cli_import_writes_cells_and_prints_summary(tmp_path: Path, capsys) -> None:
    """CLI import should write one JSON line per cell and print counters."""
    output_path = tmp_path / "cells.jsonl"
    args = [
        "import",
        str(fixture_path("records/users.jsonl")),
        "--descriptor",
        str(fixture_path("descriptors/users.yaml")),
        "--output",
        str(output_path),
    ]

    exit_code = main(args)
    summary = json.loads(capsys.readouterr().out.strip())

    cells = output_path.read_text(encoding="utf-8").splitlines()
    assert exit_code == 0 and summary["writes_emitted"] == 4 and len(cells) == 4
    assert json.loads(cells[0])["timestamp"] == 1700000000000


def test_cli_import_reports_malformed_records(tmp_path: Path, capsys) -> None:
    """CLI import should exit non-zero when the abort policy trips."""
    args = [
        "import",
        str(fixture_path("records/bad_records.jsonl")),
        "--descriptor",
        str(fixture_path("descriptors/users.yaml")),
        "--output",
        str(tmp_path / "cells.jsonl"),
    ]

    exit_code = main(args)
    output = capsys.readouterr().out

    assert exit_code == 1 and output.startswith("import_error=")


def test_cli_import_skip_policy_flag_overrides_env(tmp_path: Path, capsys) -> None:
    """Policy flags should take precedence over environment defaults."""
    args = [
        "import",
        str(fixture_path("records/bad_records.jsonl")),
        "--descriptor",
        str(fixture_path("descriptors/users.yaml")),
        "--output",
        str(tmp_path / "cells.jsonl"),
        "--failure-policy",
        "skip",
        "--row-key-format",
        "hashed",
    ]

    exit_code = main(args)
    summary = json.loads(capsys.readouterr().out.strip())

    assert exit_code == 0 and summary["records_failed"] == 2


def test_cli_validate_descriptor_lists_columns(capsys) -> None:
    """validate-descriptor should print one row per mapped column."""
    exit_code = main(["validate-descriptor", str(fixture_path("descriptors/users.yaml"))])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == 0 and "info:age\tuser.age\tlong" in output


def test_cli_validate_descriptor_marks_missing_timestamp_source(capsys) -> None:
    """Descriptors without a timestamp override print a placeholder."""
    descriptor = str(fixture_path("descriptors/users_no_timestamp.json"))
    exit_code = main(["validate-descriptor", descriptor])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == 0 and "override_timestamp_source=-" in output


def test_cli_validate_descriptor_rejects_invalid_file(capsys) -> None:
    """validate-descriptor should exit non-zero for schema violations."""
    exit_code = main(
        ["validate-descriptor", str(fixture_path("descriptors/invalid_type.yaml"))]
    )
    output = capsys.readouterr().out

    assert exit_code == 1 and output.startswith("descriptor_error=")

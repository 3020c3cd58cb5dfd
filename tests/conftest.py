"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_JSONBULK_ENV_NAMES = (
    "JSONBULK_FAILURE_POLICY",
    "JSONBULK_CONVERSION_POLICY",
    "JSONBULK_ROW_KEY_FORMAT",
    "JSONBULK_HASH_SIZE",
    "JSONBULK_S3_REGION",
    "JSONBULK_S3_PROFILE",
)


def pytest_sessionstart() -> None:
    """Add src and project root to sys.path for test imports."""
    for import_root in (_PROJECT_ROOT / "src", _PROJECT_ROOT):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def clean_jsonbulk_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate tests from JSONBULK_* variables set in the calling shell."""
    for name in _JSONBULK_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)

"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_SIFT_ENV_VARS = (
    "SIFT_DATA_ROOT",
    "SIFT_RULES_PATH",
    "SIFT_ON_MALFORMED",
    "SIFT_TIE_BREAK",
    "SIFT_S3_REGION",
    "SIFT_S3_PROFILE",
    "SIFT_LOG_LEVEL",
)


def pytest_sessionstart() -> None:
    """Add src and project root directories to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root / "src", project_root):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _isolate_sift_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell settings out of config-driven tests."""
    for env_name in _SIFT_ENV_VARS:
        monkeypatch.delenv(env_name, raising=False)

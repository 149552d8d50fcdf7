"""
Pytest Configuration

This module configures shared pytest behaviour for the suite: it puts `src`
on ``sys.path`` for source-tree runs, re-exports the HTTP mocking fixtures,
and isolates the memoised settings from the caller's environment.

Usage:
    pytest tests
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Generator

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from tests.fixtures.http_mocking import (  # noqa: E402,F401
    directory_server,
    fetcher_factory,
    mock_http_client,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear ``WWFF_*`` variables and the settings cache around each test."""

    from WwffDirectory.settings import reset_settings

    for name in [key for key in os.environ if key.upper().startswith("WWFF_")]:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()

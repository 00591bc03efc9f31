# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from tsktrack.config import Settings
from tsktrack.core.state import AppState


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings rooted in a per-test temporary directory.

    Built with Settings.for_directory() so tests never read the real env,
    .env files or the user's config file.
    """
    return Settings.for_directory(tmp_path / "data", namespace="test")


@pytest.fixture()
def state(settings: Settings) -> AppState:
    """AppState with real file stores (their behaviour is what we test)."""
    return AppState.from_settings(settings)


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

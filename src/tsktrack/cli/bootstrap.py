# src/tsktrack/cli/bootstrap.py

"""
Wiring for the front end: settings in, AppState out.

Only this module (and cli.main) may call get_settings(); everything below it takes
the Settings it is handed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import Settings, get_settings
from ..core.state import AppState

logger = logging.getLogger(__name__)


def create_initial_state(
    *,
    settings: Settings | None = None,
    namespace: str | None = None,
    config_file: str | Path | None = None,
) -> AppState:
    """
    Open the stores of one namespace.

    Raises DataDirectoryDoesNotExist when the namespace directories are missing and
    data_createdir is off.
    """
    if settings is None:
        settings = get_settings(namespace=namespace, config_file=config_file)

    state = AppState.from_settings(settings)
    logger.info(
        "Namespace %s opened at %s (tasks=%d notes=%d rotate=%d)",
        settings.namespace,
        settings.db_path(),
        state.tasks.count(),
        state.notes.count(),
        settings.data_rotate,
    )
    return state

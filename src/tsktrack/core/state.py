# src/tsktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..notes.note_store import NoteStore
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings live on the state so front-end helpers need only one argument.
    settings: Settings

    tasks: TaskStore
    notes: NoteStore

    @classmethod
    def from_settings(cls, settings: Settings) -> AppState:
        """Build the stores for settings.namespace, creating directories as configured."""
        return cls(
            settings=settings,
            tasks=TaskStore.from_settings(settings),
            notes=NoteStore.from_settings(settings),
        )

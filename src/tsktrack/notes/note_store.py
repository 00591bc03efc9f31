# src/tsktrack/notes/note_store.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import Settings
from ..storage.entity_store import EntityStore
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore
from .note_models import Note

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FoundNote:
    note: Note
    task: Task | None  # None: the task file is gone (orphaned note)

    @property
    def orphaned(self) -> bool:
        return self.task is None


class NoteStore(EntityStore[Note]):
    """Note files under <data_dir>/<namespace>/notes/<task id>.yaml."""

    kind = "note"

    def __init__(self, directory: str | Path, *, rotate: int = 0) -> None:
        super().__init__(directory, rotate=rotate)

    @classmethod
    def from_settings(cls, settings: Settings) -> NoteStore:
        store = cls(settings.note_dir(), rotate=settings.data_rotate)
        logger.debug("NoteStore ready dir=%s rotate=%s", store.directory, settings.data_rotate)
        return store

    def entity_id(self, entity: Note) -> str:
        return entity.task_id

    def encode(self, entity: Note) -> dict[str, Any]:
        return entity.to_dict()

    def decode(self, doc: Any) -> Note:
        return Note.from_dict(doc)

    def list_notes(
        self,
        tasks: TaskStore,
        pattern: str | None = None,
        *,
        orphaned: bool = False,
        completed: bool = False,
    ) -> list[FoundNote]:
        """
        Notes whose task is still open. completed=True adds notes of done tasks,
        orphaned=True adds notes whose task file no longer exists.
        """
        found: list[FoundNote] = []
        for note_id in self.iter_ids(pattern):
            note = self.load(note_id)
            if not tasks.exists(note.task_id):
                if orphaned:
                    found.append(FoundNote(note=note, task=None))
                continue

            task = tasks.load(note.task_id)
            if not task.done or completed:
                found.append(FoundNote(note=note, task=task))
        return found

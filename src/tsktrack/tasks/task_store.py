# src/tsktrack/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from ..config import Settings
from ..storage.entity_store import EntityStore
from .task_models import Task, utcnow

logger = logging.getLogger(__name__)


class TaskStore(EntityStore[Task]):
    """
    Task files under <data_dir>/<namespace>/tasks/<id>.yaml.

    The score is recomputed on every load and every save; the stored value is only
    there for people reading the file.
    """

    kind = "task"

    def __init__(
        self, directory: str | Path, *, rotate: int = 0, clock: Callable[[], datetime] = utcnow
    ) -> None:
        super().__init__(directory, rotate=rotate)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TaskStore:
        store = cls(settings.task_dir(), rotate=settings.data_rotate)
        logger.debug("TaskStore ready dir=%s rotate=%s", store.directory, settings.data_rotate)
        return store

    def now(self) -> datetime:
        return self._clock()

    def entity_id(self, entity: Task) -> str:
        return entity.id

    def encode(self, entity: Task) -> dict[str, Any]:
        return entity.to_dict()

    def decode(self, doc: Any) -> Task:
        return Task.from_dict(doc)

    def before_save(self, entity: Task) -> None:
        entity.refresh_score(self.now())

    def after_load(self, entity: Task) -> None:
        entity.refresh_score(self.now())

    def list_tasks(self, pattern: str | None = None, *, include_done: bool = False) -> list[Task]:
        """
        Tasks ordered by score, highest first. Equal scores keep directory order
        (sorted() is stable; directory order itself is platform dependent).
        """
        tasks = [t for t in self.load_all(pattern) if include_done or not t.done]
        return sorted(tasks, key=lambda t: t.score, reverse=True)

# src/tsktrack/core/search.py

from __future__ import annotations

import logging

from ..notes.note_models import Note
from ..tasks.task_models import Task
from .ports import EntityKind, SearchDocument, SearchIndex
from .state import AppState

logger = logging.getLogger(__name__)

TASK_FIELDS = ("ID", "description", "project", "tags", "metadatas", "timetrack-annotations")
NOTE_FIELDS = ("ID", "markdown", "metadatas")


def _metadatas(metadata: dict[str, str]) -> str:
    return " ".join(f"{k}={v}" for k, v in metadata.items())


def task_document(task: Task) -> SearchDocument:
    return {
        "ID": task.id,
        "description": task.description,
        "project": task.project or "",
        "tags": " ".join(task.tags),
        "metadatas": _metadatas(task.metadata),
        "timetrack-annotations": " ".join(t.annotation for t in task.timetracker if t.annotation),
    }


def note_document(note: Note) -> SearchDocument:
    return {
        "ID": note.task_id,
        "markdown": note.markdown or "",
        "metadatas": _metadatas(note.metadata),
    }


def rebuild_index(
    state: AppState,
    index: SearchIndex,
    *,
    skip_tasks: bool = False,
    skip_notes: bool = False,
) -> dict[EntityKind, int]:
    """Feed every stored entity to the index. Returns documents indexed per kind."""
    counts: dict[EntityKind, int] = {}
    if not skip_tasks:
        docs = [task_document(t) for t in state.tasks.load_all()]
        counts[EntityKind.TASK] = index.rebuild(EntityKind.TASK, docs)
        logger.info("Task index rebuilt with %d documents", counts[EntityKind.TASK])
    if not skip_notes:
        docs = [note_document(n) for n in state.notes.load_all()]
        counts[EntityKind.NOTE] = index.rebuild(EntityKind.NOTE, docs)
        logger.info("Note index rebuilt with %d documents", counts[EntityKind.NOTE])
    return counts


def search_tasks(state: AppState, index: SearchIndex, phrase: str, limit: int = 10) -> list[Task]:
    """Load ranked hits; ids whose file has disappeared since the last rebuild are skipped."""
    out: list[Task] = []
    for task_id in index.query(EntityKind.TASK, phrase, limit):
        if state.tasks.exists(task_id):
            out.append(state.tasks.load(task_id))
        else:
            logger.debug("Index hit %s has no task file, skipping", task_id)
    return out

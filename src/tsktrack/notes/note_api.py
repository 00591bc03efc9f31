# src/tsktrack/notes/note_api.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from ..tasks.task_api import load_task, resolve_task_id
from .note_models import Note
from .note_store import FoundNote

logger = logging.getLogger(__name__)


def _ts_local(now: datetime) -> str:
    return now.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def load_or_create_note(state: AppState, task_id: str) -> tuple[Note, bool]:
    """
    The note for a task, created in memory on first use (not saved here).
    A new note gets the task description as markdown title when note_description is on.
    Returns (note, created).
    """
    task = load_task(state, task_id)
    if state.notes.exists(task.id):
        return state.notes.load(task.id), False

    note = Note.new(task.id, now=state.tasks.now())
    if state.settings.note_description and task.description:
        note.markdown = f"# {task.description}"
    return note, True


def edit_note(state: AppState, task_id: str, text: str) -> Note:
    """Append text to the task's note, creating the note lazily."""
    note, created = load_or_create_note(state, task_id)
    if state.settings.note_timestamp:
        note.append_markdown(f"## {_ts_local(state.tasks.now())}")
    note.append_markdown(text)
    state.notes.save(note)
    if created:
        logger.info("Note created for task %s", note.task_id)
    return note


def load_note(state: AppState, task_id: str) -> Note:
    """Load an existing note. Works for orphaned notes given the full id."""
    if state.notes.exists(task_id):
        return state.notes.load(task_id)
    return state.notes.load(resolve_task_id(state, task_id))


def list_notes(
    state: AppState,
    pattern: str | None = None,
    *,
    orphaned: bool = False,
    completed: bool = False,
) -> list[FoundNote]:
    return state.notes.list_notes(state.tasks, pattern, orphaned=orphaned, completed=completed)


def set_note_metadata(state: AppState, task_id: str, pairs: list[tuple[str, str]]) -> Note:
    note = load_note(state, task_id)
    if note.set_characteristic(metadata=pairs):
        state.notes.save(note)
    return note


def unset_note_metadata(state: AppState, task_id: str, keys: list[str]) -> Note:
    note = load_note(state, task_id)
    if note.unset_characteristic(metadata=keys):
        state.notes.save(note)
    return note


def amount_of_notes(state: AppState, *, include_backups: bool = False) -> int:
    return state.notes.count(include_backups=include_backups)

# src/tsktrack/core/watch.py

"""
Change-event classification for an external filesystem watcher.

The watcher reports raw paths. classify_change() keeps only "<uuid>.yaml" files and
decides task vs note by the directory they live in; rotated backups, temp files and
lock files never match.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import UnknownEntityLocation
from ..notes.note_models import Note
from ..tasks.task_models import Task
from .ports import EntityKind
from .state import AppState

logger = logging.getLogger(__name__)

ENTITY_FILENAME_RE = re.compile(
    r"^(?P<id>[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})\.yaml$"
)


@dataclass(frozen=True, slots=True)
class ChangedEntity:
    kind: EntityKind
    id: str


def classify_change(path: str | Path, state: AppState) -> ChangedEntity | None:
    """
    None for files that are not entity records. Raises UnknownEntityLocation for an
    entity-shaped file outside the task and note directories of this namespace.
    """
    path = Path(path)
    m = ENTITY_FILENAME_RE.match(path.name)
    if not m:
        return None

    parent = path.parent.resolve()
    if parent == state.tasks.directory.resolve():
        return ChangedEntity(EntityKind.TASK, m.group("id"))
    if parent == state.notes.directory.resolve():
        return ChangedEntity(EntityKind.NOTE, m.group("id"))
    raise UnknownEntityLocation(
        f"file changed in flatfile database, but its neither a Task or a Note: {path}"
    )


def load_changed(state: AppState, changed: ChangedEntity) -> Task | Note:
    """Load by identifier, given its kind."""
    if changed.kind is EntityKind.TASK:
        return state.tasks.load(changed.id)
    return state.notes.load(changed.id)

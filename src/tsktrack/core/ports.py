# src/tsktrack/core/ports.py

"""
Ports (interfaces) for collaborators that live outside the core.

The search index and the filesystem watcher are external: the core only hands them
documents and answers "load this id of this kind".
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any, Protocol

SearchDocument = dict[str, Any]
# {"ID": "...", "description": "...", ...}; field names match the index schema.


class EntityKind(StrEnum):
    TASK = "task"
    NOTE = "note"


class SearchIndex(Protocol):
    """Full-text index. Derived and fully rebuildable, never a source of truth."""

    def rebuild(self, kind: EntityKind, documents: Iterable[SearchDocument]) -> int: ...

    def query(self, kind: EntityKind, phrase: str, limit: int = 10) -> list[str]: ...


ChangeCallback = Callable[[EntityKind, str], None]
ErrorCallback = Callable[[str], None]


class FilesystemWatcher(Protocol):
    """Watches the namespace directory and reports (kind, id) for changed entity files."""

    def watch(self, on_change: ChangeCallback, on_error: ErrorCallback) -> None: ...

    def stop(self) -> None: ...

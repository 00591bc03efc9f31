# src/tsktrack/notes/note_models.py

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..parser.descriptor import normalize_user_key
from ..tasks.task_models import as_text, utcnow

NOTE_CREATE_TIME_KEY = "tsk-rs-note-create-time"

# GFM task list item: "- [ ] text", "* [x] text", "1. [X] text"
_ACTION_POINT_RE = re.compile(
    r"^\s*(?:[-*+]|\d+[.)])\s+\[(?P<mark>[ xX])\]\s+(?P<text>\S.*?)\s*$",
    re.MULTILINE,
)


@dataclass(frozen=True, slots=True)
class ActionPoint:
    id: uuid.UUID
    description: str
    checked: bool


@dataclass(slots=True)
class Note:
    """Markdown note attached 1:1 to a task (same id). Field order is the on-disk order."""

    task_id: str
    markdown: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def new(cls, task_id: str, *, now: datetime | None = None) -> Note:
        return cls(
            task_id=str(task_id),
            metadata={NOTE_CREATE_TIME_KEY: (now or utcnow()).isoformat()},
        )

    def get_action_points(self) -> list[ActionPoint]:
        """Checkbox list items in the markdown, in document order."""
        if not self.markdown:
            return []
        points: list[ActionPoint] = []
        for m in _ACTION_POINT_RE.finditer(self.markdown):
            description = m.group("text")
            points.append(
                ActionPoint(
                    id=uuid.uuid5(uuid.NAMESPACE_URL, f"tsk-rs://{self.task_id}/{description}"),
                    description=description,
                    checked=m.group("mark") != " ",
                )
            )
        return points

    def append_markdown(self, text: str) -> None:
        if not self.markdown:
            self.markdown = text
        else:
            self.markdown = self.markdown.rstrip("\n") + "\n\n" + text

    def set_characteristic(self, *, metadata: list[tuple[str, str]] | None = None) -> bool:
        modified = False
        for key, value in metadata or []:
            self.metadata[normalize_user_key(key)] = value
            modified = True
        return modified

    def unset_characteristic(self, *, metadata: list[str] | None = None) -> bool:
        modified = False
        for key in metadata or []:
            if self.metadata.pop(normalize_user_key(key), None) is not None:
                modified = True
        return modified

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "markdown": self.markdown,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Note:
        if not isinstance(raw, dict):
            raise TypeError("note document must be a mapping")
        if "task_id" not in raw:
            raise KeyError("note document is missing `task_id`")
        metadata = raw.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise TypeError("metadata must be a mapping")
        markdown = raw.get("markdown")
        return cls(
            task_id=str(raw["task_id"]),
            markdown=None if markdown is None else str(markdown),
            metadata={str(k): as_text(v) for k, v in metadata.items()},
        )

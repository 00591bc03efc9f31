# src/tsktrack/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from ..errors import TaskAlreadyCompleted, TaskAlreadyRunning, TaskNotRunning
from ..parser.descriptor import compile_descriptor, normalize_user_key
from .priority import TaskPriority
from .scoring import score_task

RESERVED_METADATA_PREFIX = "tsk-rs-"
CREATE_TIME_KEY = "tsk-rs-task-create-time"
COMPLETED_TIME_KEY = "tsk-rs-task-completed-time"

TAG_START = "start"
TAG_HOLD = "hold"
TAG_NEXT = "next"
SPECIAL_TAGS = (TAG_START, TAG_HOLD, TAG_NEXT)


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_text(value: Any) -> str:
    """Coerce a loaded YAML scalar back to the string form we write."""
    if isinstance(value, datetime):
        return value.isoformat()
    if value is None:
        return ""
    return str(value)


def as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"expected timestamp, got {type(value).__name__}")


def _metadata_from(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise TypeError("metadata must be a mapping")
    return {str(k): as_text(v) for k, v in raw.items()}


@dataclass(slots=True)
class TimeTrack:
    """One tracked interval. Open while end is None."""

    start: datetime
    end: datetime | None = None
    annotation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end is not None else None,
            "annotation": self.annotation,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> TimeTrack:
        if not isinstance(raw, dict) or "start" not in raw:
            raise TypeError("timetracker entry must be a mapping with a start")
        end = raw.get("end")
        annotation = raw.get("annotation")
        return cls(
            start=as_datetime(raw["start"]),
            end=as_datetime(end) if end is not None else None,
            annotation=None if annotation is None else str(annotation),
        )


@dataclass(slots=True)
class Task:
    """
    Task record. Field order is the on-disk order.

    Time tracking is a two-state machine (Idle/Running). Running means exactly one
    interval without an end. A done task never has an open interval.
    """

    id: str
    description: str
    done: bool = False
    project: str | None = None
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    priority: TaskPriority | None = None
    duedate: datetime | None = None
    timetracker: list[TimeTrack] = field(default_factory=list)
    score: int = 0

    # ---- construction ----

    @classmethod
    def new(cls, description: str, *, now: datetime | None = None) -> Task:
        now = now or utcnow()
        task = cls(
            id=str(uuid.uuid4()),
            description=description,
            metadata={CREATE_TIME_KEY: now.isoformat()},
        )
        task.refresh_score(now)
        return task

    @classmethod
    def from_task_descriptor(
        cls,
        text: str,
        *,
        starttag: bool = False,
        now: datetime | None = None,
    ) -> Task:
        """
        Build a new task from one descriptor line.

        With starttag=True a "start" tag starts time tracking right away and is then
        dropped from the tags.
        """
        now = now or utcnow()
        desc = compile_descriptor(text)

        metadata = dict(desc.metadata)
        metadata[CREATE_TIME_KEY] = now.isoformat()

        task = cls(
            id=str(uuid.uuid4()),
            description=desc.description,
            project=desc.project,
            tags=list(desc.tags),
            metadata=metadata,
            priority=desc.priority,
            duedate=desc.duedate,
        )

        if starttag and TAG_START in task.tags:
            task.tags.remove(TAG_START)
            task.start(None, autorelease=False, now=now)

        task.refresh_score(now)
        return task

    # ---- time tracking ----

    def is_done(self) -> bool:
        return self.done

    def _open_interval(self) -> TimeTrack | None:
        for track in self.timetracker:
            if track.end is None:
                return track
        return None

    def is_running(self) -> bool:
        return self._open_interval() is not None

    def current_runtime(self, now: datetime | None = None) -> timedelta | None:
        track = self._open_interval()
        if track is None:
            return None
        return (now or utcnow()) - track.start

    def start(
        self,
        annotation: str | None = None,
        *,
        autorelease: bool = True,
        now: datetime | None = None,
    ) -> None:
        """Idle -> Running. With autorelease the "hold" tag is dropped."""
        if self.done:
            raise TaskAlreadyCompleted()
        if self.is_running():
            raise TaskAlreadyRunning()

        self.timetracker.append(TimeTrack(start=now or utcnow(), annotation=annotation))
        if autorelease and TAG_HOLD in self.tags:
            self.tags.remove(TAG_HOLD)

    def stop(self, *, now: datetime | None = None) -> None:
        """Running -> Idle."""
        if self.done:
            raise TaskAlreadyCompleted()
        track = self._open_interval()
        if track is None:
            raise TaskNotRunning()
        track.end = now or utcnow()

    def complete(self, *, clear_special_tags: bool = False, now: datetime | None = None) -> bool:
        """
        Mark the task done, stopping time tracking first if it runs.

        Only the first call has an effect; later calls keep the original completion
        timestamp. Returns True when the task changed.
        """
        if self.done:
            return False

        now = now or utcnow()
        if self.is_running():
            self.stop(now=now)

        self.done = True
        self.metadata[COMPLETED_TIME_KEY] = now.isoformat()
        if clear_special_tags:
            self.tags = [t for t in self.tags if t not in SPECIAL_TAGS]
        return True

    def total_tracked(self, now: datetime | None = None) -> timedelta:
        now = now or utcnow()
        total = timedelta()
        for track in self.timetracker:
            total += (track.end or now) - track.start
        return total

    # ---- characteristics ----

    def add_tag(self, tag: str) -> bool:
        if tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    def set_characteristic(
        self,
        *,
        project: str | None = None,
        tags: list[str] | None = None,
        metadata: list[tuple[str, str]] | None = None,
        priority: TaskPriority | None = None,
        duedate: datetime | None = None,
    ) -> bool:
        """
        Overwrite/extend fields after creation. Unlike the descriptor, a metadata key
        that already exists is overwritten. Returns True if anything was given.
        """
        modified = False

        if project is not None:
            self.project = project
            modified = True
        for tag in tags or []:
            self.add_tag(tag)
            modified = True
        for key, value in metadata or []:
            self.metadata[normalize_user_key(key)] = value
            modified = True
        if priority is not None:
            self.priority = priority
            modified = True
        if duedate is not None:
            self.duedate = duedate
            modified = True

        return modified

    def unset_characteristic(
        self,
        *,
        project: bool = False,
        tags: list[str] | None = None,
        metadata: list[str] | None = None,
        priority: bool = False,
        duedate: bool = False,
    ) -> bool:
        """
        Remove fields. Metadata removal only accepts user (x-) keys, reserved keys
        are never removed this way. Returns True if something was actually removed.
        """
        modified = False

        if project and self.project is not None:
            self.project = None
            modified = True
        for tag in tags or []:
            if tag in self.tags:
                self.tags.remove(tag)
                modified = True
        for key in metadata or []:
            if self.metadata.pop(normalize_user_key(key), None) is not None:
                modified = True
        if priority and self.priority is not None:
            self.priority = None
            modified = True
        if duedate and self.duedate is not None:
            self.duedate = None
            modified = True

        return modified

    # ---- scoring / serialization ----

    def refresh_score(self, now: datetime | None = None) -> int:
        self.score = score_task(self, now or utcnow())
        return self.score

    def created_at(self) -> datetime | None:
        raw = self.metadata.get(CREATE_TIME_KEY)
        if not raw:
            return None
        try:
            return as_datetime(raw)
        except ValueError:
            return None

    def completed_at(self) -> datetime | None:
        raw = self.metadata.get(COMPLETED_TIME_KEY)
        if not raw:
            return None
        try:
            return as_datetime(raw)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "done": self.done,
            "project": self.project,
            "tags": list(self.tags) if self.tags else None,
            "metadata": dict(self.metadata),
            "priority": self.priority.value if self.priority is not None else None,
            "duedate": self.duedate.isoformat() if self.duedate is not None else None,
            "timetracker": [t.to_dict() for t in self.timetracker] if self.timetracker else None,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> Task:
        if not isinstance(raw, dict):
            raise TypeError("task document must be a mapping")
        for required in ("id", "description"):
            if required not in raw:
                raise KeyError(f"task document is missing `{required}`")

        priority = raw.get("priority")
        duedate = raw.get("duedate")
        tags = raw.get("tags") or []
        if not isinstance(tags, list):
            raise TypeError("tags must be a list")
        done = raw.get("done", False)
        if not isinstance(done, bool):
            raise TypeError("done must be a boolean")

        timetracker = [TimeTrack.from_dict(t) for t in raw.get("timetracker") or []]
        open_tracks = sum(1 for t in timetracker if t.end is None)
        if open_tracks > 1:
            raise ValueError("more than one running time track")
        if done and open_tracks:
            raise ValueError("completed task has a running time track")

        return cls(
            id=str(raw["id"]),
            description=as_text(raw["description"]),
            done=done,
            project=None if raw.get("project") is None else str(raw["project"]),
            tags=[str(t) for t in tags],
            metadata=_metadata_from(raw.get("metadata")),
            priority=TaskPriority.from_level(str(priority)) if priority is not None else None,
            duedate=as_datetime(duedate) if duedate is not None else None,
            timetracker=timetracker,
            score=int(raw.get("score") or 0),
        )

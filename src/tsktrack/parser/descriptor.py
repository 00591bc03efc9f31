# src/tsktrack/parser/descriptor.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..errors import (
    IdenticalMetadataKeyNotAllowed,
    MetadataPrefixInvalid,
    MultipleDuedatesNotAllowed,
    MultiplePrioritiesNotAllowed,
    MultipleProjectsNotAllowed,
    ParseError,
    TaskDescriptorEmpty,
)
from ..tasks.priority import TaskPriority
from .lexicon import Description, DueDate, Metadata, Priority, Project, Tag, parse_task

USER_METADATA_PREFIX = "x-"


@dataclass(slots=True)
class TaskDescriptor:
    """Fields folded out of one descriptor line, before a Task is built around them."""

    description: str = ""
    project: str | None = None
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)
    priority: TaskPriority | None = None
    duedate: datetime | None = None


def normalize_user_key(key: str) -> str:
    """Lower-case a user metadata key and require the x- prefix."""
    new_key = key.lower()
    if not new_key.startswith(USER_METADATA_PREFIX):
        raise MetadataPrefixInvalid(new_key)
    return new_key


def compile_descriptor(text: str) -> TaskDescriptor:
    """
    Fold a descriptor line into task fields.

    Duplicate tags are dropped silently. A repeated project, priority, due date or
    metadata key inside the same line is an error.
    """
    if not text or not text.strip():
        raise TaskDescriptorEmpty()

    out = TaskDescriptor()
    descriptions: list[str] = []

    for expr in parse_task(text):
        match expr:
            case Description(text=desc):
                descriptions.append(desc)
            case Tag(name=tag):
                if tag not in out.tags:
                    out.tags.append(tag)
            case Metadata(key=key, value=value):
                new_key = normalize_user_key(key)
                if new_key in out.metadata:
                    raise IdenticalMetadataKeyNotAllowed(new_key)
                out.metadata[new_key] = value
            case Project(name=name):
                if out.project is not None:
                    raise MultipleProjectsNotAllowed()
                out.project = name
            case Priority(level=level):
                if out.priority is not None:
                    raise MultiplePrioritiesNotAllowed()
                out.priority = level
            case DueDate(when=when):
                if out.duedate is not None:
                    raise MultipleDuedatesNotAllowed()
                out.duedate = when

    out.description = " ".join(descriptions)
    return out


def parse_metadata_pair(raw: str) -> tuple[str, str]:
    """Parse a standalone "x-key=value" argument (used by set operations)."""
    parts = raw.split("=")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ParseError(f"error on parsing key=value pair {raw!r}")
    return normalize_user_key(parts[0]), parts[1]

# src/tsktrack/errors.py

"""
Error taxonomy shared by the parser, the entity model and the stores.

Every core failure is raised as a subclass of TskError so front ends can catch
one type and print the message. Nothing in the core retries.
"""

from __future__ import annotations


class TskError(Exception):
    """Base class for all tsktrack failures."""


# ---- descriptor grammar ----


class ParseError(TskError):
    """Malformed task descriptor. The lexer diagnostic is chained as __cause__."""


class DescriptorError(TskError):
    """Descriptor parsed, but it violates a uniqueness or format constraint."""


class TaskDescriptorEmpty(DescriptorError):
    def __init__(self) -> None:
        super().__init__("task descriptor is empty")


class MultipleProjectsNotAllowed(DescriptorError):
    def __init__(self) -> None:
        super().__init__("only one project identifier allowed")


class MultiplePrioritiesNotAllowed(DescriptorError):
    def __init__(self) -> None:
        super().__init__("only one priority allowed")


class MultipleDuedatesNotAllowed(DescriptorError):
    def __init__(self) -> None:
        super().__init__("only one due date allowed")


class MetadataPrefixInvalid(DescriptorError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"metadata key name invalid `{key}`. try with prefix `x-{key}`")


class IdenticalMetadataKeyNotAllowed(DescriptorError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"only one instance of metadata key `{key}` is allowed")


# ---- time tracking ----


class TaskStateError(TskError):
    """Illegal time-tracking transition."""


class TaskAlreadyRunning(TaskStateError):
    def __init__(self) -> None:
        super().__init__("task is already running")


class TaskNotRunning(TaskStateError):
    def __init__(self) -> None:
        super().__init__("task is not running")


class TaskAlreadyCompleted(TaskStateError):
    def __init__(self) -> None:
        super().__init__("task is already completed")


# ---- reports ----


class ReportError(TskError):
    """Invalid report window."""


class EndDateInThePast(ReportError):
    def __init__(self) -> None:
        super().__init__("report end date must be after the start date")


# ---- persistence ----


class StoreError(TskError):
    """Failure while reading or writing entity files."""


class EntityNotFound(StoreError):
    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} `{entity_id}` not found")


class MalformedEntity(StoreError):
    pass


class LockError(StoreError):
    pass


class SerializationError(StoreError):
    pass


class DataDirectoryDoesNotExist(StoreError):
    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"data directory {path} does not exist, and createdir is set to false")


class UnknownEntityLocation(StoreError):
    """A file shaped like an entity changed outside the task and note directories."""


class AmbiguousIdentifier(TskError):
    def __init__(self, kind: str, partial: str, candidates: list[str]) -> None:
        self.candidates = candidates
        super().__init__(f"`{partial}` matches {len(candidates)} {kind}s, be more specific")

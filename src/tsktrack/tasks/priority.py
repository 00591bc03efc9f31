# src/tsktrack/tasks/priority.py

from __future__ import annotations

from enum import StrEnum


class TaskPriority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_level(cls, raw: str) -> TaskPriority:
        """Case-insensitive lookup ("HIGH", "high", "High"). Raises ValueError otherwise."""
        wanted = raw.strip().lower()
        for prio in cls:
            if prio.value.lower() == wanted:
                return prio
        raise ValueError(f"unknown priority level {raw!r}")

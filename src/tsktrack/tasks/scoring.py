# src/tsktrack/tasks/scoring.py

"""
Urgency score.

Pure function of the task and "now". Terms are summed, then the special tags adjust
the total ("next" +100, then "hold" -20 floored at 0). Stored scores on disk are
informational only: stores recompute on every load and save.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from .priority import TaskPriority

if TYPE_CHECKING:
    from .task_models import Task

SCORE_PROJECT = 3
SCORE_PER_TAG = 2
SCORE_RUNNING = 15
SCORE_PER_INTERVAL = 1

SCORE_PRIORITY = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 3,
    TaskPriority.HIGH: 8,
    TaskPriority.CRITICAL: 13,
}

SCORE_OVERDUE = 10
SCORE_DUE_SOON = 7  # 0..2 days
SCORE_DUE_LATER = 3  # 3..5 days
SCORE_DUE_SOMETIME = 1

SCORE_NEXT = 100
SCORE_HOLD = 20

# Tags that adjust the total instead of counting as a plain tag.
ADJUSTING_TAGS = ("next", "hold")


def _local_naive(now: datetime) -> datetime:
    """Due dates are naive local times; bring now into the same frame."""
    if now.tzinfo is None:
        return now
    return now.astimezone().replace(tzinfo=None)


def due_date_score(duedate: datetime | None, now: datetime) -> int:
    if duedate is None:
        return 0
    if duedate.tzinfo is not None:
        duedate = _local_naive(duedate)
    days = (duedate - _local_naive(now)).days
    if days < 0:
        return SCORE_OVERDUE
    if days <= 2:
        return SCORE_DUE_SOON
    if days <= 5:
        return SCORE_DUE_LATER
    return SCORE_DUE_SOMETIME


def age_score(created: datetime | None, now: datetime) -> int:
    if created is None:
        return 0
    if created.tzinfo is None or now.tzinfo is None:
        created = created.replace(tzinfo=None)
        now = _local_naive(now)
    days = (now - created).days
    return max(0, days // 7)


def score_task(task: Task, now: datetime) -> int:
    score = 0

    if task.project:
        score += SCORE_PROJECT
    score += SCORE_PER_TAG * sum(1 for t in task.tags if t not in ADJUSTING_TAGS)
    if task.is_running():
        score += SCORE_RUNNING
    score += SCORE_PER_INTERVAL * len(task.timetracker)
    if task.priority is not None:
        score += SCORE_PRIORITY[task.priority]
    score += due_date_score(task.duedate, now)
    score += age_score(task.created_at(), now)

    if "next" in task.tags:
        score += SCORE_NEXT
    if "hold" in task.tags:
        score = max(0, score - SCORE_HOLD)

    return score

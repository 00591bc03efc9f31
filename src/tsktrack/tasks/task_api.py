# src/tsktrack/tasks/task_api.py

"""
High-level task operations: load, mutate, save.

Each function is one load-modify-save round on a single task file. Nothing here is
atomic across files (completing a task and touching its note are separate writes).
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, tzinfo

from ..core.state import AppState
from ..errors import AmbiguousIdentifier, EntityNotFound
from ..parser.descriptor import compile_descriptor
from .report import DailySummary, daily_summary
from .task_models import Task

logger = logging.getLogger(__name__)


def resolve_task_id(state: AppState, partial: str) -> str:
    """Full id for an exact id or an unambiguous fragment of one."""
    partial = partial.strip()
    if state.tasks.exists(partial):
        return partial
    candidates = list(state.tasks.iter_ids(partial)) if partial else []
    if not candidates:
        raise EntityNotFound("task", partial)
    if len(candidates) > 1:
        raise AmbiguousIdentifier("task", partial, candidates)
    return candidates[0]


def load_task(state: AppState, task_id: str) -> Task:
    return state.tasks.load(resolve_task_id(state, task_id))


def new_task(state: AppState, descriptor: str) -> Task:
    task = Task.from_task_descriptor(
        descriptor,
        starttag=state.settings.task_starttag,
        now=state.tasks.now(),
    )
    state.tasks.save(task)
    logger.info("Task created id=%s project=%s tags=%s", task.id, task.project, task.tags)
    return task


def start_task(state: AppState, task_id: str, annotation: str | None = None) -> Task:
    task = load_task(state, task_id)
    task.start(annotation, autorelease=state.settings.task_autorelease, now=state.tasks.now())
    state.tasks.save(task)
    logger.info("Started time tracking for task %s", task.id)
    return task


def stop_task(state: AppState, task_id: str) -> Task:
    task = load_task(state, task_id)
    task.stop(now=state.tasks.now())
    state.tasks.save(task)
    logger.info("Stopped time tracking for task %s", task.id)
    return task


def complete_task(state: AppState, task_id: str) -> Task:
    task = load_task(state, task_id)
    changed = task.complete(
        clear_special_tags=state.settings.task_clearspecialtags,
        now=state.tasks.now(),
    )
    if changed:
        state.tasks.save(task)
        logger.info("Task %s marked as done", task.id)
    else:
        logger.debug("Task %s already done, nothing to do", task.id)
    return task


def delete_task(state: AppState, task_id: str) -> str:
    """Remove the task file. Its note (if any) stays and becomes orphaned."""
    full_id = resolve_task_id(state, task_id)
    state.tasks.delete(full_id)
    return full_id


def set_task_characteristics(state: AppState, task_id: str, descriptor: str) -> Task:
    """
    Apply directives from a descriptor-like string to an existing task, e.g.
    "@other #urgent %x-ref=42 prio:high". Plain text in it is ignored.
    Existing metadata keys are overwritten.
    """
    task = load_task(state, task_id)
    desc = compile_descriptor(descriptor)
    modified = task.set_characteristic(
        project=desc.project,
        tags=desc.tags,
        metadata=list(desc.metadata.items()),
        priority=desc.priority,
        duedate=desc.duedate,
    )
    if modified:
        state.tasks.save(task)
    return task


def unset_task_characteristics(
    state: AppState,
    task_id: str,
    *,
    project: bool = False,
    tags: list[str] | None = None,
    metadata: list[str] | None = None,
    priority: bool = False,
    duedate: bool = False,
) -> Task:
    task = load_task(state, task_id)
    if task.unset_characteristic(
        project=project, tags=tags, metadata=metadata, priority=priority, duedate=duedate
    ):
        state.tasks.save(task)
    return task


def list_tasks(state: AppState, pattern: str | None = None, *, include_done: bool = False) -> list[Task]:
    return state.tasks.list_tasks(pattern, include_done=include_done)


def daily_report(
    state: AppState,
    start: datetime,
    end: datetime | None = None,
    *,
    pattern: str | None = None,
    include_done: bool = False,
    tz: tzinfo | None = None,
) -> tuple[DailySummary, dict[str, Task]]:
    """Daily summary over the listed tasks, plus those tasks by id for display."""
    tasks = state.tasks.list_tasks(pattern, include_done=include_done)
    summary = daily_summary(tasks, start, end, now=state.tasks.now(), tz=tz)
    return summary, {t.id: t for t in tasks}


def running_tasks(state: AppState) -> list[Task]:
    return [t for t in state.tasks.list_tasks() if t.is_running()]


def scan_projects(state: AppState) -> Counter[str]:
    """Project name -> number of tasks using it (done tasks included)."""
    counts: Counter[str] = Counter()
    for task in state.tasks.load_all():
        if task.project:
            counts[task.project] += 1
    return counts


def scan_tags(state: AppState) -> Counter[str]:
    counts: Counter[str] = Counter()
    for task in state.tasks.load_all():
        counts.update(task.tags)
    return counts


def amount_of_tasks(state: AppState, *, include_backups: bool = False) -> int:
    return state.tasks.count(include_backups=include_backups)

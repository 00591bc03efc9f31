# src/tsktrack/tasks/report.py

"""
Daily time summary.

Splits a report window into calendar days and sums, per day and task, the part of
every tracked interval that falls inside that day. Intervals crossing midnight are
cut at the day boundary. A running interval counts up to "now". A task created or
completed inside a day gets an entry for that day even when nothing was tracked.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, tzinfo

from ..errors import EndDateInThePast
from .task_models import Task, utcnow

DailySummary = dict[date, dict[str, timedelta]]


def local_tz() -> tzinfo:
    tz = datetime.now().astimezone().tzinfo
    assert tz is not None
    return tz


def _in_tz(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def _overlap(start: datetime, end: datetime, lo: datetime, hi: datetime) -> timedelta:
    span = min(end, hi) - max(start, lo)
    return span if span > timedelta() else timedelta()


def report_days(start: datetime, end: datetime) -> list[date]:
    """Calendar days touched by [start, end). Both ends in the same zone."""
    last = (end - timedelta(microseconds=1)).date()
    days = []
    day = start.date()
    while day <= last:
        days.append(day)
        day += timedelta(days=1)
    return days


def daily_summary(
    tasks: Iterable[Task],
    start: datetime,
    end: datetime | None = None,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> DailySummary:
    """
    {day: {task_id: tracked time}} for every day of [start, end).

    Naive start/end are read in tz (local time by default); end defaults to now.
    Days without activity map to an empty dict. Raises EndDateInThePast when end is
    not after start.
    """
    tz = tz or local_tz()
    now = _in_tz(now or utcnow(), tz)
    start = _in_tz(start, tz)
    end = _in_tz(end, tz) if end is not None else now
    if end <= start:
        raise EndDateInThePast()

    days = report_days(start, end)
    summary: DailySummary = {day: {} for day in days}

    for task in tasks:
        events = [t for t in (task.created_at(), task.completed_at()) if t is not None]
        intervals = [
            (_in_tz(t.start, tz), _in_tz(t.end, tz) if t.end is not None else now)
            for t in task.timetracker
        ]

        for day in days:
            lo = max(datetime.combine(day, time(), tzinfo=tz), start)
            hi = min(datetime.combine(day + timedelta(days=1), time(), tzinfo=tz), end)
            entry = summary[day]

            for when in events:
                if lo <= _in_tz(when, tz) < hi:
                    entry.setdefault(task.id, timedelta())

            for t_start, t_end in intervals:
                part = _overlap(t_start, t_end, lo, hi)
                if part:
                    entry[task.id] = entry.get(task.id, timedelta()) + part

    return summary

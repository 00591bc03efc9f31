# tests/test_task_timetracking.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from tsktrack.errors import TaskAlreadyCompleted, TaskAlreadyRunning, TaskNotRunning
from tsktrack.tasks.task_models import COMPLETED_TIME_KEY, Task


def _open_intervals(task: Task) -> int:
    return sum(1 for t in task.timetracker if t.end is None)


def test_start_stop_cycle(now) -> None:
    task = Task.new("track me", now=now)
    assert not task.is_running()
    assert task.current_runtime(now) is None

    task.start("coding", now=now)
    assert task.is_running()
    assert task.current_runtime(now + timedelta(minutes=5)) == timedelta(minutes=5)

    with pytest.raises(TaskAlreadyRunning):
        task.start(now=now)

    task.stop(now=now + timedelta(minutes=10))
    assert not task.is_running()
    assert task.timetracker[0].annotation == "coding"
    assert task.timetracker[0].end == now + timedelta(minutes=10)

    with pytest.raises(TaskNotRunning):
        task.stop(now=now)


def test_at_most_one_open_interval(now) -> None:
    task = Task.new("x", now=now)
    for i in range(3):
        task.start(now=now + timedelta(hours=i))
        assert _open_intervals(task) == 1
        task.stop(now=now + timedelta(hours=i, minutes=30))
        assert _open_intervals(task) == 0

    assert len(task.timetracker) == 3
    assert task.total_tracked(now) == timedelta(minutes=90)


def test_complete_stops_running_tracking(now) -> None:
    task = Task.new("x", now=now)
    task.start(now=now)

    done_at = now + timedelta(hours=1)
    assert task.complete(now=done_at) is True

    assert task.done
    assert not task.is_running()
    completed = datetime.fromisoformat(task.metadata[COMPLETED_TIME_KEY])
    assert task.timetracker[-1].end is not None
    assert task.timetracker[-1].end <= completed


def test_complete_is_idempotent(now) -> None:
    task = Task.new("x", now=now)
    assert task.complete(now=now) is True
    stamp = task.metadata[COMPLETED_TIME_KEY]

    assert task.complete(now=now + timedelta(days=1)) is False
    assert task.metadata[COMPLETED_TIME_KEY] == stamp


def test_done_task_rejects_time_tracking(now) -> None:
    task = Task.new("x", now=now)
    task.complete(now=now)

    with pytest.raises(TaskAlreadyCompleted):
        task.start(now=now)
    with pytest.raises(TaskAlreadyCompleted):
        task.stop(now=now)


def test_start_releases_hold(now) -> None:
    task = Task.from_task_descriptor("x #hold #other", now=now)
    task.start(now=now)
    assert task.tags == ["other"]


def test_start_keeps_hold_without_autorelease(now) -> None:
    task = Task.from_task_descriptor("x #hold", now=now)
    task.start(autorelease=False, now=now)
    assert task.tags == ["hold"]


def test_start_tag_starts_tracking(now) -> None:
    task = Task.from_task_descriptor("x #start #other", starttag=True, now=now)
    assert task.is_running()
    assert task.tags == ["other"]
    assert task.timetracker[0].start == now


def test_start_tag_is_plain_tag_when_disabled(now) -> None:
    task = Task.from_task_descriptor("x #start", starttag=False, now=now)
    assert not task.is_running()
    assert task.tags == ["start"]


def test_complete_clears_special_tags(now) -> None:
    task = Task.from_task_descriptor("x #next #hold #keep", now=now)
    task.complete(clear_special_tags=True, now=now)
    assert task.tags == ["keep"]

    other = Task.from_task_descriptor("x #next #keep", now=now)
    other.complete(now=now)
    assert other.tags == ["next", "keep"]

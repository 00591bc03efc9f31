# tests/test_descriptor.py

from __future__ import annotations

import uuid

import pytest
import yaml

from tsktrack.errors import (
    IdenticalMetadataKeyNotAllowed,
    MetadataPrefixInvalid,
    MultipleDuedatesNotAllowed,
    MultiplePrioritiesNotAllowed,
    MultipleProjectsNotAllowed,
    ParseError,
    TaskDescriptorEmpty,
)
from tsktrack.parser.descriptor import compile_descriptor, parse_metadata_pair
from tsktrack.storage.entity_store import dump_yaml
from tsktrack.tasks.priority import TaskPriority
from tsktrack.tasks.task_models import CREATE_TIME_KEY, Task


def test_task_from_full_descriptor(now) -> None:
    task = Task.from_task_descriptor(
        "some task description here @project-here #taghere #a-second-tag "
        "%x-meta=data %x-fuu=bar additional text at the end",
        now=now,
    )

    uuid.UUID(task.id)
    assert task.description == "some task description here additional text at the end"
    assert task.project == "project-here"
    assert task.tags == ["taghere", "a-second-tag"]
    assert task.metadata["x-meta"] == "data"
    assert task.metadata["x-fuu"] == "bar"
    assert task.metadata[CREATE_TIME_KEY] == now.isoformat()
    assert task.done is False
    assert task.timetracker == []
    assert task.priority is None
    assert task.duedate is None


def test_plain_text_descriptor(now) -> None:
    task = Task.from_task_descriptor("buy milk", now=now)
    assert task.description == "buy milk"
    assert task.project is None
    assert task.tags == []
    assert list(task.metadata) == [CREATE_TIME_KEY]


@pytest.mark.parametrize(
    "text, error",
    [
        ("this has a @project-name, and a @second-project name", MultipleProjectsNotAllowed),
        ("x prio:low prio:high", MultiplePrioritiesNotAllowed),
        ("x due:2024-01-01T10:00:00 due:2024-01-02T10:00:00", MultipleDuedatesNotAllowed),
        ("x %x-foo=1 %x-foo=2", IdenticalMetadataKeyNotAllowed),
        ("x %foo=bar", MetadataPrefixInvalid),
    ],
)
def test_descriptor_constraints(text, error) -> None:
    with pytest.raises(error):
        compile_descriptor(text)


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_empty_descriptor(text) -> None:
    with pytest.raises(TaskDescriptorEmpty):
        compile_descriptor(text)


def test_metadata_keys_are_lowercased() -> None:
    desc = compile_descriptor("x %X-Ticket=ABC-1")
    assert desc.metadata == {"x-ticket": "ABC-1"}

    with pytest.raises(IdenticalMetadataKeyNotAllowed) as exc_info:
        compile_descriptor("x %x-a=1 %X-A=2")
    assert exc_info.value.key == "x-a"


def test_invalid_prefix_reports_key() -> None:
    with pytest.raises(MetadataPrefixInvalid) as exc_info:
        compile_descriptor("x %Foo=bar")
    assert exc_info.value.key == "foo"
    assert "x-foo" in str(exc_info.value)


def test_duplicate_tags_are_dropped() -> None:
    desc = compile_descriptor("x #a #b #a")
    assert desc.tags == ["a", "b"]


def test_priority_and_duedate() -> None:
    desc = compile_descriptor("report prio:High due:2024-05-01T12:30:00")
    assert desc.priority is TaskPriority.HIGH
    assert desc.duedate is not None
    assert (desc.duedate.hour, desc.duedate.minute) == (12, 30)


def test_parse_metadata_pair() -> None:
    assert parse_metadata_pair("X-Key=value") == ("x-key", "value")
    with pytest.raises(ParseError):
        parse_metadata_pair("x-key")
    with pytest.raises(ParseError):
        parse_metadata_pair("x-a=b=c")
    with pytest.raises(MetadataPrefixInvalid):
        parse_metadata_pair("key=value")


def test_task_yaml_field_order_and_round_trip(now) -> None:
    task = Task.from_task_descriptor("write docs @work #writing %x-ref=42 prio:low", now=now)
    task.start("first pass", now=now)

    text = dump_yaml(task.to_dict())
    keys = [line.split(":")[0] for line in text.splitlines() if line and not line.startswith((" ", "-"))]
    assert keys == [
        "id",
        "description",
        "done",
        "project",
        "tags",
        "metadata",
        "priority",
        "duedate",
        "timetracker",
        "score",
    ]
    assert "priority: Low" in text

    again = Task.from_dict(yaml.safe_load(text))
    assert again == task
    assert dump_yaml(again.to_dict()) == text


def test_task_from_hand_written_yaml() -> None:
    doc = yaml.safe_load(
        """
id: bd6f75aa-8c8d-47fb-b905-d9f7b15c782d
description: some task description here additional text at the end
done: false
project: project-here
tags:
- taghere
- a-second-tag
metadata:
  x-meta: data
  x-fuu: bar
  tsk-rs-task-create-time: 2022-08-06T07:55:26.568460+00:00
priority: null
duedate: null
timetracker: null
score: 999
"""
    )
    task = Task.from_dict(doc)

    assert task.id == "bd6f75aa-8c8d-47fb-b905-d9f7b15c782d"
    assert task.tags == ["taghere", "a-second-tag"]
    assert task.timetracker == []
    created = task.created_at()
    assert created is not None and created.year == 2022
    assert isinstance(task.metadata[CREATE_TIME_KEY], str)


def test_from_dict_rejects_broken_documents() -> None:
    with pytest.raises(KeyError):
        Task.from_dict({"description": "no id"})
    with pytest.raises(TypeError):
        Task.from_dict(["not", "a", "mapping"])
    with pytest.raises(ValueError):
        Task.from_dict({"id": "a", "description": "b", "priority": "someday"})
    with pytest.raises(TypeError):
        Task.from_dict({"id": "a", "description": "b", "done": "false"})


def test_from_dict_rejects_inconsistent_time_tracking() -> None:
    open_track = {"start": "2024-05-01T09:00:00+00:00", "end": None}
    closed_track = {"start": "2024-05-01T08:00:00+00:00", "end": "2024-05-01T08:30:00+00:00"}

    with pytest.raises(ValueError):
        Task.from_dict({"id": "a", "description": "b", "timetracker": [open_track, open_track]})
    with pytest.raises(ValueError):
        Task.from_dict({"id": "a", "description": "b", "done": True, "timetracker": [open_track]})

    task = Task.from_dict({"id": "a", "description": "b", "timetracker": [closed_track, open_track]})
    assert task.is_running()

# tests/test_lexicon.py

from __future__ import annotations

from datetime import datetime

import pytest

from tsktrack.errors import ParseError
from tsktrack.parser.lexicon import (
    Description,
    DueDate,
    Metadata,
    Priority,
    Project,
    Tag,
    parse_task,
)
from tsktrack.tasks.priority import TaskPriority


def test_directive_inside_a_word() -> None:
    assert parse_task("abc#work") == [Description("abc"), Tag("work")]


def test_symbol_directives_in_order() -> None:
    text = (
        "some task description here @project-here #taghere #a-second-tag "
        "%x-meta=data %fuu=bar additional text at the end"
    )
    assert parse_task(text) == [
        Description("some task description here"),
        Project("project-here"),
        Tag("taghere"),
        Tag("a-second-tag"),
        Metadata("x-meta", "data"),
        Metadata("fuu", "bar"),
        Description("additional text at the end"),
    ]


def test_keyword_directives() -> None:
    text = (
        "some task description here PRJ:project-here #taghere TAG:a-second-tag "
        "META:x-meta=data %fuu=bar DUE:2022-08-16T16:56:00 PRIO:medium and some text at the end"
    )
    assert parse_task(text) == [
        Description("some task description here"),
        Project("project-here"),
        Tag("taghere"),
        Tag("a-second-tag"),
        Metadata("x-meta", "data"),
        Metadata("fuu", "bar"),
        DueDate(datetime(2022, 8, 16, 16, 56, 0)),
        Priority(TaskPriority.MEDIUM),
        Description("and some text at the end"),
    ]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("tag:x", [Tag("x")]),
        ("proj:p", [Project("p")]),
        ("prj:p", [Project("p")]),
        ("PROJ:p", [Project("p")]),
        ("meta:x-a=b", [Metadata("x-a", "b")]),
        ("prio:high", [Priority(TaskPriority.HIGH)]),
        ("prio:CRITICAL", [Priority(TaskPriority.CRITICAL)]),
        ("duedate:2024-01-31T12:00:00.250000", [DueDate(datetime(2024, 1, 31, 12, 0, 0, 250000))]),
    ],
)
def test_keyword_aliases(text, expected) -> None:
    assert parse_task(text) == expected


def test_plain_text_is_one_description() -> None:
    assert parse_task("  just some words  ") == [Description("just some words")]
    assert parse_task("") == []


def test_email_like_text_splits_on_at() -> None:
    assert parse_task("mail me@host now") == [
        Description("mail me"),
        Project("host"),
        Description("now"),
    ]


def test_incomplete_directives_stay_text() -> None:
    assert parse_task("# foo") == [Description("# foo")]
    assert parse_task("abc#") == [Description("abc#")]
    assert parse_task("%x-meta = value") == [Description("%x-meta = value")]


def test_metadata_value_stops_at_equals_sign() -> None:
    assert parse_task("%x-a=b=c") == [Metadata("x-a", "b"), Description("=c")]


def test_invalid_priority_raises_parse_error() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_task("fix it prio:urgent")
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_invalid_duedate_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_task("fix it due:tomorrow")
    with pytest.raises(ParseError):
        parse_task("fix it due:2024-01-31")
    with pytest.raises(ParseError):
        parse_task("fix it due:2024-01-31T12:00")

# src/tsktrack/parser/lexicon.py

"""
Directive lexer for one-line task descriptors.

A descriptor is free text with embedded directives:

    write report @work #writing %x-ticket=123 prio:high due:2024-05-01T12:00:00

The scanner tries every directive at every character offset of the remaining text and
takes the leftmost match. Text before the match becomes a Description, scanning resumes
right after the match. Because every offset is tried, directives are found mid-word too:
"abc#work" yields Description("abc") followed by Tag("work").
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..errors import ParseError
from ..tasks.priority import TaskPriority

# ---- expressions ----


@dataclass(frozen=True, slots=True)
class Description:
    text: str


@dataclass(frozen=True, slots=True)
class Project:
    name: str


@dataclass(frozen=True, slots=True)
class Tag:
    name: str


@dataclass(frozen=True, slots=True)
class Metadata:
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class Priority:
    level: TaskPriority


@dataclass(frozen=True, slots=True)
class DueDate:
    when: datetime


Expression = Description | Project | Tag | Metadata | Priority | DueDate


# ---- raw matches (before value conversion) ----


@dataclass(frozen=True, slots=True)
class _Raw:
    kind: str
    value: str
    key: str = ""


_DUEDATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?$")


def _nonws_char(c: str) -> bool:
    return not c.isspace()


def _meta_char(c: str) -> bool:
    return _nonws_char(c) and c != "="


def _take_while1(text: str, pos: int, pred: Callable[[str], bool]) -> int | None:
    """End offset of the maximal non-empty run of pred-chars starting at pos, or None."""
    end = pos
    while end < len(text) and pred(text[end]):
        end += 1
    return end if end > pos else None


def _word(text: str, pos: int, kind: str) -> tuple[_Raw, int] | None:
    end = _take_while1(text, pos, _nonws_char)
    if end is None:
        return None
    return _Raw(kind, text[pos:end]), end


def _metadata_pair(text: str, pos: int, kind: str) -> tuple[_Raw, int] | None:
    key_end = _take_while1(text, pos, _meta_char)
    if key_end is None or key_end >= len(text) or text[key_end] != "=":
        return None
    value_end = _take_while1(text, key_end + 1, _meta_char)
    if value_end is None:
        return None
    return _Raw(kind, text[key_end + 1 : value_end], key=text[pos:key_end]), value_end


_Body = Callable[[str, int, str], "tuple[_Raw, int] | None"]

# Tried in this order at every offset; first hit wins.
_DIRECTIVES: tuple[tuple[tuple[str, ...], str, _Body], ...] = (
    (("#",), "tag", _word),
    (("tag:", "TAG:"), "tag", _word),
    (("@",), "project", _word),
    (("prj:", "proj:", "PRJ:", "PROJ:"), "project", _word),
    (("%",), "metadata", _metadata_pair),
    (("META:", "meta:"), "metadata", _metadata_pair),
    (("prio:", "PRIO:"), "priority", _word),
    (("due:", "DUE:", "duedate:", "DUEDATE:"), "duedate", _word),
)


def _directive_at(text: str, pos: int) -> tuple[_Raw, int] | None:
    for prefixes, kind, body in _DIRECTIVES:
        for prefix in prefixes:
            if text.startswith(prefix, pos):
                hit = body(text, pos + len(prefix), kind)
                if hit is not None:
                    return hit
    return None


def scan(text: str) -> list[_Raw]:
    """Split text into raw expressions using the leftmost-match policy."""
    out: list[_Raw] = []
    rest = text

    while rest:
        for offset in range(len(rest)):
            hit = _directive_at(rest, offset)
            if hit is None:
                continue
            raw, end = hit
            leading = rest[:offset].strip()
            if leading:
                out.append(_Raw("description", leading))
            out.append(raw)
            rest = rest[end:]
            break
        else:
            tail = rest.strip()
            if tail:
                out.append(_Raw("description", tail))
            break

    return out


def _parse_duedate(raw: str) -> datetime:
    if not _DUEDATE_RE.match(raw):
        raise ValueError(f"invalid date time format {raw!r}, expected YYYY-MM-DDTHH:MM:SS")
    return datetime.fromisoformat(raw)


def _to_expression(raw: _Raw) -> Expression:
    match raw.kind:
        case "description":
            return Description(raw.value)
        case "project":
            return Project(raw.value)
        case "tag":
            return Tag(raw.value)
        case "metadata":
            return Metadata(raw.key, raw.value)
        case "priority":
            return Priority(TaskPriority.from_level(raw.value))
        case "duedate":
            return DueDate(_parse_duedate(raw.value))
    raise ValueError(f"unknown expression kind {raw.kind!r}")


def parse_task(text: str) -> list[Expression]:
    """Lex a descriptor into typed expressions, in encounter order."""
    expressions: list[Expression] = []
    for raw in scan(text):
        try:
            expressions.append(_to_expression(raw))
        except ValueError as exc:
            raise ParseError(f"malformed expression in task descriptor: {exc}") from exc
    return expressions

# src/tsktrack/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.state import AppState
from ..errors import ParseError, TskError
from ..namespace import list_namespaces
from ..notes import note_api
from ..parser.descriptor import USER_METADATA_PREFIX, parse_metadata_pair
from ..storage.entity_store import dump_yaml
from ..tasks import task_api
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Command:
    name: str
    handler: CommandHandler
    help_text: str
    aliases: tuple[str, ...] = ()


class CommandRegistry:
    """
    Slash commands of the console (/new, /start, /done, ...).

    A handler receives the state and the whitespace-split arguments and returns the
    reply text. TskError raised by the core becomes an "Error: ..." reply; anything
    else propagates to the connector.
    """

    def __init__(self) -> None:
        self._commands: dict[str, _Command] = {}
        self._by_name: dict[str, _Command] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        cmd = _Command(name.lower(), handler, help_text, tuple(a.lower() for a in aliases or []))
        self._commands[cmd.name] = cmd
        for word in (cmd.name, *cmd.aliases):
            self._by_name[word] = cmd

    def handle(self, state: AppState, line: str) -> str | None:
        """Reply for "/command args", or None when line is not a command."""
        if not line.startswith("/"):
            return None

        words = line[1:].split()
        if not words:
            return "Empty command. Try /help."

        cmd = self._by_name.get(words[0].lower())
        if cmd is None:
            return f"Unknown command: /{words[0].lower()}. Try /help."

        try:
            return cmd.handler(state, words[1:])
        except TskError as e:
            logger.debug("/%s %s failed: %s", cmd.name, " ".join(words[1:]), e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Commands:"]
        for cmd in self._commands.values():
            also = f" (also /{', /'.join(cmd.aliases)})" if cmd.aliases else ""
            lines.append(f"  /{cmd.name}{also} - {cmd.help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _hhmmss(delta: timedelta) -> str:
    total = int(delta.total_seconds())
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _task_line(task: Task) -> str:
    parts = [f"{task.id}", f"{task.score:>4}", task.description]
    if task.project:
        parts.append(f"@{task.project}")
    if task.tags:
        parts.append(" ".join(f"#{t}" for t in task.tags))
    if task.is_running():
        parts.append(f"[running {_hhmmss(task.current_runtime() or timedelta())}]")
    if task.done:
        parts.append("[done]")
    return "  ".join(parts)


def _usage(text: str) -> str:
    return f"Usage: {text}"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    tasks = task_api.amount_of_tasks(state)
    backups = task_api.amount_of_tasks(state, include_backups=True) - tasks
    return "\n".join(
        [
            f"Namespace: {state.settings.namespace} ({state.settings.db_path()})",
            f"Tasks: {tasks} (backups: {backups})",
            f"Notes: {note_api.amount_of_notes(state)}",
            f"Running: {len(task_api.running_tasks(state))}",
        ]
    )


def cmd_new(state: AppState, args: list[str]) -> str:
    task = task_api.new_task(state, " ".join(args))
    running = " (time tracking started)" if task.is_running() else ""
    return f"Task created: {task.id}{running}"


def cmd_list(state: AppState, args: list[str]) -> str:
    include_done = "--all" in args
    rest = [a for a in args if a != "--all"]
    tasks = task_api.list_tasks(state, rest[0] if rest else None, include_done=include_done)
    if not tasks:
        return "No tasks."
    return "\n".join(_task_line(t) for t in tasks)


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return _usage("/show <id>")
    task = task_api.load_task(state, args[0])
    return dump_yaml(task.to_dict()).rstrip()


def cmd_start(state: AppState, args: list[str]) -> str:
    if not args:
        return _usage("/start <id> [annotation]")
    annotation = " ".join(args[1:]) or None
    task = task_api.start_task(state, args[0], annotation)
    return f"Started time tracking for task '{task.id}'"


def cmd_stop(state: AppState, args: list[str]) -> str:
    if not args:
        return _usage("/stop <id>")
    task = task_api.stop_task(state, args[0])
    return f"Stopped time tracking for task '{task.id}'"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return _usage("/done <id>")
    task = task_api.complete_task(state, args[0])
    return f"Task '{task.id}' is done"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return _usage("/del <id>")
    task_id = task_api.delete_task(state, args[0])
    return f"Task '{task_id}' deleted"


def cmd_set(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return _usage("/set <id> <@project #tag %x-key=value prio:LEVEL due:DATETIME ...>")
    task = task_api.set_task_characteristics(state, args[0], " ".join(args[1:]))
    return _task_line(task)


def cmd_unset(state: AppState, args: list[str]) -> str:
    """
    /unset <id> project priority duedate #tag x-key ...
    """
    if len(args) < 2:
        return _usage("/unset <id> [project] [priority] [duedate] [#tag ...] [x-key ...]")
    words = args[1:]
    task = task_api.unset_task_characteristics(
        state,
        args[0],
        project="project" in words,
        priority="priority" in words,
        duedate="duedate" in words,
        tags=[w[1:] for w in words if w.startswith("#") and len(w) > 1],
        metadata=[w for w in words if w not in ("project", "priority", "duedate") and not w.startswith("#")],
    )
    return _task_line(task)


def cmd_note(state: AppState, args: list[str]) -> str:
    """
    /note <id>          -> show note and its action points
    /note <id> <text>   -> append text (creates the note on first use)
    """
    if not args:
        return _usage("/note <id> [text]")
    if len(args) > 1:
        note = note_api.edit_note(state, args[0], " ".join(args[1:]))
        return f"Note for task '{note.task_id}' saved"

    note = note_api.load_note(state, args[0])
    lines = [note.markdown or "(empty note)"]
    points = note.get_action_points()
    if points:
        lines.append("")
        lines.append("Action points:")
        for p in points:
            lines.append(f"  [{'x' if p.checked else ' '}] {p.description}")
    return "\n".join(lines)


def cmd_notemeta(state: AppState, args: list[str]) -> str:
    """
    /notemeta <id> set x-key=value ...
    /notemeta <id> unset x-key ...
    """
    if len(args) < 3 or args[1].lower() not in ("set", "unset"):
        return _usage("/notemeta <id> set x-key=value ... | /notemeta <id> unset x-key ...")
    if args[1].lower() == "set":
        pairs = [parse_metadata_pair(a) for a in args[2:]]
        note = note_api.set_note_metadata(state, args[0], pairs)
    else:
        note = note_api.unset_note_metadata(state, args[0], args[2:])
    user_keys = sorted(k for k in note.metadata if k.startswith(USER_METADATA_PREFIX))
    shown = ", ".join(f"{k}={note.metadata[k]}" for k in user_keys) or "no user metadata"
    return f"Note for task '{note.task_id}': {shown}"


def cmd_notes(state: AppState, args: list[str]) -> str:
    found = note_api.list_notes(
        state,
        orphaned="--orphaned" in args,
        completed="--completed" in args,
    )
    if not found:
        return "No notes."
    lines = []
    for f in found:
        title = f.task.description if f.task is not None else "(orphaned)"
        lines.append(f"{f.note.task_id}  {title}")
    return "\n".join(lines)


def _report_date(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw)
    except ValueError as e:
        raise ParseError(f"invalid report date {raw!r}, expected YYYY-MM-DD[THH:MM:SS]") from e


def cmd_report(state: AppState, args: list[str]) -> str:
    """
    /report <start> [end] [--all]

    Tracked time per day and task. End defaults to now; --all includes done tasks.
    """
    include_done = "--all" in args
    dates = [a for a in args if a != "--all"]
    if not dates or len(dates) > 2:
        return _usage("/report <start> [end] [--all]")
    start = _report_date(dates[0])
    end = _report_date(dates[1]) if len(dates) > 1 else None

    summary, tasks = task_api.daily_report(state, start, end, include_done=include_done)
    lines = []
    for day, entries in summary.items():
        lines.append(day.isoformat())
        if not entries:
            lines.append("  (nothing tracked)")
        for task_id, spent in sorted(entries.items(), key=lambda kv: kv[1], reverse=True):
            lines.append(f"  {task_id}  {_hhmmss(spent)}  {tasks[task_id].description}")
    return "\n".join(lines)


def cmd_projects(state: AppState, args: list[str]) -> str:
    counts = task_api.scan_projects(state)
    if not counts:
        return "No projects."
    return "\n".join(f"{n:>4}  {name}" for name, n in counts.most_common())


def cmd_tags(state: AppState, args: list[str]) -> str:
    counts = task_api.scan_tags(state)
    if not counts:
        return "No tags."
    return "\n".join(f"{n:>4}  #{name}" for name, n in counts.most_common())


def cmd_ns(state: AppState, args: list[str]) -> str:
    namespaces = list_namespaces(state.settings)
    if not namespaces:
        return "No namespaces."
    return "\n".join(f"{'*' if ns.is_current else ' '} {ns.name}" for ns in namespaces)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show namespace, data dir and counts.")
registry.register("new", cmd_new, help_text="Create a task: /new text @project #tag %x-key=value prio:high due:2024-01-31T12:00:00", aliases=["add"])
registry.register("list", cmd_list, help_text="List tasks by urgency: /list [id-fragment] [--all].", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("start", cmd_start, help_text="Start time tracking: /start <id> [annotation].")
registry.register("stop", cmd_stop, help_text="Stop time tracking: /stop <id>.")
registry.register("done", cmd_done, help_text="Mark a task done: /done <id>.")
registry.register("del", cmd_delete, help_text="Delete a task (its note is kept): /del <id>.", aliases=["rm"])
registry.register("set", cmd_set, help_text="Set project/tags/metadata/priority/due: /set <id> <directives>.")
registry.register("unset", cmd_unset, help_text="Unset fields: /unset <id> project priority duedate #tag x-key.")
registry.register("note", cmd_note, help_text="Show or append to a task note: /note <id> [text].")
registry.register("notes", cmd_notes, help_text="List notes: /notes [--orphaned] [--completed].")
registry.register("notemeta", cmd_notemeta, help_text="Edit note metadata: /notemeta <id> set x-key=value ... | unset x-key ...")
registry.register("projects", cmd_projects, help_text="Projects in use with task counts.")
registry.register("tags", cmd_tags, help_text="Tags in use with task counts.")
registry.register("report", cmd_report, help_text="Tracked time per day: /report <start> [end] [--all].")
registry.register("ns", cmd_ns, help_text="List namespaces (* marks the current one).")

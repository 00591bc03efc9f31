# src/tsktrack/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_WORDS = ("/exit", "/quit", "/q")
ERROR_PREFIXES = ("Error:", "Unknown command", "Empty command", "Usage:")


def _dispatch(state: AppState, line: str) -> str:
    """Run one console line. Plain text (no leading slash) is a new task descriptor."""
    if not line.startswith("/"):
        line = "/new " + line
    try:
        reply = command_registry.handle(state, line)
    except Exception:
        logger.exception("Unexpected failure while running %r", line)
        return "Error: internal error, see tsk.log"
    return reply if reply is not None else ""


def run_single_command(state: AppState, words: list[str]) -> int:
    """
    One-shot mode: `tsk new buy milk` behaves like typing "/new buy milk".
    Prints the reply and returns the process exit code (1 when the reply is an error).
    """
    first = words[0] if words else ""
    line = " ".join(words) if first.startswith("/") else "/" + " ".join(words)
    reply = _dispatch(state, line)
    print(reply)
    return 1 if reply.startswith(ERROR_PREFIXES) else 0


def run_console_loop(state: AppState) -> None:
    """Interactive mode; ends on EOF, Ctrl-C or one of EXIT_WORDS."""
    ns = state.settings.namespace
    print(f"tsk [{ns}]: /help lists commands, /exit quits, any other text creates a task.")
    logger.info("Console session started in namespace %s", ns)

    while True:
        try:
            line = input(f"{ns}> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue
        if line.lower() in EXIT_WORDS:
            break

        print(_dispatch(state, line))

    logger.info("Console session ended")

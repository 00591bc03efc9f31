# src/tsktrack/cli/main.py

"""
CLI entrypoint.

tsk [-n NAMESPACE] [-c CONFIG] [command args...]

With a command ("tsk new buy milk #home") the command runs once and the process exits.
Without one the interactive console starts.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..config import get_settings
from ..connectors.console_connector import run_console_loop, run_single_command
from ..errors import TskError
from ..logging_setup import level_from_name, setup_logging
from .bootstrap import create_initial_state

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tsk", description="Tasks and notes from one line of text.")
    parser.add_argument("-n", "--namespace", help="namespace to use (env: TSK_NAMESPACE)")
    parser.add_argument("-c", "--config", help="TOML config file (env: TSK_CONFIG)")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command and its arguments")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = get_settings(namespace=args.namespace, config_file=args.config)
    except (OSError, ValueError) as e:
        print(f"Error while reading configuration: {e}", file=sys.stderr)
        return 2

    log_file = setup_logging(log_dir=settings.log_dir, console_level=level_from_name(settings.log_level))
    logger.debug("tsk %s namespace=%s log=%s", " ".join(args.command), settings.namespace, log_file)

    try:
        state = create_initial_state(settings=settings)
    except TskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command:
        return run_single_command(state, args.command)

    run_console_loop(state)
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

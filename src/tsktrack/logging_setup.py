# src/tsktrack/logging_setup.py

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

LOG_FILE_NAME = "tsk.log"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 3

_FILE_FORMAT = "%(asctime)s.%(msecs)03d %(process)d %(levelname)s %(name)s: %(message)s"
_CONSOLE_FORMAT = "tsk: %(levelname)s: %(message)s"


class _StorageChatterFilter(logging.Filter):
    """
    Console only. Every save/load logs at DEBUG, and a single /list loads every task,
    so lock and rotation records from tsktrack.storage.* need WARNING to get through.
    Anything outside tsktrack (and captured py.warnings) needs ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("tsktrack.storage."):
            return record.levelno >= logging.WARNING
        if record.name.startswith("tsktrack."):
            return True
        return record.levelno >= logging.ERROR


def level_from_name(name: str | None, default: int = logging.WARNING) -> int:
    """"info" / "DEBUG" / "30" -> logging level; unknown names give default."""
    if not name:
        return default
    name = name.strip()
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logging to two places:
    - stderr, terse and filtered, so command output on stdout stays clean
    - <log_dir>/tsk.log, size-rotated, with process ids (several tsk processes may share it)

    Replaces handlers installed earlier. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    console.addFilter(_StorageChatterFilter())
    root.addHandler(console)

    logfile = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    logfile.setLevel(file_level)
    logfile.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(logfile)

    # warnings.warn(...) -> 'py.warnings' logger
    logging.captureWarnings(True)
    return log_file

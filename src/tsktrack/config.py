# src/tsktrack/config.py

"""Settings loaded from defaults, an optional TOML file and environment variables (+ .env).

Precedence, lowest first:
- built-in defaults,
- TOML config file (tables [data], [task], [note] and a top-level log_level),
- TSK_* environment variables (a local .env is loaded first, never overriding the real env),
- the explicit namespace argument (the command line usually supplies it).

The core never reads settings on its own: stores and task operations receive a Settings
instance. get_settings() exists for the front end only.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import DataDirectoryDoesNotExist

logger = logging.getLogger(__name__)

ENV_PREFIX = "TSK"
DEFAULT_NAMESPACE = "default"
DEFAULT_CONFIG_FILE = "tsk.toml"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def default_data_dir() -> Path:
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".local" / "share"
    return base / "tsk"


def default_config_file() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "tsk" / DEFAULT_CONFIG_FILE


def _read_toml(path: Path | None) -> dict[str, Any]:
    if path is None or not path.is_file():
        return {}
    with path.open("rb") as fh:
        data = tomllib.load(fh)
    logger.debug("Loaded config file %s", path)
    return data


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Namespace / logging ----
    namespace: str
    log_level: str
    log_dir: Path

    # ---- Data storage ----
    data_dir: Path
    data_createdir: bool
    data_rotate: int

    # ---- Task behaviour ----
    task_autorelease: bool  # starting time tracking drops the "hold" tag
    task_starttag: bool  # tag "start" on a new task starts time tracking right away
    task_clearspecialtags: bool  # completing a task drops start/hold/next

    # ---- Note behaviour ----
    note_description: bool  # new note markdown starts with the task description as title
    note_timestamp: bool  # each note edit adds a local timestamp subheader

    @staticmethod
    def from_env(
        namespace: str | None = None,
        config_file: str | Path | None = None,
    ) -> "Settings":
        load_dotenv(override=False)

        cfg_path = Path(config_file).expanduser() if config_file else _env_path(
            _k("CONFIG"), default_config_file()
        )
        toml = _read_toml(cfg_path)
        data = toml.get("data", {}) or {}
        task = toml.get("task", {}) or {}
        note = toml.get("note", {}) or {}

        data_dir = _env_path(
            _k("DATA_PATH"),
            Path(data["path"]).expanduser() if data.get("path") else default_data_dir(),
        )

        return Settings(
            namespace=namespace or _env(_k("NAMESPACE"), DEFAULT_NAMESPACE),
            log_level=_env(_k("LOG_LEVEL"), str(toml.get("log_level", "WARNING"))),
            log_dir=_env_path(_k("LOG_DIR"), data_dir / "logs"),
            data_dir=data_dir,
            data_createdir=_env_bool(_k("DATA_CREATEDIR"), bool(data.get("createdir", True))),
            data_rotate=max(0, _env_int(_k("DATA_ROTATE"), int(data.get("rotate", 3)))),
            task_autorelease=_env_bool(_k("TASK_AUTORELEASE"), bool(task.get("autorelease", True))),
            task_starttag=_env_bool(_k("TASK_STARTTAG"), bool(task.get("starttag", True))),
            task_clearspecialtags=_env_bool(
                _k("TASK_CLEARSPECIALTAGS"), bool(task.get("clearspecialtags", True))
            ),
            note_description=_env_bool(_k("NOTE_DESCRIPTION"), bool(note.get("description", True))),
            note_timestamp=_env_bool(_k("NOTE_TIMESTAMP"), bool(note.get("timestamp", True))),
        )

    @staticmethod
    def for_directory(data_dir: str | Path, *, namespace: str = DEFAULT_NAMESPACE, **overrides: Any) -> "Settings":
        """Defaults rooted at data_dir, without reading env or files (tests, embedding)."""
        data_dir = Path(data_dir)
        base = Settings(
            namespace=namespace,
            log_level="WARNING",
            log_dir=data_dir / "logs",
            data_dir=data_dir,
            data_createdir=True,
            data_rotate=3,
            task_autorelease=True,
            task_starttag=True,
            task_clearspecialtags=True,
            note_description=True,
            note_timestamp=True,
        )
        return replace(base, **overrides) if overrides else base

    # ---- derived paths ----

    def _ensure_dir(self, path: Path) -> Path:
        if path.is_dir():
            return path
        if not self.data_createdir:
            raise DataDirectoryDoesNotExist(path)
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Created data directory %s", path)
        return path

    def db_path(self) -> Path:
        """Namespace directory holding the tasks/ and notes/ subdirectories."""
        return self._ensure_dir(self.data_dir / self.namespace)

    def task_dir(self) -> Path:
        return self._ensure_dir(self.db_path() / "tasks")

    def note_dir(self) -> Path:
        return self._ensure_dir(self.db_path() / "notes")


_SETTINGS: Settings | None = None


def get_settings(namespace: str | None = None, config_file: str | Path | None = None) -> Settings:
    global _SETTINGS
    if _SETTINGS is None or namespace is not None or config_file is not None:
        _SETTINGS = Settings.from_env(namespace=namespace, config_file=config_file)
    return _SETTINGS

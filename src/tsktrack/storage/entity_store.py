# src/tsktrack/storage/entity_store.py

from __future__ import annotations

import logging
import os
import re
import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml

from ..errors import EntityNotFound, MalformedEntity, SerializationError
from .locks import file_lock

logger = logging.getLogger(__name__)

EXTENSION = "yaml"

E = TypeVar("E")

_BACKUP_NUMBER_RE = re.compile(r"^(?P<id>[^.]+)\.(?P<n>\d+)\." + EXTENSION + "$")


def dump_yaml(doc: dict[str, Any]) -> str:
    try:
        return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True, default_flow_style=False)
    except yaml.YAMLError as exc:
        raise SerializationError(f"while serializing document to yaml: {exc}") from exc


def load_yaml(text: str) -> Any:
    return yaml.safe_load(text)


def is_backup_name(filename: str) -> bool:
    """u-u-i-d.yaml is current, u-u-i-d.3.yaml is a rotated backup."""
    parts = filename.split(".")
    return len(parts) != 2 or parts[1] != EXTENSION


class EntityStore(Generic[E]):
    """
    One YAML file per entity inside a single directory.

    Writes:
    - exclusive blocking flock on <id>.lock for the whole save,
    - rotate: current file is copied to <id>.1.yaml, older backups shift up,
      anything past the bound is dropped,
    - new content goes to <id>.yaml.tmp, is fsynced, then os.replace()d over <id>.yaml.

    Readers therefore see either the old or the new record, never a torn one. Reads
    take a shared lock on the same lock file.
    """

    kind = "entity"

    def __init__(self, directory: str | Path, *, rotate: int = 0) -> None:
        self._dir = Path(directory)
        self._rotate = max(0, int(rotate))

    @property
    def directory(self) -> Path:
        return self._dir

    # ---- hooks for subclasses ----

    def entity_id(self, entity: E) -> str:
        raise NotImplementedError

    def encode(self, entity: E) -> dict[str, Any]:
        raise NotImplementedError

    def decode(self, doc: Any) -> E:
        raise NotImplementedError

    def before_save(self, entity: E) -> None:
        return

    def after_load(self, entity: E) -> None:
        return

    # ---- paths ----

    def _check_id(self, entity_id: str) -> str:
        entity_id = str(entity_id)
        if not entity_id or "/" in entity_id or os.sep in entity_id or entity_id.startswith("."):
            raise EntityNotFound(self.kind, entity_id)
        return entity_id

    def path_for(self, entity_id: str) -> Path:
        return self._dir / f"{self._check_id(entity_id)}.{EXTENSION}"

    def backup_path(self, entity_id: str, n: int) -> Path:
        return self._dir / f"{self._check_id(entity_id)}.{n}.{EXTENSION}"

    def _lock_path(self, entity_id: str) -> Path:
        return self._dir / f"{entity_id}.lock"

    def exists(self, entity_id: str) -> bool:
        try:
            return self.path_for(entity_id).is_file()
        except EntityNotFound:
            return False

    # ---- write ----

    def _rotate_backups(self, entity_id: str) -> None:
        current = self.path_for(entity_id)
        if self._rotate <= 0 or not current.is_file():
            return

        for path in self._dir.glob(f"{entity_id}.*.{EXTENSION}"):
            m = _BACKUP_NUMBER_RE.match(path.name)
            if m and int(m.group("n")) >= self._rotate:
                path.unlink()

        for n in range(self._rotate - 1, 0, -1):
            src = self.backup_path(entity_id, n)
            if src.is_file():
                os.replace(src, self.backup_path(entity_id, n + 1))

        shutil.copy2(current, self.backup_path(entity_id, 1))
        logger.debug("Rotated %s backups for %s (max=%d)", self.kind, entity_id, self._rotate)

    def _fsync_dir(self) -> None:
        try:
            fd = os.open(self._dir, os.O_RDONLY)
        except OSError:
            return
        try:
            os.fsync(fd)
        except OSError:
            logger.debug("Directory fsync not supported for %s", self._dir)
        finally:
            os.close(fd)

    def save(self, entity: E) -> Path:
        entity_id = self._check_id(self.entity_id(entity))
        self.before_save(entity)
        text = dump_yaml(self.encode(entity))

        target = self.path_for(entity_id)
        tmp = self._dir / f"{entity_id}.{EXTENSION}.tmp"

        with file_lock(self._lock_path(entity_id)):
            self._rotate_backups(entity_id)
            try:
                with tmp.open("w", encoding="utf-8", newline="\n") as fh:
                    fh.write(text)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp, target)
            except OSError:
                tmp.unlink(missing_ok=True)
                raise
            self._fsync_dir()

        logger.debug("Saved %s %s -> %s", self.kind, entity_id, target)
        return target

    def delete(self, entity_id: str) -> bool:
        """Remove the current file and its lock file. Backups are kept."""
        target = self.path_for(entity_id)
        if not target.is_file():
            raise EntityNotFound(self.kind, entity_id)
        lock_path = self._lock_path(entity_id)
        with file_lock(lock_path):
            target.unlink(missing_ok=True)
            # a save already blocked here keeps its lock on the unlinked inode
            lock_path.unlink(missing_ok=True)
        logger.info("Deleted %s %s", self.kind, entity_id)
        return True

    # ---- read ----

    def _parse(self, text: str, path: Path) -> E:
        try:
            doc = load_yaml(text)
        except yaml.YAMLError as exc:
            raise MalformedEntity(f"while parsing {self.kind} file {path}: {exc}") from exc
        try:
            entity = self.decode(doc)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedEntity(f"while reading {self.kind} file {path}: {exc}") from exc
        self.after_load(entity)
        return entity

    def load(self, entity_id: str) -> E:
        entity_id = self._check_id(entity_id)
        path = self.path_for(entity_id)
        if not path.is_file():
            raise EntityNotFound(self.kind, entity_id)

        with file_lock(self._lock_path(entity_id), shared=True):
            try:
                text = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                raise EntityNotFound(self.kind, entity_id) from None
            except (OSError, UnicodeDecodeError) as exc:
                raise MalformedEntity(f"while reading {self.kind} file {path}: {exc}") from exc

        logger.debug("Loaded %s %s", self.kind, entity_id)
        return self._parse(text, path)

    # ---- enumeration ----

    def iter_paths(self, pattern: str | None = None, *, include_backups: bool = False) -> Iterator[Path]:
        """
        Glob entity files in directory order. pattern matches anywhere in the id
        ("*<pattern>*.yaml"). Rotated backups are skipped unless include_backups.
        """
        glob = f"*{pattern}*.{EXTENSION}" if pattern else f"*.{EXTENSION}"
        for path in self._dir.glob(glob):
            if not include_backups and is_backup_name(path.name):
                continue
            yield path

    def iter_ids(self, pattern: str | None = None) -> Iterator[str]:
        for path in self.iter_paths(pattern):
            yield path.name.split(".")[0]

    def count(self, *, include_backups: bool = False) -> int:
        return sum(1 for _ in self.iter_paths(include_backups=include_backups))

    def load_all(self, pattern: str | None = None) -> list[E]:
        return [self.load(entity_id) for entity_id in self.iter_ids(pattern)]

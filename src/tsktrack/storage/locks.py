# src/tsktrack/storage/locks.py

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

from ..errors import LockError

logger = logging.getLogger(__name__)


@contextmanager
def file_lock(lock_path: Path, *, shared: bool = False) -> Iterator[IO[str]]:
    """Hold a blocking advisory flock on lock_path (exclusive unless shared=True).

    Blocks until the lock is granted; there is no timeout. The lock file is left in
    place after release; removing it is up to the caller.
    """

    handle = lock_path.open("a+", encoding="utf-8")
    try:
        try:
            import fcntl  # type: ignore
        except ModuleNotFoundError:
            raise LockError("File locks require fcntl (not available on this platform).")

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_SH if shared else fcntl.LOCK_EX)
        except OSError as exc:
            raise LockError(f"Could not lock {lock_path}: {exc}") from exc
        logger.debug("Locked %s (%s)", lock_path, "shared" if shared else "exclusive")

        yield handle
    finally:
        try:
            import fcntl  # type: ignore

            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        except (ModuleNotFoundError, OSError):
            pass
        handle.close()

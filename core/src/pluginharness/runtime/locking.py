"""Cross-process exclusive lock backed by a file.

The lock is advisory and blocking: every process that takes it through
`exclusive_lock` on the same path waits for the current holder to release.
Locks are tied to the opened file handle, so two threads of one process that
each enter `exclusive_lock` also exclude each other.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pluginharness.errors import LockError

try:  # pragma: no cover - platform specific availability
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - windows
    fcntl = None  # type: ignore[assignment]

try:  # pragma: no cover - platform specific availability
    import msvcrt  # type: ignore
except ImportError:  # pragma: no cover - non-windows
    msvcrt = None  # type: ignore[assignment]

_LOGGER = logging.getLogger("plugin_harness.lock")


@contextmanager
def exclusive_lock(lock_path: Path) -> Iterator[Path]:
    """Block until the lock at `lock_path` is held; release it on exit."""
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        handle = lock_path.open("a+b")
    except OSError as exc:
        raise LockError(f"failed to open lock file {lock_path}: {exc}") from exc

    with handle:
        handle.seek(0, os.SEEK_END)
        if handle.tell() == 0:
            handle.write(b"0")
            handle.flush()

        try:
            _acquire(handle)
        except OSError as exc:
            raise LockError(f"failed to lock {lock_path}: {exc}") from exc
        _LOGGER.debug("Acquired lock %s", lock_path)

        try:
            yield lock_path
        finally:
            _release(handle)
            _LOGGER.debug("Released lock %s", lock_path)


def _acquire(handle) -> None:
    if fcntl is not None:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
    elif msvcrt is not None:
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_LOCK, 1)
    else:  # pragma: no cover - no locking backend available
        raise OSError("no file locking backend available on this platform")


def _release(handle) -> None:
    if fcntl is not None:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    elif msvcrt is not None:
        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)

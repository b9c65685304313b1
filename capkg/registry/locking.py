# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Lock Manager

Single responsibility: Exclusive, named, process-wide locks so that at most
one installation runs at a time

Locks are `fcntl.flock` locks on `<lock_dir>/<name>.lock`. The kernel drops
them when the holder dies, so a crashed run never leaves a stale lock.
"""

import fcntl
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from capkg.core.errors import LockUnavailableError

logger = logging.getLogger(__name__)


class LockGuard:
    """A held lock. Returned by acquire_exclusive, consumed by release."""

    def __init__(self, name: str, path: Path, fd: int):
        self.name = name
        self.path = path
        self.fd: Optional[int] = fd

    @property
    def held(self) -> bool:
        return self.fd is not None


class FileLockManager:
    """Hands out exclusive flock-based locks from a lock directory"""

    def __init__(self, lock_dir: Path, blocking: bool = False):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory holding the lock files
            blocking: Wait for a held lock instead of failing immediately
        """
        self.lock_dir = Path(lock_dir)
        self.blocking = blocking

    def lock_path(self, name: str) -> Path:
        return self.lock_dir / f"{name}.lock"

    def acquire_exclusive(self, name: str) -> LockGuard:
        """
        Acquire the named lock.

        Args:
            name: Lock name

        Returns:
            Guard to pass to release()

        Raises:
            LockUnavailableError: If the lock is held elsewhere (non-blocking
                mode) or the lock file cannot be opened
        """
        path = self.lock_path(name)
        try:
            self.lock_dir.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise LockUnavailableError(name, reason=f"cannot open {path}: {e}") from e

        flags = fcntl.LOCK_EX if self.blocking else fcntl.LOCK_EX | fcntl.LOCK_NB
        try:
            fcntl.flock(fd, flags)
        except BlockingIOError as e:
            os.close(fd)
            logger.warning(f"Lock '{name}' is busy: {path}")
            raise LockUnavailableError(name) from e
        except OSError as e:
            os.close(fd)
            raise LockUnavailableError(name, reason=str(e)) from e

        # Holder pid, for operators inspecting the lock file
        try:
            os.ftruncate(fd, 0)
            os.write(fd, f"{os.getpid()}\n".encode())
        except OSError as e:
            os.close(fd)
            raise LockUnavailableError(name, reason=f"cannot write {path}: {e}") from e

        logger.info(f"Acquired lock '{name}': {path}")
        return LockGuard(name, path, fd)

    def release(self, guard: LockGuard):
        """
        Release a held lock. Releasing twice is a no-op.

        Args:
            guard: Guard returned by acquire_exclusive
        """
        if not guard.held:
            logger.warning(f"Release requested for lock '{guard.name}' that is not held")
            return

        fd = guard.fd
        guard.fd = None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.info(f"Released lock '{guard.name}'")

    @contextmanager
    def exclusive(self, name: str) -> Iterator[LockGuard]:
        """
        Hold the named lock for the duration of a with-block.

        The lock is released on every exit path, exceptions included.
        """
        guard = self.acquire_exclusive(name)
        try:
            yield guard
        finally:
            self.release(guard)

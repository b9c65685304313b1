# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for the File Lock Manager
"""

import os
from unittest.mock import patch

import pytest

from capkg.core.errors import LockUnavailableError
from capkg.registry import FileLockManager


class TestFileLockManager:
    """Test exclusive lock acquisition and release"""

    def test_acquire_and_release(self, lock_manager):
        guard = lock_manager.acquire_exclusive("install")

        assert guard.held
        assert lock_manager.lock_path("install").read_text().strip() == str(os.getpid())

        lock_manager.release(guard)
        assert not guard.held

    def test_second_acquire_fails_while_held(self, lock_manager, tmp_path):
        other = FileLockManager(tmp_path / "locks")
        guard = lock_manager.acquire_exclusive("install")
        try:
            with pytest.raises(LockUnavailableError) as exc_info:
                other.acquire_exclusive("install")
            assert exc_info.value.name == "install"
        finally:
            lock_manager.release(guard)

        # Free again after release
        other.release(other.acquire_exclusive("install"))

    def test_different_names_do_not_conflict(self, lock_manager):
        first = lock_manager.acquire_exclusive("install")
        second = lock_manager.acquire_exclusive("index")
        lock_manager.release(second)
        lock_manager.release(first)

    def test_double_release_is_noop(self, lock_manager):
        guard = lock_manager.acquire_exclusive("install")
        lock_manager.release(guard)
        lock_manager.release(guard)

    def test_context_manager_releases_on_error(self, lock_manager):
        with pytest.raises(RuntimeError):
            with lock_manager.exclusive("install") as guard:
                assert guard.held
                raise RuntimeError("boom")

        assert not guard.held
        lock_manager.release(lock_manager.acquire_exclusive("install"))

    def test_unopenable_lock_dir(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        manager = FileLockManager(blocker)

        with pytest.raises(LockUnavailableError):
            manager.acquire_exclusive("install")

    def test_pid_write_failure_releases_lock(self, lock_manager):
        with patch("capkg.registry.locking.os.write", side_effect=OSError("disk full")):
            with pytest.raises(LockUnavailableError) as exc_info:
                lock_manager.acquire_exclusive("install")

        assert "disk full" in str(exc_info.value)
        lock_manager.release(lock_manager.acquire_exclusive("install"))

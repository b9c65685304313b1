# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures and Utilities

Provides pytest fixtures for dependency graphs, journals on temporary files,
lock managers and recording installer collaborators.
"""

import pytest
from pathlib import Path

from capkg.models import PackageIdentity
from capkg.registry import (
    FileResource,
    TransactionJournal,
    FileLockManager,
    InstallationOrchestrator,
)


def pid(token: str) -> PackageIdentity:
    """Shorthand for PackageIdentity.parse"""
    return PackageIdentity.parse(token)


class RecordingInstaller:
    """Installer/remover double that records calls and fails on request"""

    def __init__(self, fail_on=None, report_false_on=None):
        self.calls = []
        self.fail_on = set(fail_on or [])
        self.report_false_on = set(report_false_on or [])

    def install(self, identity):
        self.calls.append(identity)
        if identity in self.fail_on:
            raise RuntimeError(f"extraction failed for {identity}")
        if identity in self.report_false_on:
            return False
        return True

    remove = install


# ============================================================================
# Graph Fixtures
# ============================================================================

@pytest.fixture
def diamond_graph():
    """root -> [A, B], A -> [C], B -> [C]"""
    return {
        pid("root@1.0"): [pid("A@1.0"), pid("B@1.0")],
        pid("A@1.0"): [pid("C@1.0")],
        pid("B@1.0"): [pid("C@1.0")],
        pid("C@1.0"): [],
    }


@pytest.fixture
def conflicting_graph():
    """Diamond where B requires a different C"""
    return {
        pid("root@1.0"): [pid("A@1.0"), pid("B@1.0")],
        pid("A@1.0"): [pid("C@1.0")],
        pid("B@1.0"): [pid("C@2.0")],
        pid("C@1.0"): [],
        pid("C@2.0"): [],
    }


# ============================================================================
# Journal / Lock / Orchestrator Fixtures
# ============================================================================

@pytest.fixture
def journal_path(tmp_path) -> Path:
    return tmp_path / "state" / "transaction.log"


@pytest.fixture
def journal(journal_path):
    return TransactionJournal(FileResource(journal_path))


@pytest.fixture
def lock_manager(tmp_path):
    return FileLockManager(tmp_path / "locks")


@pytest.fixture
def orchestrator(journal, lock_manager):
    return InstallationOrchestrator(journal, lock_manager)


@pytest.fixture
def installer():
    return RecordingInstaller()

# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Manager Service - Modular Composition

Composes focused modules into one package manager service.
Each module does one thing well.
"""

import json
import logging
from datetime import datetime, UTC
from typing import Dict, List, Optional, Union

from capkg.core.config import Config, get_config
from capkg.core.logging import log_event
from capkg.models import (
    DependencyGraph,
    InstallationRecord,
    InstallOutcome,
    PackageIdentity,
    TransactionState,
)

from .locking import FileLockManager
from .metadata import DescriptorMetadataSource, build_graph
from .orchestrator import InstallationOrchestrator
from .storage import FileResource, atomic_write_text
from .transactions import TransactionJournal

logger = logging.getLogger(__name__)


def as_identity(package: Union[PackageIdentity, str]) -> PackageIdentity:
    """Accept an identity or a `name@version` string"""
    if isinstance(package, PackageIdentity):
        return package
    return PackageIdentity.parse(package)


class PackageManager:
    """
    Unified package manager service (modular composition).

    Composes:
    - DescriptorMetadataSource: dependencies_of() from the descriptor file
    - TransactionJournal on a FileResource: crash-recoverable bookkeeping
    - FileLockManager: at most one run at a time
    - InstallationOrchestrator: install/remove transactions
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        installer=None,
        remover=None,
        source=None,
        conflict_policy=None
    ):
        """
        Initialize the package manager.

        Args:
            config: Configuration (defaults to the global config)
            installer: Collaborator with install(identity)
            remover: Collaborator with remove(identity)
            source: Metadata source with dependencies_of(identity); defaults
                to the configured descriptor file, loaded on first use
            conflict_policy: Optional replacement for the fail-on-conflict policy
        """
        self.config = config or get_config()
        self.installer = installer
        self.remover = remover
        self._source = source

        self.installed_packages_file = self.config.installed_path

        self.journal = TransactionJournal(FileResource(self.config.journal_path))
        self.lock_manager = FileLockManager(
            self.config.lock_dir,
            blocking=self.config.transactions.blocking_lock
        )
        self.orchestrator = InstallationOrchestrator(
            self.journal,
            self.lock_manager,
            lock_name=self.config.transactions.lock_name,
            reset_journal_on_start=self.config.transactions.reset_journal_on_start,
            conflict_policy=conflict_policy
        )

        self.installed_packages = self._load_installed_packages()

        logger.info(
            f"PackageManager initialized: journal={self.config.journal_path}, "
            f"{len(self.installed_packages)} installed package(s)"
        )

    @property
    def source(self):
        if self._source is None:
            self._source = DescriptorMetadataSource.from_file(self.config.descriptor_path)
        return self._source

    def install(self, package: Union[PackageIdentity, str]) -> InstallOutcome:
        """
        Install a package with its dependencies.

        The installed-packages record is reloaded, updated and saved while
        the install lock is held, so concurrent managers on one state
        directory never overwrite each other.

        Args:
            package: Identity or `name@version`

        Returns:
            Outcome of the run
        """
        if self.installer is None:
            raise ValueError("No installer configured")

        root = as_identity(package)
        graph = build_graph(self.source, root)

        with self.orchestrator.locked():
            self.installed_packages = self._load_installed_packages()
            outcome = self.orchestrator.run(graph, root, self.installer)

            now = datetime.now(UTC)
            for applied in outcome.applied:
                identity = PackageIdentity.parse(applied)
                self.installed_packages[applied] = InstallationRecord(
                    name=identity.name,
                    version=identity.version,
                    installed_at=now,
                    installed_for=str(root),
                    dependencies=outcome.dependencies.get(applied, [])
                )
            self._save_installed_packages()

        log_event(logger, "package_installed", root=str(root), applied=outcome.applied)
        return outcome

    def remove(self, package: Union[PackageIdentity, str], force: bool = False) -> InstallOutcome:
        """
        Remove an installed package.

        Args:
            package: Identity or `name@version`
            force: Remove even if other installed packages depend on it

        Returns:
            Outcome of the run
        """
        if self.remover is None:
            raise ValueError("No remover configured")

        target = as_identity(package)
        with self.orchestrator.locked():
            self.installed_packages = self._load_installed_packages()
            outcome = self.orchestrator.remove(
                self.installed_graph(),
                target,
                [record.identity for record in self.installed_packages.values()],
                self.remover,
                force=force
            )

            del self.installed_packages[str(target)]
            self._save_installed_packages()

        log_event(logger, "package_removed", target=str(target), force=force)
        return outcome

    def installed_graph(self) -> DependencyGraph:
        """Dependency graph of installed packages, as recorded at install time"""
        return {
            record.identity: [PackageIdentity.parse(dep) for dep in record.dependencies]
            for record in self.installed_packages.values()
        }

    def status(self) -> Dict[str, object]:
        """
        Journal and installation summary.

        Returns:
            Dictionary with journal state, pending steps and installed packages
        """
        state = self.journal.state()
        self.installed_packages = self._load_installed_packages()
        return {
            "journal": str(self.config.journal_path),
            "journal_bytes": self.journal.resource.size(),
            "state": state.value,
            "pending_steps": self.journal.steps() if state == TransactionState.IN_PROGRESS else [],
            "installed": sorted(self.installed_packages.keys()),
        }

    def recover(self) -> List[str]:
        """
        Clear an interrupted transaction left by a crashed or failed run.

        The journal only records what was attempted; undoing the side effects
        of those steps belongs to whoever consumes the returned descriptions.

        Returns:
            Step descriptions of the interrupted transaction (empty if there
            was nothing to recover)
        """
        with self.orchestrator.locked():
            state = self.journal.state()
            if state != TransactionState.IN_PROGRESS:
                logger.info(f"Nothing to recover, journal is {state.value}")
                return []

            steps = self.journal.steps()
            logger.warning(
                f"Interrupted transaction found with {len(steps)} step(s): {'; '.join(steps)}"
            )
            self.journal.rollback()
            log_event(logger, "transaction_recovered", level="WARNING", steps=steps)
            return steps

    def _load_installed_packages(self) -> Dict[str, InstallationRecord]:
        """
        Load installed packages from disk.

        Returns:
            Installation records keyed by `name@version`
        """
        if not self.installed_packages_file.exists():
            return {}

        try:
            data = json.loads(self.installed_packages_file.read_text())
            return {
                key: InstallationRecord(**record)
                for key, record in data.get("packages", {}).items()
            }
        except Exception as e:
            logger.error(f"Failed to load installed packages: {e}")
            return {}

    def _save_installed_packages(self):
        """Save installed packages to disk, atomically; call with the install lock held"""
        data = {
            "version": "1.0",
            "packages": {
                key: record.model_dump(mode="json")
                for key, record in sorted(self.installed_packages.items())
            }
        }
        atomic_write_text(self.installed_packages_file, json.dumps(data, indent=2))

# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Installation Orchestrator

Single responsibility: Apply a resolved plan step by step under the install
lock, mirroring every step into the transaction journal

resolve -> check conflicts -> journal + install each package -> commit,
or roll the journal back at the first failed step.

The journal holds at most one transaction: a committed one is cleared when
the next run starts, an unfinished one with recorded steps blocks new runs
until it is recovered.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from capkg.core.errors import (
    InstallStepFailedError,
    PackageInUseError,
    PackageManagerError,
    PackageNotFoundError,
    RollbackFailedError,
    TransactionInterruptedError,
)
from capkg.models import (
    DependencyGraph,
    InstallOutcome,
    PackageIdentity,
    TransactionOperation,
    TransactionState,
)

from .conflicts import ConflictPolicy, detect_conflicts, resolve_conflicts
from .locking import FileLockManager
from .resolver import resolve
from .transactions import TransactionJournal

logger = logging.getLogger(__name__)


class InstallationOrchestrator:
    """Runs install and remove transactions"""

    def __init__(
        self,
        journal: TransactionJournal,
        lock_manager: FileLockManager,
        lock_name: str = "install",
        reset_journal_on_start: bool = False,
        conflict_policy: Optional[ConflictPolicy] = None
    ):
        """
        Initialize orchestrator.

        Args:
            journal: Transaction journal, owned exclusively by this orchestrator
            lock_manager: Provides the exclusive install lock
            lock_name: Name of the install lock
            reset_journal_on_start: Truncate the journal before each run, even
                when it holds an unfinished transaction
            conflict_policy: Callable(graph, conflicts) -> graph to install
                from; defaults to refusing any conflict
        """
        self.journal = journal
        self.lock_manager = lock_manager
        self.lock_name = lock_name
        self.reset_journal_on_start = reset_journal_on_start
        self.conflict_policy = conflict_policy or resolve_conflicts
        self._lock_depth = 0

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Hold the install lock for a with-block.

        Re-entrant within this orchestrator, so callers can keep the lock
        across run()/remove() and their own bookkeeping.

        Raises:
            LockUnavailableError: If another process holds the lock
        """
        guard = None
        if self._lock_depth == 0:
            guard = self.lock_manager.acquire_exclusive(self.lock_name)
        self._lock_depth += 1
        try:
            yield
        finally:
            self._lock_depth -= 1
            if guard is not None:
                self.lock_manager.release(guard)

    def run(self, graph: DependencyGraph, root: PackageIdentity, installer) -> InstallOutcome:
        """
        Install a package and its dependencies.

        Args:
            graph: Dependency graph containing the root's closure
            root: Package to install
            installer: Collaborator with install(identity); it signals
                failure by raising (or by returning False)

        Returns:
            Outcome with the applied order and the dependencies it was
            installed from

        Raises:
            LockUnavailableError: If another run holds the install lock
            TransactionInterruptedError: If an unfinished transaction must be
                recovered first
            CycleDetectedError, PackageNotFoundError: Resolution failed,
                nothing was installed
            ConflictDetectedError: Conflict policy refused, nothing was installed
            InstallStepFailedError: A package failed; the journal was rolled back
            RollbackFailedError: A package failed and the rollback failed too
            JournalIOError: The journal could not be written
        """
        with self.locked():
            self._start()

            order = resolve(graph, root)
            conflicts = detect_conflicts(graph, root)
            selected = self.conflict_policy(graph, conflicts)
            if selected is not graph:
                logger.info(f"Conflict policy rewrote the graph for {root}, resolving again")
                graph = selected
                order = resolve(graph, root)

            logger.info(f"Installing {root}: {', '.join(str(i) for i in order)}")
            self._apply(order, "installing", installer.install)

            self.journal.commit()

        logger.info(f"Package {root} installed successfully")
        return InstallOutcome(
            root=str(root),
            operation=TransactionOperation.INSTALL,
            applied=[str(identity) for identity in order],
            dependencies=self._dependencies(graph, order)
        )

    def remove(
        self,
        graph: DependencyGraph,
        target: PackageIdentity,
        installed: Iterable[PackageIdentity],
        remover,
        force: bool = False
    ) -> InstallOutcome:
        """
        Remove an installed package.

        Args:
            graph: Dependency graph covering the installed packages
            target: Package to remove
            installed: Currently installed identities
            remover: Collaborator with remove(identity)
            force: Remove even if other installed packages depend on it

        Returns:
            Outcome naming the removed package

        Raises:
            PackageNotFoundError: If the target is not installed
            PackageInUseError: If installed packages still depend on the target
            TransactionInterruptedError, InstallStepFailedError,
            RollbackFailedError, JournalIOError: As for run()
        """
        installed = list(installed)
        with self.locked():
            if target not in installed:
                raise PackageNotFoundError(target)

            dependents = self.dependents_of(graph, target, installed)
            if dependents and not force:
                raise PackageInUseError(target, dependents)
            if dependents:
                logger.warning(
                    f"Forcing removal of {target} still required by "
                    f"{', '.join(str(d) for d in dependents)}"
                )

            self._start()
            self._apply([target], "removing", remover.remove)
            self.journal.commit()

        logger.info(f"Package {target} removed successfully")
        return InstallOutcome(
            root=str(target),
            operation=TransactionOperation.REMOVE,
            applied=[str(target)]
        )

    @staticmethod
    def dependents_of(
        graph: DependencyGraph,
        target: PackageIdentity,
        installed: Iterable[PackageIdentity]
    ) -> List[PackageIdentity]:
        """Installed packages that directly depend on the target, sorted"""
        return sorted(
            pkg for pkg in installed
            if pkg != target and target in graph.get(pkg, [])
        )

    @staticmethod
    def _dependencies(graph: DependencyGraph, order: List[PackageIdentity]) -> Dict[str, List[str]]:
        return {str(i): [str(dep) for dep in graph.get(i, [])] for i in order}

    def _start(self):
        """
        Open a new transaction.

        A committed transaction is dropped first. An unfinished one is dropped
        only if it recorded no steps (resolution or conflict failure);
        otherwise its steps are kept for recovery and the run is refused.
        """
        if self.reset_journal_on_start:
            self.journal.clear()
        else:
            state = self.journal.state()
            if state == TransactionState.COMPLETED:
                self.journal.clear()
            elif state == TransactionState.IN_PROGRESS:
                steps = self.journal.steps()
                if steps:
                    logger.error(
                        f"Unfinished transaction in {self.journal.resource} "
                        f"({len(steps)} step(s)); refusing to start a new run"
                    )
                    raise TransactionInterruptedError(str(self.journal.resource), steps)
                logger.warning(f"Discarding unfinished transaction with no steps: {self.journal.resource}")
                self.journal.rollback()
        self.journal.begin()

    def _apply(
        self,
        order: List[PackageIdentity],
        verb: str,
        action: Callable[[PackageIdentity], object]
    ):
        """
        Journal and execute one step per identity, stopping at the first failure.

        The step is recorded before the action runs, whatever its outcome.
        """
        for identity in order:
            self.journal.step(f"{verb} {identity}")
            try:
                if action(identity) is False:
                    raise RuntimeError(f"collaborator reported failure for {identity}")
            except Exception as e:
                logger.error(f"Step failed ({verb} {identity}): {e}")
                failure = InstallStepFailedError(identity, e)
                try:
                    self.journal.rollback()
                except PackageManagerError as rollback_error:
                    logger.critical(
                        f"Rollback failed after {verb} {identity}; "
                        f"journal needs operator attention: {rollback_error}"
                    )
                    raise RollbackFailedError(failure, rollback_error) from e
                raise failure from e

# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Transaction Journal

Single responsibility: Record the start / step / completion lifecycle of one
install-or-remove operation in an append-only durable log

The journal detects an incomplete previous run and supports a controlled
reset. It does not undo the side effects of the steps it records.
"""

import logging
from typing import List

from capkg.core.errors import TransactionAlreadyCompletedError
from capkg.models import (
    COMPLETED_MARKER,
    STARTED_MARKER,
    EntryKind,
    TransactionEntry,
    TransactionState,
)

logger = logging.getLogger(__name__)


class TransactionJournal:
    """Manages the transaction journal on a durable resource"""

    def __init__(self, resource):
        """
        Initialize transaction journal.

        Args:
            resource: Durable resource with append(line), read_all() and
                truncate(), e.g. storage.FileResource
        """
        self.resource = resource

    def begin(self):
        """Append `Started`"""
        logger.info(f"Starting transaction, journal: {self.resource}")
        self._append(TransactionEntry.started())

    def step(self, description: str):
        """
        Append one step. Each call is a single atomic append.

        Args:
            description: Single-line step text

        Raises:
            ValueError: If the description is empty, spans lines or collides
                with a journal marker
        """
        if not description or not description.strip():
            raise ValueError("Step description must not be empty")
        if "\n" in description or "\r" in description:
            raise ValueError(f"Step description must be a single line: {description!r}")
        if description in (STARTED_MARKER, COMPLETED_MARKER):
            raise ValueError(f"Step description collides with a journal marker: {description}")
        logger.debug(f"Recording step '{description}', journal: {self.resource}")
        self._append(TransactionEntry.step(description))

    def commit(self):
        """Append `Completed`"""
        logger.info(f"Completing transaction, journal: {self.resource}")
        self._append(TransactionEntry.completed())

    def entries(self) -> List[TransactionEntry]:
        """
        Parse the journal.

        Returns:
            Entries in append order; blank lines are skipped
        """
        entries = []
        for line in self.resource.read_all().splitlines():
            entry = TransactionEntry.from_line(line)
            if entry is not None:
                entries.append(entry)
        return entries

    def state(self) -> TransactionState:
        """Derive the transaction state from the last entry"""
        entries = self.entries()
        if not entries:
            return TransactionState.EMPTY
        if entries[-1].kind == EntryKind.COMPLETED:
            return TransactionState.COMPLETED
        return TransactionState.IN_PROGRESS

    def steps(self) -> List[str]:
        """
        Step descriptions recorded since the last `Started`.

        Consumers use these to undo side effects of an interrupted run.
        """
        steps: List[str] = []
        for entry in self.entries():
            if entry.kind == EntryKind.STARTED:
                steps = []
            elif entry.kind == EntryKind.STEP:
                steps.append(entry.description)
        return steps

    def rollback(self):
        """
        Clear an unfinished transaction.

        Raises:
            TransactionAlreadyCompletedError: If the last entry is `Completed`
            JournalIOError: If the journal cannot be read or truncated
        """
        logger.info(f"Rolling back transaction, journal: {self.resource}")
        if self.state() == TransactionState.COMPLETED:
            logger.warning(f"Transaction already completed, refusing rollback: {self.resource}")
            raise TransactionAlreadyCompletedError(str(self.resource))

        self.resource.truncate()
        logger.info(f"Rollback finished (journal cleared): {self.resource}")

    def clear(self):
        """Truncate the journal regardless of state"""
        logger.info(f"Clearing journal: {self.resource}")
        self.resource.truncate()

    def _append(self, entry: TransactionEntry):
        self.resource.append(entry.to_line())

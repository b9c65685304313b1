# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Data Models

Defines data structures for the package manager core: package identities,
dependency graphs, conflict pairs, transaction journal entries and the
outcome of an orchestration run.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from capkg.core.errors import ParsingError

# Journal markers. These literals are the on-disk format and must not change.
STARTED_MARKER = "ISLEM BASLADI"
COMPLETED_MARKER = "ISLEM TAMAMLANDI"


@dataclass(frozen=True, order=True)
class PackageIdentity:
    """
    One package release.

    Identities are ordered by name, then version (plain string comparison).
    Exact version matching only, no ranges.
    """
    name: str
    version: str

    @classmethod
    def parse(cls, token: str) -> "PackageIdentity":
        """
        Parse a `name@version` token.

        Args:
            token: Identity text

        Returns:
            Parsed identity

        Raises:
            ParsingError: If the token does not contain exactly one '@'
                or either side is empty
        """
        text = token.strip()
        parts = text.split("@")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise ParsingError(f"Invalid package identity: '{token}'", token=token)
        return cls(name=parts[0].strip(), version=parts[1].strip())

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


# Adjacency lists keep declaration order; the resolver relies on it.
DependencyGraph = Dict[PackageIdentity, List[PackageIdentity]]


@dataclass(frozen=True)
class ConflictPair:
    """Two versions of the same package, stored as (low, high)"""
    low: PackageIdentity
    high: PackageIdentity

    @classmethod
    def of(cls, first: PackageIdentity, second: PackageIdentity) -> "ConflictPair":
        """
        Build a normalized pair from two identities in any order.

        Raises:
            ValueError: If the names differ or the identities are equal
        """
        if first.name != second.name:
            raise ValueError(f"Not a conflict: {first} and {second} have different names")
        if first == second:
            raise ValueError(f"Not a conflict: {first} appears twice")
        if second < first:
            first, second = second, first
        return cls(low=first, high=second)

    @property
    def name(self) -> str:
        return self.low.name

    def render(self) -> str:
        """Render as two `name@version` tokens"""
        return f"{self.low} {self.high}"

    def __iter__(self):
        return iter((self.low, self.high))


class EntryKind(str, Enum):
    """Kind of transaction journal entry"""
    STARTED = "started"
    STEP = "step"
    COMPLETED = "completed"


class TransactionState(str, Enum):
    """Journal state, derived from its last entry"""
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TransactionOperation(str, Enum):
    """Type of transaction operation"""
    INSTALL = "install"
    REMOVE = "remove"


class TransactionEntry(BaseModel):
    """One line of the transaction journal"""
    kind: EntryKind
    description: Optional[str] = None

    @classmethod
    def started(cls) -> "TransactionEntry":
        return cls(kind=EntryKind.STARTED)

    @classmethod
    def step(cls, description: str) -> "TransactionEntry":
        return cls(kind=EntryKind.STEP, description=description)

    @classmethod
    def completed(cls) -> "TransactionEntry":
        return cls(kind=EntryKind.COMPLETED)

    @classmethod
    def from_line(cls, line: str) -> Optional["TransactionEntry"]:
        """
        Decode one journal line.

        Args:
            line: Raw line (trailing newline allowed)

        Returns:
            Entry, or None for a blank line
        """
        text = line.rstrip("\r\n")
        if not text.strip():
            return None
        if text == STARTED_MARKER:
            return cls.started()
        if text == COMPLETED_MARKER:
            return cls.completed()
        return cls.step(text)

    def to_line(self) -> str:
        """Encode as a journal line (without newline)"""
        if self.kind == EntryKind.STARTED:
            return STARTED_MARKER
        if self.kind == EntryKind.COMPLETED:
            return COMPLETED_MARKER
        return self.description or ""


class InstallationRecord(BaseModel):
    """Record of an installed package"""
    name: str
    version: str
    installed_at: datetime
    installed_for: str  # Root of the run that installed it
    dependencies: List[str] = Field(default_factory=list)

    @property
    def identity(self) -> PackageIdentity:
        return PackageIdentity(self.name, self.version)


class InstallOutcome(BaseModel):
    """Result of a successful orchestration run"""
    root: str
    operation: TransactionOperation = TransactionOperation.INSTALL
    applied: List[str] = Field(default_factory=list)
    # Direct dependencies of each applied package, after the conflict policy
    dependencies: Dict[str, List[str]] = Field(default_factory=dict)
    state: TransactionState = TransactionState.COMPLETED

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "root": "app@1.0",
            "operation": "install",
            "applied": ["libc@2.0", "app@1.0"],
            "dependencies": {"libc@2.0": [], "app@1.0": ["libc@2.0"]},
            "state": "completed"
        }
    })

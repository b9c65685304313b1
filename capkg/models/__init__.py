# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Data models for the package manager core."""

from capkg.models.package_models import (
    STARTED_MARKER,
    COMPLETED_MARKER,
    PackageIdentity,
    DependencyGraph,
    ConflictPair,
    EntryKind,
    TransactionState,
    TransactionOperation,
    TransactionEntry,
    InstallationRecord,
    InstallOutcome,
)

__all__ = [
    "STARTED_MARKER",
    "COMPLETED_MARKER",
    "PackageIdentity",
    "DependencyGraph",
    "ConflictPair",
    "EntryKind",
    "TransactionState",
    "TransactionOperation",
    "TransactionEntry",
    "InstallationRecord",
    "InstallOutcome",
]

# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Module - Package Manager Decision Core

Modular package management:
- Each module does one thing well
- Modules compose to form complete system
- Text-based state throughout (descriptor, journal, lock files)
"""

from .descriptor import parse_descriptor, load_descriptor
from .metadata import DescriptorMetadataSource, build_graph
from .resolver import DependencyResolver, resolve, reachable
from .conflicts import detect_conflicts, resolve_conflicts, render_conflicts
from .storage import FileResource
from .transactions import TransactionJournal
from .locking import FileLockManager, LockGuard
from .orchestrator import InstallationOrchestrator
from .service import PackageManager

__all__ = [
    "parse_descriptor",
    "load_descriptor",
    "DescriptorMetadataSource",
    "build_graph",
    "DependencyResolver",
    "resolve",
    "reachable",
    "detect_conflicts",
    "resolve_conflicts",
    "render_conflicts",
    "FileResource",
    "TransactionJournal",
    "FileLockManager",
    "LockGuard",
    "InstallationOrchestrator",
    "PackageManager",
]

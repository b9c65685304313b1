# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Conflict Detector

Single responsibility: Report packages required at more than one version
within the transitive closure of a root
"""

import logging
from itertools import combinations
from typing import Callable, Dict, Iterable, List, Set

from capkg.core.errors import ConflictDetectedError
from capkg.models import ConflictPair, DependencyGraph, PackageIdentity

from .resolver import reachable

logger = logging.getLogger(__name__)

# (graph, conflicts) -> graph to install from; raises to refuse.
ConflictPolicy = Callable[[DependencyGraph, Set[ConflictPair]], DependencyGraph]


def detect_conflicts(graph: DependencyGraph, root: PackageIdentity) -> Set[ConflictPair]:
    """
    Find every pair of distinct versions sharing a name under a root.

    Args:
        graph: Dependency graph
        root: Root package

    Returns:
        Normalized conflict pairs; empty if every reachable name has exactly
        one version
    """
    versions: Dict[str, Set[PackageIdentity]] = {}
    for identity in reachable(graph, root):
        versions.setdefault(identity.name, set()).add(identity)

    conflicts: Set[ConflictPair] = set()
    for name, identities in versions.items():
        if len(identities) < 2:
            continue
        for first, second in combinations(sorted(identities), 2):
            conflicts.add(ConflictPair.of(first, second))
        logger.warning(
            f"Version conflict for {name}: {', '.join(i.version for i in sorted(identities))}"
        )

    return conflicts


def resolve_conflicts(graph: DependencyGraph, conflicts: Set[ConflictPair]) -> DependencyGraph:
    """
    Default conflict policy: refuse any conflict.

    A version-selection strategy would replace this function with the same
    signature.

    Args:
        graph: Dependency graph
        conflicts: Output of detect_conflicts

    Returns:
        The graph, unchanged, when there are no conflicts

    Raises:
        ConflictDetectedError: If conflicts is non-empty
    """
    if conflicts:
        for line in render_conflicts(conflicts):
            logger.error(f"Unresolvable conflict: {line}")
        raise ConflictDetectedError(conflicts)
    return graph


def render_conflicts(conflicts: Iterable[ConflictPair]) -> List[str]:
    """Render conflicts as sorted `name@version name@version` lines"""
    return [pair.render() for pair in sorted(conflicts, key=lambda p: (p.low, p.high))]

# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package Metadata Source

Single responsibility: Answer `dependencies_of(identity)` and assemble the
dependency graph reachable from a root before resolution.
"""

import logging
from collections import deque
from pathlib import Path
from typing import List

from capkg.core.errors import PackageNotFoundError
from capkg.models import DependencyGraph, PackageIdentity

from .descriptor import load_descriptor

logger = logging.getLogger(__name__)


class DescriptorMetadataSource:
    """Metadata source backed by a parsed dependency descriptor"""

    def __init__(self, graph: DependencyGraph):
        """
        Initialize metadata source.

        Args:
            graph: Parsed descriptor graph (every known package is a key)
        """
        self.graph = graph

    @classmethod
    def from_file(cls, path: Path) -> "DescriptorMetadataSource":
        """Load the source from a descriptor file"""
        return cls(load_descriptor(path))

    def __contains__(self, identity: PackageIdentity) -> bool:
        return identity in self.graph

    def dependencies_of(self, identity: PackageIdentity) -> List[PackageIdentity]:
        """
        Direct dependencies of a package, in declaration order.

        Raises:
            PackageNotFoundError: If the package is unknown
        """
        if identity not in self.graph:
            raise PackageNotFoundError(identity)
        return list(self.graph[identity])


def build_graph(source, root: PackageIdentity) -> DependencyGraph:
    """
    Assemble the dependency graph reachable from a root.

    Every reachable identity becomes a key, leaves included. Traversal is
    breadth-first over a work list and terminates on cycles; cycle reporting
    is left to the resolver.

    Args:
        source: Object with dependencies_of(identity)
        root: Root package

    Returns:
        Dependency graph

    Raises:
        PackageNotFoundError: If the source does not know a reachable package
    """
    graph: DependencyGraph = {}
    queue = deque([(root, None)])

    while queue:
        identity, required_by = queue.popleft()
        if identity in graph:
            continue
        try:
            dependencies = source.dependencies_of(identity)
        except PackageNotFoundError:
            raise PackageNotFoundError(identity, required_by=required_by)
        graph[identity] = list(dependencies)
        for dep in dependencies:
            if dep not in graph:
                queue.append((dep, identity))

    logger.debug(f"Built dependency graph for {root}: {len(graph)} packages")
    return graph

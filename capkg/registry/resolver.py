# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Dependency Resolver

Single responsibility: Resolve package dependencies into a dependency-first
installation order, with cycle detection
"""

import logging
from typing import Iterator, List, Set

from capkg.core.errors import CycleDetectedError, PackageNotFoundError
from capkg.models import DependencyGraph, PackageIdentity

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


class DependencyResolver:
    """Resolves package dependencies (exact version matching only)"""

    def __init__(self, graph: DependencyGraph):
        """
        Initialize dependency resolver.

        Args:
            graph: Dependency graph; never mutated
        """
        self.graph = graph

    def resolve(self, root: PackageIdentity) -> List[PackageIdentity]:
        """
        Resolve the installation order for a root package.

        Depth-first traversal over an explicit stack, so deep graphs never
        touch the interpreter recursion limit. Each stack frame holds a node
        and an iterator over its dependency list; dependencies are visited in
        declaration order and a node is emitted once all of them are.

        Args:
            root: Package to install

        Returns:
            Identities in installation order; every dependency precedes its
            dependents and the root comes last

        Raises:
            CycleDetectedError: If a cycle is reachable from the root
            PackageNotFoundError: If a dependency is not a key of the graph
        """
        # A root without an entry is a dependency-free package.
        if root not in self.graph:
            logger.debug(f"{root} has no graph entry, treating it as dependency-free")
            return [root]

        order: List[PackageIdentity] = []
        resolved: Set[PackageIdentity] = set()
        resolving: Set[PackageIdentity] = {root}
        stack = [(root, iter(self.graph[root]))]

        while stack:
            node, pending = stack[-1]
            dep = next(pending, _EXHAUSTED)

            if dep is _EXHAUSTED:
                stack.pop()
                resolving.discard(node)
                resolved.add(node)
                order.append(node)
                continue

            if dep in resolved:
                continue

            if dep in resolving:
                path = [frame[0] for frame in stack]
                cycle = path[path.index(dep):] + [dep]
                logger.error(f"Circular dependency detected: {' -> '.join(str(p) for p in cycle)}")
                raise CycleDetectedError(dep, path=cycle)

            if dep not in self.graph:
                logger.error(f"Required dependency not found: {dep} (required by {node})")
                raise PackageNotFoundError(dep, required_by=node)

            resolving.add(dep)
            stack.append((dep, iter(self.graph[dep])))

        logger.info(f"Resolved {root}: {len(order)} package(s) in order")
        return order


def resolve(graph: DependencyGraph, root: PackageIdentity) -> List[PackageIdentity]:
    """Resolve `root` against `graph`; see DependencyResolver.resolve"""
    return DependencyResolver(graph).resolve(root)


def reachable(graph: DependencyGraph, root: PackageIdentity) -> Iterator[PackageIdentity]:
    """
    Yield every identity reachable from a root, root first.

    Same declaration-order depth-first walk as the resolver, but it only
    tracks visited nodes: cycles terminate silently and identities that have
    no graph entry are yielded as leaves.

    Args:
        graph: Dependency graph
        root: Start of the walk

    Yields:
        Each reachable identity exactly once
    """
    visited: Set[PackageIdentity] = set()
    stack = [root]

    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)
        yield node
        # Reversed so the first declared dependency is popped first
        for dep in reversed(graph.get(node, [])):
            if dep not in visited:
                stack.append(dep)

# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Dependency Descriptor Parser

Single responsibility: Turn descriptor text into a DependencyGraph

Format, one relation per line:

    # comment
    app@1.0 -> libfoo@2.1, libbar@0.3
    libfoo@2.1 -> libc@1.0
    libc@1.0 ->
    libbar@0.3 ->

An empty right-hand side declares a leaf package.
"""

import logging
from pathlib import Path
from typing import List

from capkg.core.errors import ParsingError
from capkg.models import DependencyGraph, PackageIdentity

logger = logging.getLogger(__name__)

SEPARATOR = " -> "


def _parse_identity(token: str, line: str, line_number: int) -> PackageIdentity:
    try:
        return PackageIdentity.parse(token)
    except ParsingError:
        raise ParsingError(
            f"Line {line_number}: invalid package identity '{token.strip()}'",
            line=line,
            line_number=line_number,
            token=token.strip()
        )


def parse_line(line: str, line_number: int = 1):
    """
    Parse one relation line.

    Args:
        line: Descriptor line
        line_number: 1-based line number, for diagnostics

    Returns:
        (package, dependencies) tuple, or None for blank and comment lines

    Raises:
        ParsingError: If the separator is missing or an identity is malformed
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    # The padding space lets a bare trailing " ->" declare a leaf
    head, sep, tail = (text + " ").partition(SEPARATOR)
    if not sep:
        raise ParsingError(
            f"Line {line_number}: missing '{SEPARATOR.strip()}' separator: '{text}'",
            line=text,
            line_number=line_number
        )

    package = _parse_identity(head, text, line_number)

    dependencies: List[PackageIdentity] = []
    if tail.strip():
        for token in tail.split(","):
            dependencies.append(_parse_identity(token, text, line_number))

    return package, dependencies


def parse_descriptor(text: str) -> DependencyGraph:
    """
    Parse descriptor text into a dependency graph.

    Args:
        text: Descriptor contents

    Returns:
        Graph keyed by declared packages; adjacency lists keep declaration order

    Raises:
        ParsingError: On a malformed line or a package declared twice
    """
    graph: DependencyGraph = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        parsed = parse_line(line, line_number)
        if parsed is None:
            continue
        package, dependencies = parsed
        if package in graph:
            raise ParsingError(
                f"Line {line_number}: {package} is declared more than once",
                line=line.strip(),
                line_number=line_number,
                token=str(package)
            )
        graph[package] = dependencies

    logger.debug(f"Parsed dependency descriptor with {len(graph)} packages")
    return graph


def load_descriptor(path: Path) -> DependencyGraph:
    """
    Load a dependency descriptor file.

    A missing file yields an empty graph.

    Args:
        path: Descriptor file path

    Returns:
        Parsed dependency graph
    """
    if not path.exists():
        logger.warning(f"No dependency descriptor found at {path}, continuing with empty graph")
        return {}

    graph = parse_descriptor(path.read_text(encoding="utf-8"))
    logger.info(f"Loaded {len(graph)} package relations from {path}")
    return graph

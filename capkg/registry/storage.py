# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Durable Resource

Single responsibility: Line-oriented durable file primitives (append, read
all, truncate) backing the transaction journal, plus atomic whole-file
replacement for state records. Every write is flushed and fsynced before
returning; journal OSErrors surface as JournalIOError.
"""

import os
import tempfile
import logging
from pathlib import Path

from capkg.core.errors import JournalIOError

logger = logging.getLogger(__name__)


class FileResource:
    """UTF-8 text file opened per operation and released immediately"""

    def __init__(self, path: Path):
        """
        Initialize file resource.

        Args:
            path: File location; parent directories are created on first write
        """
        self.path = Path(path)

    def __str__(self) -> str:
        return str(self.path)

    def append(self, line: str):
        """
        Append one line and fsync.

        Args:
            line: Line text without trailing newline

        Raises:
            JournalIOError: If the file cannot be opened or written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            logger.error(f"Failed to append to {self.path}: {e}")
            raise JournalIOError("append", str(self.path), e) from e

    def read_all(self) -> str:
        """
        Read the whole file. A missing file reads as empty.

        Raises:
            JournalIOError: If the file exists but cannot be read
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise JournalIOError("read", str(self.path), e) from e

    def truncate(self):
        """
        Truncate the file to zero length and fsync.

        Raises:
            JournalIOError: If the file cannot be opened for truncation
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                f.truncate(0)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            logger.error(f"Failed to truncate {self.path}: {e}")
            raise JournalIOError("truncate", str(self.path), e) from e

    def size(self) -> int:
        """File size in bytes, 0 if missing"""
        if not self.path.exists():
            return 0
        return self.path.stat().st_size


def atomic_write_text(path: Path, content: str):
    """
    Replace a file's contents atomically.

    The content goes to a temporary file in the same directory, is fsynced,
    then renamed over the target, so readers see either the old or the new
    file and never a partial one.

    Args:
        path: Target file
        content: New UTF-8 text
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        delete=False,
        dir=str(path.parent),
        prefix=path.name + ".",
        suffix=".tmp",
    ) as handle:
        temp_path = Path(handle.name)
        try:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        except OSError:
            handle.close()
            temp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise

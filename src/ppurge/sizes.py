"""Byte size aggregation for files and directory trees."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from .crawler import crawl

logger = logging.getLogger(__name__)

SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def _entry_size(path: Path) -> int:
    """Size of a non-directory entry, zero if it cannot be read."""
    try:
        st = os.stat(path)
    except OSError as e:
        logger.debug("Cannot stat %s, counting 0 bytes: %s", path, e)
        return 0

    if stat.S_ISDIR(st.st_mode):
        return 0
    return st.st_size


def size_of(path: Path | str) -> int:
    """Compute the total size of a path in bytes.

    Files report their own size. Directories report the sum of every file
    below them; directory entries themselves count zero, so the size of a
    directory always equals the sum of the sizes of its children. Symlinks
    are followed for their size but never descended into.

    Entries that vanish or cannot be read while walking contribute zero
    instead of raising.
    """
    path = Path(path)

    if os.path.islink(path) or not os.path.isdir(path):
        return _entry_size(path)

    total = 0
    try:
        for entry in crawl(path):
            total += _entry_size(entry)
    except OSError as e:
        logger.debug("Cannot list %s, size may be incomplete: %s", path, e)
    return total


def format_size(num_bytes: int | None) -> str:
    """Render a byte count the way humans read it (``"2 KB"``)."""
    if not num_bytes:
        return "0 Byte"

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and num_bytes >= 1024 ** (exponent + 1):
        exponent += 1
    return f"{round(num_bytes / 1024**exponent)} {SIZE_UNITS[exponent]}"

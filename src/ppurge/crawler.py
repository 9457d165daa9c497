"""Lazy depth-first directory traversal with caller-driven pruning."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

PathPredicate = Callable[[Path], bool]
ErrorHandler = Callable[[Path, OSError], None]


def _list_directory(directory: Path) -> Iterator[os.DirEntry[str]]:
    """Return the entries of a directory in name order."""
    with os.scandir(directory) as entries:
        return iter(sorted(entries, key=lambda entry: entry.name))


def crawl(
    root: Path | str,
    on_path: PathPredicate | None = None,
    on_error: ErrorHandler | None = None,
) -> Iterator[Path]:
    """Yield every path under root, depth-first and pre-order.

    Each path is yielded before its children. Once the consumer asks for the
    next path, ``on_path`` is called with the previous one; if it returns True
    the crawler does not descend into it. Symbolic links are yielded but never
    followed.

    Args:
        root: Directory to crawl. Not yielded itself.
        on_path: Pruning predicate. When omitted every path is visited.
        on_error: Called with a subdirectory that could not be listed and the
            error. The subdirectory is skipped and the crawl goes on.

    Yields:
        Absolute paths below root.

    Raises:
        OSError: If root itself cannot be listed.

    """
    root = Path(root)
    stack = [_list_directory(root)]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        path = Path(entry.path)
        yield path

        if on_path is not None and on_path(path):
            logger.debug("Pruned: %s", path)
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False
        if not is_dir:
            continue

        try:
            stack.append(_list_directory(path))
        except OSError as e:
            logger.warning("Skipping unreadable directory %s: %s", path, e)
            if on_error is not None:
                on_error(path, e)

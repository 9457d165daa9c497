"""Deletion of matched paths with symlink protection."""

from __future__ import annotations

import logging
import shutil
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rules import Match


class PurgeOutcome(Enum):
    """What happened to a single purge candidate."""

    DELETED = "deleted"
    SKIPPED_SYMLINK = "skipped-symlink"
    FAILED = "failed"


@dataclass
class PurgeResult:
    """Result of a purge attempt."""

    path: Path
    outcome: PurgeOutcome
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is PurgeOutcome.DELETED


class Purger:
    """Deletes include matches, never touching symbolic links."""

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize the purger.

        Args:
            logger: Logger instance.

        """
        self.logger = logger

    def purge_path(self, path: Path) -> PurgeResult:
        """Delete a single path.

        Symbolic links are skipped: neither the link nor its target is
        removed. Directories are removed with their contents.

        Args:
            path: Path to delete.

        Returns:
            PurgeResult with operation details.

        """
        try:
            mode = path.lstat().st_mode
            if stat.S_ISLNK(mode):
                self.logger.warning("Skipping symlink: %s", path)
                return PurgeResult(path=path, outcome=PurgeOutcome.SKIPPED_SYMLINK)

            if stat.S_ISDIR(mode):
                shutil.rmtree(path)
            else:
                path.unlink()

            self.logger.info("Purged: %s", path)
            return PurgeResult(path=path, outcome=PurgeOutcome.DELETED)

        except PermissionError as e:
            self.logger.error("Permission denied purging %s: %s", path, e)
            return PurgeResult(
                path=path,
                outcome=PurgeOutcome.FAILED,
                error=f"Permission denied: {e}",
            )
        except OSError as e:
            self.logger.error("Error purging %s: %s", path, e)
            return PurgeResult(path=path, outcome=PurgeOutcome.FAILED, error=str(e))

    def purge(self, matches: Iterable[Match]) -> Iterator[PurgeResult]:
        """Delete each include match in order.

        A failure on one path does not stop the others.

        Args:
            matches: Include matches, usually in discovery order.

        Yields:
            One PurgeResult per match.

        Raises:
            ValueError: If an exclude match is passed in.

        """
        for match in matches:
            if not match.include:
                raise ValueError(f"Refusing to purge excluded path: {match.path}")
            yield self.purge_path(match.path)

    def purge_all(self, matches: Iterable[Match]) -> list[PurgeResult]:
        """Purge every match and collect the results."""
        return list(self.purge(matches))

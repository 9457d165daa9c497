"""A single ppurge run: logging, scanning and purging."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .config import LOG_LEVELS, ConfigurationError, load_rules
from .purger import PurgeOutcome, PurgeResult, Purger
from .scanner import ScanEvent, ScanReport, Scanner

if TYPE_CHECKING:
    from .config import PurgeConfig
    from .rules import Rule

LOGGER_NAME = "ppurge"


@dataclass
class RunStats:
    """Statistics for a run."""

    start_time: datetime
    paths_seen: int = 0
    includes: int = 0
    excludes: int = 0
    deleted: int = 0
    skipped_symlinks: int = 0
    failed: int = 0


class PurgeRun:
    """Wires configuration, scanner and purger together for one run."""

    def __init__(self, config: PurgeConfig, *, console: Console | None = None) -> None:
        """Initialize the run.

        Resolves the root and the rules up front so configuration errors
        surface before any traversal starts.

        Args:
            config: Run configuration.
            console: Console for log output. Defaults to stderr.

        Raises:
            ConfigurationError: If the configuration cannot be used.

        """
        self.config = config
        self.console = console or Console(stderr=True)
        self.logger = self._setup_logging()

        self.root: Path = config.resolved_root()
        self.rules: list[Rule] = load_rules(config, self.root)

        self.scanner = Scanner(self.rules, compute_size=config.compute_size)
        self.purger = Purger(self.logger)

        self.stats = RunStats(start_time=datetime.now())

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the run.

        Returns:
            Configured logger instance.

        """
        level = self.config.log_level.upper()
        if level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log_level {self.config.log_level!r}, expected one of {', '.join(LOG_LEVELS)}"
            )

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(getattr(logging, level))

        # Clear existing handlers to avoid duplicates if a run is recreated
        if logger.handlers:
            logger.handlers.clear()

        console_handler = RichHandler(
            console=self.console,
            show_time=False,
            show_path=False,
        )
        logger.addHandler(console_handler)

        if self.config.log_file is not None:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
            )
            logger.addHandler(file_handler)

        return logger

    @property
    def report(self) -> ScanReport:
        return self.scanner.report

    def scan(self) -> Iterator[ScanEvent]:
        """Scan the root, yielding an event per crawled path."""
        self.logger.info("Scanning %s with %d rules", self.root, len(self.rules))

        for event in self.scanner.iter_scan(self.root):
            self.stats.paths_seen += 1
            if event.match is not None:
                if event.match.include:
                    self.stats.includes += 1
                else:
                    self.stats.excludes += 1
            yield event

    def purge(self) -> Iterator[PurgeResult]:
        """Delete the include matches of the last scan."""
        self.logger.info("Purging %d locations", self.report.include_count)

        for result in self.purger.purge(self.report.includes):
            if result.outcome is PurgeOutcome.DELETED:
                self.stats.deleted += 1
            elif result.outcome is PurgeOutcome.SKIPPED_SYMLINK:
                self.stats.skipped_symlinks += 1
            else:
                self.stats.failed += 1
            yield result

        self.logger.info(
            "Purge finished. Stats: deleted=%d, skipped_symlinks=%d, failed=%d",
            self.stats.deleted,
            self.stats.skipped_symlinks,
            self.stats.failed,
        )

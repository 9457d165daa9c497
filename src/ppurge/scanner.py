"""Crawl a root directory, match every path and collect the results."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .crawler import crawl
from .rules import Match, Rule, match_path
from .sizes import size_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanEvent:
    """One crawled path and the rule it matched, if any."""

    path: Path
    match: Match | None = None

    @property
    def matched(self) -> bool:
        return self.match is not None


@dataclass
class ScanReport:
    """Summary of a finished scan."""

    matches: dict[Path, Match] = field(default_factory=dict)
    elapsed: float = 0.0
    sized: bool = False
    unreadable: list[Path] = field(default_factory=list)

    @property
    def includes(self) -> list[Match]:
        return [m for m in self.matches.values() if m.include]

    @property
    def excludes(self) -> list[Match]:
        return [m for m in self.matches.values() if m.exclude]

    @property
    def include_count(self) -> int:
        return len(self.includes)

    @property
    def total_size(self) -> int | None:
        """Aggregated size of include matches, None when sizes were not computed."""
        if not self.sized:
            return None
        return sum(m.size or 0 for m in self.includes)

    @property
    def elapsed_ms(self) -> int:
        return round(self.elapsed * 1000)


class Scanner:
    """Finds the paths under a root that match an ordered rule list."""

    def __init__(self, rules: Sequence[Rule], *, compute_size: bool = False) -> None:
        self.rules = list(rules)
        self.compute_size = compute_size
        self.report = ScanReport(sized=compute_size)

    def iter_scan(self, root: Path) -> Iterator[ScanEvent]:
        """Crawl root and yield an event for every path.

        Matched paths are recorded before the crawler resumes, so nothing
        below a matched directory is ever visited. Include matches get their
        size attached when sizing is enabled.

        Args:
            root: Already resolved directory to scan.

        Yields:
            ScanEvent for each crawled path.

        """
        self.report = ScanReport(sized=self.compute_size)
        matches = self.report.matches
        start = time.monotonic()

        def on_error(path: Path, _exc: OSError) -> None:
            self.report.unreadable.append(path)

        try:
            for path in crawl(root, on_path=matches.__contains__, on_error=on_error):
                match = match_path(path, self.rules)
                if match is not None:
                    if self.compute_size and match.include:
                        match.size = size_of(path)
                    matches[path] = match
                    logger.debug("Matched %s by rule %s", path, match.rule)
                yield ScanEvent(path=path, match=match)
        finally:
            self.report.elapsed = time.monotonic() - start

        logger.info(
            "Scan of %s finished: %d include, %d exclude matches",
            root,
            self.report.include_count,
            len(self.report.excludes),
        )

    def scan(self, root: Path) -> ScanReport:
        """Run a full scan and return its report."""
        for _event in self.iter_scan(root):
            pass
        return self.report

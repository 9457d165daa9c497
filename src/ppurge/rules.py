"""Parse purge rules and match paths against them."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from wcmatch import glob as wcglob

COMMENT_PREFIX = "#"
EXCLUDE_PREFIX = "!"
FILTER_SEPARATOR = ";"

# Patterns without a slash match the basename, "*" stays inside one path
# segment and "**" spans directories.
GLOB_FLAGS = wcglob.GLOBSTAR | wcglob.MATCHBASE | wcglob.DOTGLOB | wcglob.CASE


class RuleKind(Enum):
    """Whether a rule marks paths for purging or for keeping."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class Rule:
    """A single glob rule from a rule file."""

    kind: RuleKind
    pattern: str

    @property
    def include(self) -> bool:
        return self.kind is RuleKind.INCLUDE

    @property
    def exclude(self) -> bool:
        return self.kind is RuleKind.EXCLUDE

    def matches(self, path: Path | str) -> bool:
        """Check whether the pattern matches the path."""
        if not self.pattern:
            return str(path) == ""
        return wcglob.globmatch(str(path), self.pattern, flags=GLOB_FLAGS)

    def __str__(self) -> str:
        if self.exclude:
            return f"{EXCLUDE_PREFIX}{self.pattern}"
        return self.pattern


@dataclass
class Match:
    """A path that satisfied a rule."""

    rule: Rule
    path: Path
    size: int | None = None

    @property
    def include(self) -> bool:
        return self.rule.include

    @property
    def exclude(self) -> bool:
        return self.rule.exclude


def parse_rules(text: str) -> list[Rule]:
    """Parse newline separated rule text into an ordered rule list.

    Lines are trimmed, lines starting with ``#`` are comments, lines starting
    with ``!`` are exclude rules and everything else is an include rule.
    Nothing is rejected: a malformed line simply becomes a pattern that is
    unlikely to match anything.

    Args:
        text: Raw rule text.

    Returns:
        Rules in the order they appear in the text.

    """
    rules: list[Rule] = []

    for raw_line in text.split("\n"):
        line = raw_line.strip()

        if line.startswith(COMMENT_PREFIX):
            continue

        if line.startswith(EXCLUDE_PREFIX):
            rules.append(Rule(RuleKind.EXCLUDE, line[len(EXCLUDE_PREFIX):]))
        else:
            rules.append(Rule(RuleKind.INCLUDE, line))

    return rules


def parse_filter(text: str) -> list[Rule]:
    """Parse an inline ``;`` separated filter into rules."""
    return parse_rules("\n".join(text.split(FILTER_SEPARATOR)))


def match_path(path: Path | str, rules: Sequence[Rule]) -> Match | None:
    """Find the first rule matching a path.

    Rules are tried in order and the first match wins, even when a later rule
    is more specific.

    Args:
        path: Path to test, usually absolute as produced by the crawler.
        rules: Ordered rules.

    Returns:
        Match for the first matching rule, or None.

    """
    for rule in rules:
        if rule.matches(path):
            return Match(rule=rule, path=Path(path))
    return None

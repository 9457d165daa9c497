"""Tests for a complete ppurge run."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from ppurge.config import ConfigurationError, PurgeConfig
from ppurge.purger import PurgeOutcome
from ppurge.runner import LOGGER_NAME, PurgeRun


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project tree with a rule file."""
    root = tmp_path / "project"
    (root / "node_modules" / "left-pad").mkdir(parents=True)
    (root / "node_modules" / "left-pad" / "index.js").write_bytes(b"x" * 30)
    (root / "src").mkdir()
    (root / "src" / "app.js").write_bytes(b"x" * 10)
    (root / "debug.log").write_bytes(b"x" * 20)
    (root / ".ppurge").write_text("# deps\nnode_modules\n!src\n*.log\n")
    return root


@pytest.fixture
def config(project: Path, tmp_path: Path) -> PurgeConfig:
    """Create a run configuration rooted at the project."""
    return PurgeConfig(root=project, log_file=tmp_path / "logs" / "ppurge.log")


class TestRunInit:
    """Tests for run initialization."""

    def test_rules_loaded(self, config: PurgeConfig) -> None:
        """Test that rules come from the rule file under the root."""
        run = PurgeRun(config)

        assert [str(r) for r in run.rules if r.pattern] == ["node_modules", "!src", "*.log"]

    def test_root_resolved(self, config: PurgeConfig, project: Path) -> None:
        """Test that the root is made absolute."""
        assert PurgeRun(config).root == project.resolve()

    def test_invalid_log_level_raises(self, config: PurgeConfig) -> None:
        """Test that an invalid log_level is a configuration error."""
        config.log_level = "LOUD"

        with pytest.raises(ConfigurationError, match="Invalid log_level"):
            PurgeRun(config)

    def test_missing_rules_raises(self, config: PurgeConfig, project: Path) -> None:
        """Test that a run without any rule source never starts."""
        (project / ".ppurge").unlink()

        with pytest.raises(ConfigurationError):
            PurgeRun(config)

    def test_handlers_not_duplicated(self, config: PurgeConfig) -> None:
        """Test that creating a second run does not stack handlers."""
        PurgeRun(config)
        PurgeRun(config)

        assert len(logging.getLogger(LOGGER_NAME).handlers) == 2

    def test_log_file_written(self, config: PurgeConfig) -> None:
        """Test that the file handler receives debug output."""
        config.log_level = "DEBUG"
        run = PurgeRun(config)
        list(run.scan())

        assert config.log_file is not None
        assert "Scanning" in config.log_file.read_text()


class TestRunScan:
    """Tests for scanning through a run."""

    def test_matches_and_stats(self, config: PurgeConfig, project: Path) -> None:
        """Test that the scan reports matches and counts them."""
        run = PurgeRun(config)
        events = list(run.scan())

        root = run.root
        assert list(run.report.matches) == [
            root / "debug.log",
            root / "node_modules",
            root / "src",
        ]
        assert run.stats.includes == 2
        assert run.stats.excludes == 1
        assert run.stats.paths_seen == len(events) == 4

    def test_sizes(self, config: PurgeConfig) -> None:
        """Test that include matches are sized when requested."""
        config.compute_size = True
        run = PurgeRun(config)
        list(run.scan())

        assert run.report.total_size == 50


class TestRunPurge:
    """Tests for purging through a run."""

    def test_purges_includes_only(self, config: PurgeConfig, project: Path) -> None:
        """Test that include matches are deleted and excludes kept."""
        run = PurgeRun(config)
        list(run.scan())

        results = list(run.purge())

        assert all(r.outcome is PurgeOutcome.DELETED for r in results)
        assert not (project / "node_modules").exists()
        assert not (project / "debug.log").exists()
        assert (project / "src" / "app.js").exists()
        assert run.stats.deleted == 2
        assert run.stats.failed == 0

    def test_symlink_counted_as_skip(self, config: PurgeConfig, project: Path, tmp_path: Path) -> None:
        """Test that a symlink match is skipped and counted."""
        elsewhere = tmp_path / "elsewhere.log"
        elsewhere.write_text("keep me")
        (project / "linked.log").symlink_to(elsewhere)

        run = PurgeRun(config)
        list(run.scan())
        results = {r.path.name: r.outcome for r in run.purge()}

        assert results["linked.log"] is PurgeOutcome.SKIPPED_SYMLINK
        assert (project / "linked.log").is_symlink()
        assert elsewhere.read_text() == "keep me"
        assert run.stats.skipped_symlinks == 1
        assert run.stats.deleted == 2

"""Configuration management for ppurge."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from .rules import Rule, parse_filter, parse_rules

logger = logging.getLogger(__name__)

DEFAULT_RULES_FILE = ".ppurge"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


class ConfigurationError(Exception):
    """Raised when a run cannot start because of its configuration."""


def parse_bool(value: Any, default: bool) -> bool:
    """Interpret a YAML or string value as a boolean.

    Args:
        value: Raw value. None means "not set".
        default: Value to use when not set.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


@dataclass
class PurgeConfig:
    """Settings for a single ppurge run."""

    # Directory to search, resolved before scanning
    root: Path = field(default_factory=Path.cwd)

    # Rule file name looked up under root when no explicit file is given
    rules_file: str = DEFAULT_RULES_FILE

    # Explicit rule file (--config)
    rules_path: Path | None = None

    # Inline ';' separated rules (--filter), overrides any rule file
    filter: str | None = None

    # Actually delete include matches instead of a dry run
    purge: bool = False

    # Compute sizes of include matches
    compute_size: bool = False

    # Logging
    log_level: str = "WARNING"
    log_file: Path | None = None

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default settings file path."""
        return Path.home() / ".config/ppurge/config.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> PurgeConfig:
        """Load settings from a YAML file.

        Args:
            config_path: Path to settings file. Uses default if None.

        Returns:
            Loaded configuration, or defaults when the file does not exist.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file must contain a mapping: {config_path}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> PurgeConfig:
        """Create config from dictionary."""
        config = cls()

        if "root" in data:
            config.root = Path(os.path.expanduser(data["root"]))
        if "rules_file" in data:
            config.rules_file = str(data["rules_file"])
        config.compute_size = parse_bool(data.get("compute_size"), config.compute_size)

        # Logging
        if "logging" in data:
            logging_cfg = data["logging"] or {}
            if logging_cfg.get("file"):
                config.log_file = Path(os.path.expanduser(logging_cfg["file"]))
            if "level" in logging_cfg:
                config.log_level = str(logging_cfg["level"]).upper()

        return config

    def with_overrides(self, **overrides: Any) -> PurgeConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def resolved_root(self) -> Path:
        """Expand ``~`` and make the root absolute.

        Raises:
            ConfigurationError: If the root is not a directory.

        """
        root = Path(os.path.expanduser(self.root)).resolve()
        if not root.is_dir():
            raise ConfigurationError(f"Root is not a directory: {root}")
        return root

    def save(self, config_path: Path | None = None) -> None:
        """Save settings to a YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "rules_file": self.rules_file,
            "compute_size": self.compute_size,
            "logging": {
                "file": str(self.log_file) if self.log_file else None,
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_rules(config: PurgeConfig, root: Path) -> list[Rule]:
    """Resolve the rules for a run.

    An inline filter wins over any rule file. Otherwise the explicit rule
    file is read, falling back to the default rule file under root.

    Args:
        config: Run configuration.
        root: Resolved root directory.

    Returns:
        Parsed rules in file order.

    Raises:
        ConfigurationError: If there is neither a readable rule file nor a filter,
            or the rule file is not valid UTF-8.

    """
    rules_path = config.rules_path or root / config.rules_file

    try:
        rules_text: str | None = rules_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Rule file is not valid UTF-8: {rules_path}") from e
    except OSError:
        rules_text = None

    if rules_text is None and config.rules_path is not None:
        logger.warning("Did not find a file at %s.", rules_path)

    if config.filter:
        if rules_text:
            logger.warning(
                "Ignoring the configuration file found at %s because a --filter,-f arg was provided",
                rules_path,
            )
        return parse_filter(config.filter)

    if rules_text is None:
        raise ConfigurationError(
            "Quitting, ppurge requires a config file or a --filter,-f arg to work."
        )

    return parse_rules(rules_text)

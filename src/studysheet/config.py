"""
Configuration for studysheet.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (studysheet.toml)
3. Default values (lowest priority)

Environment variables:
- STUDYSHEET_STATE_PATH: Path to the persisted sheet state (default: data/state.json)
- STUDYSHEET_SEED_PATH: Path to the seed dataset (default: seed/sheet.json)
- STUDYSHEET_BACKUPS: Whether to back up state before each write (true/false)
- STUDYSHEET_MAX_BACKUPS: Number of state backups to retain (0 = unlimited)
- STUDYSHEET_ALLOW_CROSS_TOPIC_SUBTOPICS: Allow moving subtopics between topics
- STUDYSHEET_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- STUDYSHEET_STRUCTURED_LOGGING: JSON log lines (true) or human-readable (false)
- STUDYSHEET_CONFIG_FILE: Path to TOML config file
"""

import os
import logging
from dataclasses import dataclass, field
from importlib.metadata import version as get_package_version, PackageNotFoundError
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from studysheet.core.logging_config import configure_logging


logger = logging.getLogger(__name__)


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("studysheet-mcp")
    except PackageNotFoundError:
        return "0.1.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()

DEFAULT_STATE_PATH = Path("data/state.json")
DEFAULT_SEED_PATH = Path("seed/sheet.json")
DEFAULT_CONFIG_FILES = ("studysheet.toml", ".studysheet.toml")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_int(value: Any, name: str, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s '%s', using %d", name, value, default)
        return default
    if parsed < 0:
        logger.warning("Negative %s '%s', using %d", name, value, default)
        return default
    return parsed


@dataclass
class ServerConfig:
    """Server configuration with support for env vars and TOML overrides."""

    # Storage configuration
    state_path: Path = field(default_factory=lambda: DEFAULT_STATE_PATH)
    seed_path: Path = field(default_factory=lambda: DEFAULT_SEED_PATH)
    backups: bool = True
    max_backups: int = 10

    # Reorder policy
    allow_cross_topic_subtopics: bool = False

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True

    # Server configuration
    server_name: str = "studysheet-mcp"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        # Load TOML config if available
        toml_path = config_file or os.environ.get("STUDYSHEET_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            # Try default locations
            for default_path in DEFAULT_CONFIG_FILES:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        # Override with environment variables
        config._load_env()

        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return

        # Storage settings
        if "storage" in data:
            storage = data["storage"]
            if "state_path" in storage:
                self.state_path = Path(storage["state_path"])
            if "seed_path" in storage:
                self.seed_path = Path(storage["seed_path"])
            if "backups" in storage:
                self.backups = _parse_bool(storage["backups"])
            if "max_backups" in storage:
                self.max_backups = _parse_int(
                    storage["max_backups"], "max_backups", self.max_backups
                )

        # Reorder settings
        if "reorder" in data:
            reorder = data["reorder"]
            if "allow_cross_topic_subtopics" in reorder:
                self.allow_cross_topic_subtopics = _parse_bool(
                    reorder["allow_cross_topic_subtopics"]
                )

        # Logging settings
        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = str(log["level"]).upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        # Server settings
        if "server" in data:
            srv = data["server"]
            if "name" in srv:
                self.server_name = srv["name"]

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if state := os.environ.get("STUDYSHEET_STATE_PATH"):
            self.state_path = Path(state)

        if seed := os.environ.get("STUDYSHEET_SEED_PATH"):
            self.seed_path = Path(seed)

        if backups := os.environ.get("STUDYSHEET_BACKUPS"):
            self.backups = _parse_bool(backups)

        if max_backups := os.environ.get("STUDYSHEET_MAX_BACKUPS"):
            self.max_backups = _parse_int(max_backups, "max_backups", self.max_backups)

        if cross := os.environ.get("STUDYSHEET_ALLOW_CROSS_TOPIC_SUBTOPICS"):
            self.allow_cross_topic_subtopics = _parse_bool(cross)

        if level := os.environ.get("STUDYSHEET_LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get("STUDYSHEET_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)
        configure_logging(
            level=level,
            format="structured" if self.structured_logging else "human",
        )


# Global configuration instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: Optional[ServerConfig]) -> None:
    """Set (or clear, with None) the global configuration instance."""
    global _config
    _config = config

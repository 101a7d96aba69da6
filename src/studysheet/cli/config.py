"""CLI configuration.

Provides configuration handling for the studysheet CLI, layering
command-line overrides on top of the shared ``studysheet.config`` module.
"""

from pathlib import Path
from typing import Optional

from studysheet.config import ServerConfig, get_config as get_server_config
from studysheet.core.store import SheetStore


class CLIContext:
    """CLI execution context with resolved configuration.

    Holds the effective configuration for a CLI command, including
    any overrides from command-line options, and the store built from it.
    """

    def __init__(
        self,
        state_path: Optional[str] = None,
        seed_path: Optional[str] = None,
        server_config: Optional[ServerConfig] = None,
    ):
        """Initialize CLI context.

        Args:
            state_path: Explicit state file override from --state.
            seed_path: Explicit seed file override from --seed.
            server_config: Optional server config (uses global if not provided).
        """
        self._state_override = state_path
        self._seed_override = seed_path
        self._config = server_config or get_server_config()
        self._store: Optional[SheetStore] = None

    @property
    def config(self) -> ServerConfig:
        """Get the underlying server configuration."""
        return self._config

    @property
    def state_path(self) -> Path:
        """State file path; --state wins over env/TOML configuration."""
        if self._state_override:
            return Path(self._state_override)
        return Path(self._config.state_path)

    @property
    def seed_path(self) -> Path:
        """Seed file path; --seed wins over env/TOML configuration."""
        if self._seed_override:
            return Path(self._seed_override)
        return Path(self._config.seed_path)

    @property
    def store(self) -> SheetStore:
        """Store for this invocation, created on first use."""
        if self._store is None:
            self._store = SheetStore(
                self.state_path,
                self.seed_path,
                backups=self._config.backups,
                max_backups=self._config.max_backups,
                allow_cross_topic_subtopics=self._config.allow_cross_topic_subtopics,
            )
        return self._store


def create_context(
    state_path: Optional[str] = None,
    seed_path: Optional[str] = None,
) -> CLIContext:
    """Create a CLI context with optional overrides.

    Args:
        state_path: Optional state file override.
        seed_path: Optional seed file override.

    Returns:
        Configured CLIContext instance.
    """
    return CLIContext(state_path=state_path, seed_path=seed_path)

"""Structured logging hooks for CLI commands.

Binds a correlation ID for each command invocation and logs command
start and completion. The same ID appears in ``meta.request_id`` of the
emitted envelope.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from studysheet.core.context import get_correlation_id, sync_request_context

__all__ = [
    "cli_command",
    "get_cli_logger",
    "CLILogger",
]

T = TypeVar("T")


class CLILogger:
    """Structured logger for CLI commands.

    Keyword arguments become structured ``extra`` fields on the record.
    """

    def __init__(self, name: str = "studysheet.cli"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, **extra: Any) -> None:
        context = {"request_id": get_correlation_id(), **extra}
        self._logger.log(level, message, extra={"cli_context": context})

    def debug(self, message: str, **extra: Any) -> None:
        self._log(logging.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log(logging.INFO, message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._log(logging.WARNING, message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self._log(logging.ERROR, message, **extra)


# Global CLI logger
_cli_logger = CLILogger()


def get_cli_logger() -> CLILogger:
    """Get the global CLI logger."""
    return _cli_logger


def cli_command(
    command_name: Optional[str] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for CLI commands.

    Automatically:
    - Binds a ``cli_``-prefixed correlation ID
    - Logs command start/end with duration

    Example:
        >>> @cli_command("sheet-show")
        ... def show(ctx):
        ...     ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = command_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            with sync_request_context(prefix="cli"):
                start = time.perf_counter()
                success = True
                _cli_logger.debug(f"CLI command started: {name}", command=name)
                try:
                    return func(*args, **kwargs)
                except SystemExit as exc:
                    success = exc.code in (None, 0)
                    raise
                finally:
                    _cli_logger.debug(
                        f"CLI command completed: {name}",
                        command=name,
                        success=success,
                        duration_ms=round((time.perf_counter() - start) * 1000, 2),
                    )

        return wrapper

    return decorator

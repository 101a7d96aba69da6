"""Request context management for log correlation.

Provides a correlation ID carried in a context variable so every log line
and response envelope produced while handling one tool call or CLI command
can be tied together.

Usage:
    from studysheet.core.context import sync_request_context, get_correlation_id

    with sync_request_context() as ctx:
        print(ctx.correlation_id)  # e.g., "req_a1b2c3d4e5f6"
"""

from __future__ import annotations

import secrets
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

__all__ = [
    "correlation_id_var",
    "start_time_var",
    "RequestContext",
    "generate_correlation_id",
    "sync_request_context",
    "get_correlation_id",
    "get_start_time",
]

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
"""Request correlation ID for tracing requests across components."""

start_time_var: ContextVar[float] = ContextVar("start_time", default=0.0)
"""Request start time as Unix timestamp."""


def generate_correlation_id(prefix: str = "req") -> str:
    """Generate a short random correlation ID, e.g. ``req_a1b2c3d4e5f6``."""
    return f"{prefix}_{secrets.token_hex(6)}"


@dataclass
class RequestContext:
    """Snapshot of the active request context."""

    correlation_id: str
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_ms(self) -> float:
        return (time.time() - self.start_time) * 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation_id": self.correlation_id,
            "elapsed_ms": round(self.elapsed_ms, 2),
        }


@contextmanager
def sync_request_context(
    correlation_id: Optional[str] = None,
    *,
    prefix: str = "req",
) -> Generator[RequestContext, None, None]:
    """Bind a correlation ID for the duration of the block.

    An already-bound ID is reused so nested contexts share one ID.
    """
    existing = correlation_id_var.get()
    ctx = RequestContext(
        correlation_id=correlation_id or existing or generate_correlation_id(prefix)
    )
    id_token = correlation_id_var.set(ctx.correlation_id)
    time_token = start_time_var.set(ctx.start_time)
    try:
        yield ctx
    finally:
        correlation_id_var.reset(id_token)
        start_time_var.reset(time_token)


def get_correlation_id() -> str:
    return correlation_id_var.get()


def get_start_time() -> float:
    return start_time_var.get()

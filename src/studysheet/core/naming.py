"""Naming helpers for MCP tool registration."""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from studysheet.core.context import sync_request_context

logger = logging.getLogger(__name__)


def _minify_response(result: dict[str, Any]) -> TextContent:
    """Convert dict to TextContent with minified JSON."""
    return TextContent(
        type="text",
        text=json.dumps(result, separators=(",", ":"), default=str),
    )


def canonical_tool(
    mcp: FastMCP,
    *,
    canonical_name: str,
    **tool_kwargs: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator that registers a tool under its canonical name.

    The wrapped function runs inside a fresh request context, so log lines
    and the response ``meta.request_id`` share one correlation ID. Dict
    results are returned as minified JSON text content.

    Args:
        mcp: FastMCP instance
        canonical_name: The canonical name for the tool
        **tool_kwargs: Additional kwargs passed to mcp.tool()

    Returns:
        Decorated function registered as an MCP tool
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with sync_request_context() as ctx:
                logger.debug(
                    "Tool call %s action=%s",
                    canonical_name,
                    kwargs.get("action"),
                    extra={"tool": canonical_name},
                )
                result = func(*args, **kwargs)
                logger.debug(
                    "Tool %s finished in %.2fms", canonical_name, ctx.elapsed_ms
                )
            if isinstance(result, dict):
                return _minify_response(result)
            return result

        return mcp.tool(name=canonical_name, **tool_kwargs)(wrapper)

    return decorator

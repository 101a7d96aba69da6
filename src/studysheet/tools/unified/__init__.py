"""Unified action-based MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .question import register_unified_question_tool
from .sheet import register_unified_sheet_tool
from .subtopic import register_unified_subtopic_tool
from .topic import register_unified_topic_tool


if TYPE_CHECKING:  # pragma: no cover - import-time typing only
    from mcp.server.fastmcp import FastMCP
    from studysheet.config import ServerConfig


def register_unified_tools(mcp: "FastMCP", config: "ServerConfig") -> None:
    """Register all unified tool routers."""
    register_unified_sheet_tool(mcp, config)
    register_unified_topic_tool(mcp, config)
    register_unified_subtopic_tool(mcp, config)
    register_unified_question_tool(mcp, config)


__all__ = [
    "register_unified_tools",
    "register_unified_sheet_tool",
    "register_unified_topic_tool",
    "register_unified_subtopic_tool",
    "register_unified_question_tool",
]

"""Unified sheet tool: read, export, import, reorder, search and progress."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from studysheet.config import ServerConfig
from studysheet.core.naming import canonical_tool
from studysheet.tools.unified.common import (
    dispatch_action,
    require_param,
    run_sheet_operation,
)
from studysheet.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)

_ACTION_SUMMARY = {
    "get": "Return the full sheet",
    "export": "Return the sheet in its canonical export form",
    "import": "Replace the whole sheet with the supplied one",
    "reorder": "Move a topic, subtopic or question to a new position",
    "search": "Filter questions by title, source or difficulty",
    "progress": "Summarize solved/total counts overall and per topic",
}


def _handle_get(*, config: ServerConfig, **payload: Any) -> dict:
    return run_sheet_operation(lambda store: store.get(), tool="sheet", action="get")


def _handle_export(*, config: ServerConfig, **payload: Any) -> dict:
    return run_sheet_operation(
        lambda store: store.export(), tool="sheet", action="export"
    )


def _handle_import(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "sheet", tool="sheet", action="import")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.replace(payload["sheet"]), tool="sheet", action="import"
    )


def _handle_reorder(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "move", tool="sheet", action="reorder")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.reorder(payload["move"]), tool="sheet", action="reorder"
    )


def _handle_search(*, config: ServerConfig, **payload: Any) -> dict:
    query = payload.get("query")
    return run_sheet_operation(
        lambda store: store.search("" if query is None else query),
        tool="sheet",
        action="search",
    )


def _handle_progress(*, config: ServerConfig, **payload: Any) -> dict:
    return run_sheet_operation(
        lambda store: store.progress(), tool="sheet", action="progress"
    )


_SHEET_ROUTER = ActionRouter(
    tool_name="sheet",
    actions=[
        ActionDefinition(name=name, handler=handler, summary=_ACTION_SUMMARY[name])
        for name, handler in (
            ("get", _handle_get),
            ("export", _handle_export),
            ("import", _handle_import),
            ("reorder", _handle_reorder),
            ("search", _handle_search),
            ("progress", _handle_progress),
        )
    ],
)


def register_unified_sheet_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated sheet tool."""

    @canonical_tool(
        mcp,
        canonical_name="sheet",
    )
    def sheet(
        action: str,
        sheet: Optional[Dict[str, Any]] = None,
        move: Optional[Dict[str, Any]] = None,
        query: Optional[str] = None,
    ) -> dict:
        """Read or restructure the study sheet.

        Actions: get, export, import (``sheet``), reorder (``move`` as
        ``{type, from: {containerId, index}, to: {containerId, index}, itemId?}``),
        search (``query``), progress.
        """
        payload = {"sheet": sheet, "move": move, "query": query}
        return dispatch_action(
            _SHEET_ROUTER, action=action, payload={"config": config, **payload}
        )

    logger.debug("Registered unified sheet tool")


__all__ = [
    "register_unified_sheet_tool",
]

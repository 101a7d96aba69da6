"""Unified subtopic tool: create, update and delete subtopics."""

from __future__ import annotations

import logging
from typing import Any, Optional

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


def _handle_create(*, config: ServerConfig, **payload: Any) -> dict:
    for name in ("topic_id", "title"):
        error = require_param(payload, name, tool="subtopic", action="create")
        if error:
            return error
    return run_sheet_operation(
        lambda store: store.create_subtopic(payload["topic_id"], payload["title"]),
        tool="subtopic",
        action="create",
    )


def _handle_update(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "subtopic_id", tool="subtopic", action="update")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.update_subtopic(
            payload["subtopic_id"], payload.get("title")
        ),
        tool="subtopic",
        action="update",
    )


def _handle_delete(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "subtopic_id", tool="subtopic", action="delete")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.delete_subtopic(payload["subtopic_id"]),
        tool="subtopic",
        action="delete",
    )


_SUBTOPIC_ROUTER = ActionRouter(
    tool_name="subtopic",
    actions=[
        ActionDefinition(
            name="create", handler=_handle_create, summary="Append a subtopic to a topic"
        ),
        ActionDefinition(name="update", handler=_handle_update, summary="Rename a subtopic"),
        ActionDefinition(
            name="delete",
            handler=_handle_delete,
            summary="Delete a subtopic with its questions",
        ),
    ],
)


def register_unified_subtopic_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated subtopic tool."""

    @canonical_tool(
        mcp,
        canonical_name="subtopic",
    )
    def subtopic(
        action: str,
        topic_id: Optional[str] = None,
        subtopic_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> dict:
        """Create, rename or delete a subtopic. Returns the updated sheet."""
        payload = {"topic_id": topic_id, "subtopic_id": subtopic_id, "title": title}
        return dispatch_action(
            _SUBTOPIC_ROUTER, action=action, payload={"config": config, **payload}
        )

    logger.debug("Registered unified subtopic tool")


__all__ = [
    "register_unified_subtopic_tool",
]

"""Unified topic tool: create, update and delete topics."""

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
    error = require_param(payload, "title", tool="topic", action="create")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.create_topic(payload["title"]),
        tool="topic",
        action="create",
    )


def _handle_update(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "topic_id", tool="topic", action="update")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.update_topic(payload["topic_id"], payload.get("title")),
        tool="topic",
        action="update",
    )


def _handle_delete(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "topic_id", tool="topic", action="delete")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.delete_topic(payload["topic_id"]),
        tool="topic",
        action="delete",
    )


_TOPIC_ROUTER = ActionRouter(
    tool_name="topic",
    actions=[
        ActionDefinition(name="create", handler=_handle_create, summary="Append a topic"),
        ActionDefinition(name="update", handler=_handle_update, summary="Rename a topic"),
        ActionDefinition(
            name="delete",
            handler=_handle_delete,
            summary="Delete a topic with its subtopics and questions",
        ),
    ],
)


def register_unified_topic_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated topic tool."""

    @canonical_tool(
        mcp,
        canonical_name="topic",
    )
    def topic(
        action: str,
        topic_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> dict:
        """Create, rename or delete a topic. Returns the updated sheet."""
        payload = {"topic_id": topic_id, "title": title}
        return dispatch_action(
            _TOPIC_ROUTER, action=action, payload={"config": config, **payload}
        )

    logger.debug("Registered unified topic tool")


__all__ = [
    "register_unified_topic_tool",
]

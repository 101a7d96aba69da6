"""Unified question tool: create, update and delete questions."""

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


def _handle_create(*, config: ServerConfig, **payload: Any) -> dict:
    for name in ("subtopic_id", "fields"):
        error = require_param(payload, name, tool="question", action="create")
        if error:
            return error
    return run_sheet_operation(
        lambda store: store.create_question(payload["subtopic_id"], payload["fields"]),
        tool="question",
        action="create",
    )


def _handle_update(*, config: ServerConfig, **payload: Any) -> dict:
    for name in ("question_id", "fields"):
        error = require_param(payload, name, tool="question", action="update")
        if error:
            return error
    return run_sheet_operation(
        lambda store: store.update_question(payload["question_id"], payload["fields"]),
        tool="question",
        action="update",
    )


def _handle_delete(*, config: ServerConfig, **payload: Any) -> dict:
    error = require_param(payload, "question_id", tool="question", action="delete")
    if error:
        return error
    return run_sheet_operation(
        lambda store: store.delete_question(payload["question_id"]),
        tool="question",
        action="delete",
    )


_QUESTION_ROUTER = ActionRouter(
    tool_name="question",
    actions=[
        ActionDefinition(
            name="create", handler=_handle_create, summary="Append a question to a subtopic"
        ),
        ActionDefinition(
            name="update",
            handler=_handle_update,
            summary="Merge field changes into a question",
        ),
        ActionDefinition(name="delete", handler=_handle_delete, summary="Delete a question"),
    ],
)


def register_unified_question_tool(mcp: FastMCP, config: ServerConfig) -> None:
    """Register the consolidated question tool."""

    @canonical_tool(
        mcp,
        canonical_name="question",
    )
    def question(
        action: str,
        subtopic_id: Optional[str] = None,
        question_id: Optional[str] = None,
        fields: Optional[Dict[str, Any]] = None,
    ) -> dict:
        """Create, update or delete a question. Returns the updated sheet.

        ``fields`` uses the sheet's question keys: title, source, difficulty
        (Basic/Easy/Medium/Hard), solved, starred, notes, youtubeUrl,
        problemUrl, tags.
        """
        payload = {
            "subtopic_id": subtopic_id,
            "question_id": question_id,
            "fields": fields,
        }
        return dispatch_action(
            _QUESTION_ROUTER, action=action, payload={"config": config, **payload}
        )

    logger.debug("Registered unified question tool")


__all__ = [
    "register_unified_question_tool",
]

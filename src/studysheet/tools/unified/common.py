"""Helpers shared by the unified sheet tools."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping, Optional

from studysheet.core.errors import SheetError
from studysheet.core.models import Sheet
from studysheet.core.responses import (
    ErrorCode,
    ErrorType,
    error_response,
    internal_error,
    missing_parameter_error,
    sheet_error_response,
    success_response,
)
from studysheet.core.store import SheetStore, get_store
from studysheet.tools.unified.router import ActionRouter, ActionRouterError

logger = logging.getLogger(__name__)


def run_sheet_operation(
    operation: Callable[[SheetStore], Any],
    *,
    tool: str,
    action: str,
) -> dict:
    """Run ``operation`` against the global store and wrap the result.

    A returned ``Sheet`` becomes the envelope ``data``; a returned dict is
    used as-is. ``SheetError`` subclasses map onto their error codes and
    anything else becomes an ``INTERNAL_ERROR``.
    """
    try:
        result = operation(get_store())
    except SheetError as exc:
        logger.info(
            "%s.%s rejected: %s", tool, action, exc.message,
            extra={"error_code": exc.error_code},
        )
        return asdict(sheet_error_response(exc))
    except Exception:
        logger.exception("%s.%s failed unexpectedly", tool, action)
        return asdict(internal_error(f"{tool}.{action} failed unexpectedly"))

    data = result.to_dict() if isinstance(result, Sheet) else result
    return asdict(success_response(data=data))


def require_param(
    payload: Mapping[str, Any], name: str, *, tool: str, action: str
) -> Optional[dict]:
    """Return an error envelope if ``name`` is absent from the payload."""
    if payload.get(name) is None:
        return asdict(missing_parameter_error(name, action, tool))
    return None


def dispatch_action(
    router: ActionRouter, *, action: str, payload: Dict[str, Any]
) -> dict:
    """Dispatch through ``router``, turning unknown actions into envelopes."""
    try:
        return router.dispatch(action=action, **payload)
    except ActionRouterError as exc:
        allowed = ", ".join(exc.allowed_actions)
        return asdict(
            error_response(
                f"Unsupported {router.tool_name} action '{action}'. Allowed actions: {allowed}",
                error_code=ErrorCode.VALIDATION_ERROR,
                error_type=ErrorType.VALIDATION,
                remediation=f"Use one of: {allowed}",
            )
        )

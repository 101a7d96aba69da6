"""JSON output helpers for the studysheet CLI.

This module provides the sole output mechanism for the CLI. It wraps the
canonical response helpers from ``studysheet.core.responses`` so CLI output
matches the response-v2 envelope used by the MCP tools.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, NoReturn, Sequence

from studysheet.core.context import generate_correlation_id, get_correlation_id
from studysheet.core.errors import SheetError
from studysheet.core.responses import error_response, success_response


def _request_id() -> str:
    return get_correlation_id() or generate_correlation_id("cli")


def emit(data: Any) -> None:
    """Emit minified JSON to stdout."""
    print(json.dumps(data, separators=(",", ":"), default=str))


def emit_error(
    message: str,
    code: str = "INTERNAL_ERROR",
    *,
    error_type: str = "internal",
    remediation: str | None = None,
    details: Mapping[str, Any] | None = None,
) -> NoReturn:
    """Emit error JSON to stderr and exit with code 1.

    Args:
        message: Human-readable error description.
        code: Error code in SCREAMING_SNAKE_CASE (e.g., VALIDATION_ERROR, NOT_FOUND).
        error_type: Error category (validation, not_found, internal).
        remediation: Actionable guidance for resolving the error.
        details: Optional additional error context.

    Raises:
        SystemExit: Always exits with code 1.
    """
    response = error_response(
        message=message,
        error_code=code,
        error_type=error_type,
        remediation=remediation,
        details=details,
        request_id=_request_id(),
    )
    print(json.dumps(asdict(response), separators=(",", ":"), default=str), file=sys.stderr)
    sys.exit(1)


def emit_sheet_error(exc: SheetError) -> NoReturn:
    """Emit a raised ``SheetError`` as an error envelope and exit."""
    emit_error(
        exc.message,
        exc.error_code,
        error_type=exc.error_type,
        remediation=exc.remediation,
        details=exc.details or None,
    )


def emit_success(
    data: Any,
    *,
    warnings: Sequence[str] | None = None,
    meta: Mapping[str, Any] | None = None,
) -> None:
    """Emit success response envelope to stdout.

    Args:
        data: The operation-specific payload; non-dict values are wrapped
            under a ``result`` key.
        warnings: Non-fatal issues to surface in meta.warnings.
        meta: Additional metadata to merge into meta object.
    """
    payload = data if isinstance(data, dict) else {"result": data}
    response = success_response(
        data=payload,
        warnings=warnings,
        meta=meta,
        request_id=_request_id(),
    )
    emit(asdict(response))

"""
Exception taxonomy for sheet operations.

Core modules raise these; the MCP tools and CLI translate them into
response envelopes via ``studysheet.core.responses``.
"""

from typing import Any, Dict, Mapping, Optional


class SheetError(Exception):
    """Base class for all sheet errors.

    Attributes:
        message: Human-readable description
        error_code: Canonical error code (see ``ErrorCode``)
        error_type: Error category (see ``ErrorType``)
        remediation: Optional guidance for the caller
        details: Optional machine-readable context
    """

    error_code = "INTERNAL_ERROR"
    error_type = "internal"

    def __init__(
        self,
        message: str,
        *,
        remediation: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.details: Dict[str, Any] = dict(details) if details else {}


class ValidationError(SheetError):
    """Malformed seed input or mutation payload. Nothing was mutated."""

    error_code = "VALIDATION_ERROR"
    error_type = "validation"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        merged = dict(details) if details else {}
        if field and "field" not in merged:
            merged["field"] = field
        super().__init__(message, remediation=remediation, details=merged)
        self.field = field


class NotFoundError(SheetError):
    """An identifier did not resolve to an entity of the expected kind."""

    error_code = "NOT_FOUND"
    error_type = "not_found"

    def __init__(self, kind: str, identifier: str):
        super().__init__(
            f"{kind} '{identifier}' not found",
            remediation=f"Verify the {kind.lower()} ID exists.",
            details={"resource_type": kind, "resource_id": identifier},
        )
        self.kind = kind
        self.identifier = identifier


class PersistenceError(SheetError):
    """Reading or writing the durable sheet failed.

    When raised from a write, the in-memory sheet already holds the new
    state; only durability was lost.
    """

    error_code = "PERSISTENCE_ERROR"
    error_type = "internal"

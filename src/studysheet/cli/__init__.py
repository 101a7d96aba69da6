"""Studysheet CLI - command-line access to the study sheet.

All commands emit JSON response envelopes to stdout (errors to stderr)
for reliable parsing by scripts and coding assistants.
"""

from studysheet.cli.config import CLIContext, create_context
from studysheet.cli.logging import cli_command, get_cli_logger
from studysheet.cli.main import cli
from studysheet.cli.output import emit, emit_error, emit_sheet_error, emit_success
from studysheet.cli.registry import get_context, set_context

__all__ = [
    # Entry point
    "cli",
    # Context
    "CLIContext",
    "create_context",
    "get_context",
    "set_context",
    # Output
    "emit",
    "emit_error",
    "emit_sheet_error",
    "emit_success",
    # Logging
    "cli_command",
    "get_cli_logger",
]

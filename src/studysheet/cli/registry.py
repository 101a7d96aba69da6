"""Command registry for the studysheet CLI.

Centralized registration of all command groups.
"""

from typing import Any, Callable, Optional

import click

from studysheet.cli.config import CLIContext
from studysheet.core.errors import SheetError
from studysheet.core.store import SheetStore

# Module-level storage for CLI context (for testing)
_cli_context: Optional[CLIContext] = None


def set_context(ctx: Optional[CLIContext]) -> None:
    """Set the CLI context at module level.

    Primarily used for testing when not using Click's context.
    """
    global _cli_context
    _cli_context = ctx


def get_context(ctx: Optional[click.Context] = None) -> CLIContext:
    """Get CLI context from Click context or module-level storage.

    Raises:
        RuntimeError: If no context is available.
    """
    if ctx is not None:
        return ctx.obj["cli_context"]

    if _cli_context is not None:
        return _cli_context

    raise RuntimeError("No CLI context available. Call set_context() first.")


def register_all_commands(cli: click.Group) -> None:
    """Register all command groups with the CLI."""
    from studysheet.cli.commands import questions, sheet_group, subtopics, topics

    cli.add_command(sheet_group)
    cli.add_command(topics)
    cli.add_command(subtopics)
    cli.add_command(questions)

    @cli.command("version")
    @click.pass_context
    def version(ctx: click.Context) -> None:
        """Show CLI version information."""
        from studysheet.cli.output import emit

        cli_ctx = get_context(ctx)
        emit(
            {
                "version": cli_ctx.config.server_version,
                "name": "studysheet",
                "json_only": True,
                "state_path": str(cli_ctx.state_path),
                "seed_path": str(cli_ctx.seed_path),
            }
        )


def call_store(ctx: click.Context, operation: Callable[[SheetStore], Any]) -> Any:
    """Run ``operation`` on the context's store, emitting sheet errors.

    ``SheetError`` subclasses are emitted as error envelopes (exit code 1).
    """
    from studysheet.cli.output import emit_sheet_error

    try:
        return operation(get_context(ctx).store)
    except SheetError as exc:
        emit_sheet_error(exc)

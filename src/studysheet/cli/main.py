"""Studysheet CLI entry point.

JSON-only output for scripts and AI coding assistants.
"""

import click

from studysheet.cli.config import create_context
from studysheet.cli.registry import register_all_commands
from studysheet.core.logging_config import configure_logging


@click.group()
@click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False),
    help="Override the persisted state file path",
)
@click.option(
    "--seed",
    "seed_path",
    type=click.Path(dir_okay=False),
    help="Override the seed dataset path",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Emit human-readable logs to stderr at this level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    state_path: str | None,
    seed_path: str | None,
    log_level: str | None,
) -> None:
    """Studysheet - a hierarchical interview-prep question tracker.

    All commands output JSON for reliable parsing.
    """
    if log_level:
        configure_logging(level=log_level.upper(), format="human")
    ctx.ensure_object(dict)
    ctx.obj["cli_context"] = create_context(state_path=state_path, seed_path=seed_path)


# Register all command groups
register_all_commands(cli)


if __name__ == "__main__":
    cli()

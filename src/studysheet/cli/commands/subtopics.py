"""Subtopic management commands for the studysheet CLI."""

import click

from studysheet.cli.logging import cli_command
from studysheet.cli.output import emit_success
from studysheet.cli.registry import call_store


@click.group("subtopic")
def subtopics() -> None:
    """Subtopic management."""
    pass


@subtopics.command("add")
@click.argument("topic_id")
@click.argument("title")
@click.pass_context
@cli_command("subtopic-add")
def subtopic_add_cmd(ctx: click.Context, topic_id: str, title: str) -> None:
    """Append a subtopic titled TITLE to topic TOPIC_ID."""
    sheet = call_store(ctx, lambda store: store.create_subtopic(topic_id, title))
    emit_success(sheet.to_dict())


@subtopics.command("rename")
@click.argument("subtopic_id")
@click.argument("title")
@click.pass_context
@cli_command("subtopic-rename")
def subtopic_rename_cmd(ctx: click.Context, subtopic_id: str, title: str) -> None:
    """Rename subtopic SUBTOPIC_ID to TITLE."""
    sheet = call_store(ctx, lambda store: store.update_subtopic(subtopic_id, title))
    emit_success(sheet.to_dict())


@subtopics.command("remove")
@click.argument("subtopic_id")
@click.pass_context
@cli_command("subtopic-remove")
def subtopic_remove_cmd(ctx: click.Context, subtopic_id: str) -> None:
    """Delete subtopic SUBTOPIC_ID with all its questions."""
    sheet = call_store(ctx, lambda store: store.delete_subtopic(subtopic_id))
    emit_success(sheet.to_dict())

"""Topic management commands for the studysheet CLI."""

import click

from studysheet.cli.logging import cli_command
from studysheet.cli.output import emit_success
from studysheet.cli.registry import call_store


@click.group("topic")
def topics() -> None:
    """Topic management."""
    pass


@topics.command("add")
@click.argument("title")
@click.pass_context
@cli_command("topic-add")
def topic_add_cmd(ctx: click.Context, title: str) -> None:
    """Append a topic titled TITLE.

    Examples:
        studysheet topic add "Dynamic Programming"
    """
    sheet = call_store(ctx, lambda store: store.create_topic(title))
    emit_success(sheet.to_dict())


@topics.command("rename")
@click.argument("topic_id")
@click.argument("title")
@click.pass_context
@cli_command("topic-rename")
def topic_rename_cmd(ctx: click.Context, topic_id: str, title: str) -> None:
    """Rename topic TOPIC_ID to TITLE."""
    sheet = call_store(ctx, lambda store: store.update_topic(topic_id, title))
    emit_success(sheet.to_dict())


@topics.command("remove")
@click.argument("topic_id")
@click.pass_context
@cli_command("topic-remove")
def topic_remove_cmd(ctx: click.Context, topic_id: str) -> None:
    """Delete topic TOPIC_ID with all its subtopics and questions."""
    sheet = call_store(ctx, lambda store: store.delete_topic(topic_id))
    emit_success(sheet.to_dict())

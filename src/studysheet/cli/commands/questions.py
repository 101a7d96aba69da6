"""Question management commands for the studysheet CLI."""

from typing import Any, Callable, Dict, Optional, Tuple

import click

from studysheet.cli.logging import cli_command
from studysheet.cli.output import emit_success
from studysheet.cli.registry import call_store
from studysheet.core.models import DIFFICULTIES


def question_field_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the optional question field options shared by add/update."""
    options = [
        click.option("--difficulty", "-d", type=click.Choice(DIFFICULTIES), help="Difficulty level."),
        click.option("--source", "-s", help="Problem source (e.g. LeetCode)."),
        click.option("--notes", "-n", help="Free-form notes."),
        click.option("--youtube-url", help="Video walkthrough URL."),
        click.option("--problem-url", help="Problem statement URL."),
        click.option("--tag", "tags", multiple=True, help="Tag (repeatable; replaces existing tags)."),
        click.option("--solved/--unsolved", default=None, help="Mark solved or unsolved."),
        click.option("--starred/--unstarred", default=None, help="Star or unstar."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect_fields(
    *,
    title: Optional[str] = None,
    difficulty: Optional[str],
    source: Optional[str],
    notes: Optional[str],
    youtube_url: Optional[str],
    problem_url: Optional[str],
    tags: Tuple[str, ...],
    solved: Optional[bool],
    starred: Optional[bool],
) -> Dict[str, Any]:
    candidates = {
        "title": title,
        "difficulty": difficulty,
        "source": source,
        "notes": notes,
        "youtubeUrl": youtube_url,
        "problemUrl": problem_url,
        "tags": list(tags) if tags else None,
        "solved": solved,
        "starred": starred,
    }
    return {key: value for key, value in candidates.items() if value is not None}


@click.group("question")
def questions() -> None:
    """Question management."""
    pass


@questions.command("add")
@click.argument("subtopic_id")
@click.argument("title")
@question_field_options
@click.pass_context
@cli_command("question-add")
def question_add_cmd(ctx: click.Context, subtopic_id: str, title: str, **options: Any) -> None:
    """Append a question titled TITLE to subtopic SUBTOPIC_ID.

    Examples:
        studysheet question add SUB_ID "Two Sum" -d Easy -s LeetCode --tag array
    """
    fields = _collect_fields(title=title, **options)
    sheet = call_store(ctx, lambda store: store.create_question(subtopic_id, fields))
    emit_success(sheet.to_dict())


@questions.command("update")
@click.argument("question_id")
@click.option("--title", "-t", help="New title.")
@question_field_options
@click.pass_context
@cli_command("question-update")
def question_update_cmd(
    ctx: click.Context, question_id: str, title: Optional[str], **options: Any
) -> None:
    """Merge the given fields into question QUESTION_ID.

    Examples:
        studysheet question update Q_ID --solved
        studysheet question update Q_ID --notes "use two pointers" --starred
    """
    changes = _collect_fields(title=title, **options)
    sheet = call_store(ctx, lambda store: store.update_question(question_id, changes))
    emit_success(sheet.to_dict())


@questions.command("remove")
@click.argument("question_id")
@click.pass_context
@cli_command("question-remove")
def question_remove_cmd(ctx: click.Context, question_id: str) -> None:
    """Delete question QUESTION_ID."""
    sheet = call_store(ctx, lambda store: store.delete_question(question_id))
    emit_success(sheet.to_dict())

"""Whole-sheet commands for the studysheet CLI.

Read, export, import, reorder, search and summarize the sheet, plus
offline seed normalization and backup listing.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import click

from studysheet.cli.logging import cli_command, get_cli_logger
from studysheet.cli.output import emit_error, emit_sheet_error, emit_success
from studysheet.cli.registry import call_store, get_context
from studysheet.core.errors import SheetError
from studysheet.core.mutations import REORDER_TYPES
from studysheet.core.seed import load_seed_file
from studysheet.core.storage import list_backups, read_json

logger = get_cli_logger()


def _write_json(path: str, data: Dict[str, Any]) -> None:
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as exc:
        emit_error(
            f"Failed to write {target}: {exc}",
            code="PERSISTENCE_ERROR",
            error_type="internal",
            remediation="Check that the output directory is writable",
            details={"path": str(target)},
        )


@click.group("sheet")
def sheet_group() -> None:
    """Whole-sheet operations."""
    pass


@sheet_group.command("show")
@click.pass_context
@cli_command("sheet-show")
def sheet_show_cmd(ctx: click.Context) -> None:
    """Print the full sheet, seeding it on first use."""
    sheet = call_store(ctx, lambda store: store.get())
    emit_success(sheet.to_dict())


@sheet_group.command("export")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Write the exported sheet to this file instead of stdout.",
)
@click.pass_context
@cli_command("sheet-export")
def sheet_export_cmd(ctx: click.Context, output: Optional[str]) -> None:
    """Export the sheet in its canonical JSON form.

    Examples:
        studysheet sheet export
        studysheet sheet export --output backup.json
    """
    data = call_store(ctx, lambda store: store.export())
    if output:
        _write_json(output, data)
        logger.info("Exported sheet", path=output)
        emit_success({"path": output, "topics": len(data["topics"])})
        return
    emit_success(data)


@sheet_group.command("import")
@click.argument("file", type=click.Path(dir_okay=False))
@click.pass_context
@cli_command("sheet-import")
def sheet_import_cmd(ctx: click.Context, file: str) -> None:
    """Replace the whole sheet with the one in FILE.

    FILE must hold a canonical sheet (as produced by ``sheet export``).
    Missing identifiers are generated; duplicate identifiers are rejected.
    """
    try:
        data = read_json(file)
    except (OSError, json.JSONDecodeError) as exc:
        emit_error(
            f"Failed to read {file}: {exc}",
            code="VALIDATION_ERROR",
            error_type="validation",
            remediation="Provide a readable JSON file",
            details={"path": file},
        )
    sheet = call_store(ctx, lambda store: store.replace(data))
    emit_success(sheet.to_dict())


@sheet_group.command("reorder")
@click.argument("item_type", metavar="TYPE", type=click.Choice(REORDER_TYPES))
@click.argument("from_container")
@click.argument("from_index", type=int)
@click.argument("to_container")
@click.argument("to_index", type=int)
@click.option("--item-id", help="Expected ID of the item at FROM_INDEX.")
@click.pass_context
@cli_command("sheet-reorder")
def sheet_reorder_cmd(
    ctx: click.Context,
    item_type: str,
    from_container: str,
    from_index: int,
    to_container: str,
    to_index: int,
    item_id: Optional[str],
) -> None:
    """Move a topic, subtopic or question to a new position.

    Containers are the parent IDs (the topic for a subtopic, the subtopic
    for a question); for topic moves they are ignored.

    Examples:
        studysheet sheet reorder topic - 0 - 2
        studysheet sheet reorder question SUB_A 3 SUB_B 0 --item-id Q_ID
    """
    payload: Dict[str, Any] = {
        "type": item_type,
        "from": {"containerId": from_container, "index": from_index},
        "to": {"containerId": to_container, "index": to_index},
    }
    if item_id:
        payload["itemId"] = item_id
    sheet = call_store(ctx, lambda store: store.reorder(payload))
    emit_success(sheet.to_dict())


@sheet_group.command("search")
@click.argument("query", default="")
@click.pass_context
@cli_command("sheet-search")
def sheet_search_cmd(ctx: click.Context, query: str) -> None:
    """Show only questions whose title, source or difficulty match QUERY."""
    emit_success(call_store(ctx, lambda store: store.search(query)))


@sheet_group.command("progress")
@click.pass_context
@cli_command("sheet-progress")
def sheet_progress_cmd(ctx: click.Context) -> None:
    """Summarize solved/total counts overall and per topic."""
    emit_success(call_store(ctx, lambda store: store.progress()))


@sheet_group.command("normalize")
@click.argument("seed", type=click.Path(dir_okay=False))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Write the normalized sheet to this file.",
)
@cli_command("sheet-normalize")
def sheet_normalize_cmd(seed: str, output: Optional[str]) -> None:
    """Normalize a SEED file into the canonical sheet shape.

    Does not touch the persisted state.
    """
    try:
        sheet = load_seed_file(seed)
    except SheetError as exc:
        emit_sheet_error(exc)
    data = sheet.to_dict()
    if output:
        _write_json(output, data)
        emit_success({"path": output, "topics": len(data["topics"])})
        return
    emit_success(data)


@sheet_group.command("backups")
@click.pass_context
@cli_command("sheet-backups")
def sheet_backups_cmd(ctx: click.Context) -> None:
    """List timestamped backups of the state file, newest first."""
    state_path = get_context(ctx).state_path
    backups = list_backups(state_path)
    emit_success({
        "state_path": str(state_path),
        "backups": [str(p) for p in backups],
        "count": len(backups),
    })

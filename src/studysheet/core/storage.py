"""
JSON file persistence for study sheets.
Provides loading and saving of the sheet state file with atomic writes and backups.
"""

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from studysheet.core.errors import PersistenceError, ValidationError
from studysheet.core.models import Sheet

logger = logging.getLogger(__name__)

# Default retention policy for versioned backups
DEFAULT_MAX_BACKUPS = 10

BACKUPS_DIRNAME = ".backups"

PathLike = Union[str, Path]


def read_json(path: PathLike) -> Any:
    """Read and parse a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_sheet(path: PathLike) -> Optional[Sheet]:
    """
    Load the persisted sheet.

    The stored tree is trusted as-is: orders and progress are not
    recomputed here.

    Args:
        path: Path to the state file

    Returns:
        Sheet, or None if no state file exists

    Raises:
        PersistenceError: If the file exists but cannot be read or parsed
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        data = read_json(path)
    except (json.JSONDecodeError, OSError) as exc:
        raise PersistenceError(
            f"Failed to read sheet state {path}: {exc}",
            remediation="Fix or remove the state file to re-seed",
            details={"path": str(path)},
        ) from exc

    try:
        return Sheet.from_dict(data)
    except ValidationError as exc:
        raise PersistenceError(
            f"Sheet state {path} is invalid: {exc.message}",
            remediation="Fix or remove the state file to re-seed",
            details={"path": str(path), **exc.details},
        ) from exc


def backup_sheet(path: PathLike, max_backups: int = DEFAULT_MAX_BACKUPS) -> Optional[Path]:
    """
    Create a versioned backup of the state file.

    Creates timestamped backups in a ``.backups/`` directory next to the
    state file and keeps a ``latest.json`` copy of the most recent one.

    Directory structure:
        .backups/
          ├── 2025-12-26T18-20-13.456789.json
          ├── 2025-12-26T18-30-45.123456.json
          └── latest.json

    Args:
        path: Path to the state file
        max_backups: Maximum number of versioned backups to retain.
                     Set to 0 for unlimited backups.

    Returns:
        Path to backup file if created, None otherwise
    """
    path = Path(path)
    if not path.exists():
        return None

    backups_dir = path.parent / BACKUPS_DIRNAME
    now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    micros = now.strftime("%f")
    backup_file = backups_dir / f"{timestamp}.{micros}.json"

    try:
        backups_dir.mkdir(parents=True, exist_ok=True)
        suffix = 1
        while backup_file.exists():
            backup_file = backups_dir / f"{timestamp}.{micros}-{suffix}.json"
            suffix += 1
        shutil.copy2(path, backup_file)
        shutil.copy2(backup_file, backups_dir / "latest.json")

        if max_backups > 0:
            _apply_backup_retention(backups_dir, max_backups)

        return backup_file
    except (IOError, OSError) as exc:
        logger.warning("Failed to back up %s: %s", path, exc)
        return None


def _apply_backup_retention(backups_dir: Path, max_backups: int) -> int:
    """
    Remove the oldest backups exceeding the limit.

    Returns:
        Number of backups deleted
    """
    backup_files = sorted(
        [
            f for f in backups_dir.glob("*.json")
            if f.name != "latest.json" and f.is_file()
        ],
        key=lambda p: p.name,
    )

    deleted_count = 0
    while len(backup_files) > max_backups:
        oldest = backup_files.pop(0)
        try:
            oldest.unlink()
            deleted_count += 1
        except (IOError, OSError):
            pass  # Best effort deletion

    return deleted_count


def list_backups(path: PathLike) -> list:
    """List timestamped backups of a state file, newest first."""
    backups_dir = Path(path).parent / BACKUPS_DIRNAME
    if not backups_dir.is_dir():
        return []
    return sorted(
        (f for f in backups_dir.glob("*.json") if f.name != "latest.json"),
        key=lambda p: p.name,
        reverse=True,
    )


def save_sheet(
    path: PathLike,
    sheet: Sheet,
    backup: bool = True,
    max_backups: int = DEFAULT_MAX_BACKUPS,
) -> Path:
    """
    Save the sheet with an atomic write and optional backup.

    The complete snapshot is written to a temp file which then replaces
    the state file, so readers never observe a half-written tree.

    Args:
        path: Path to the state file (parent directories are created)
        sheet: Sheet to write
        backup: Back up the previous state file first
        max_backups: Backup retention limit

    Returns:
        Path written

    Raises:
        PersistenceError: If the write fails
    """
    path = Path(path)
    temp_file = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if backup:
            backup_sheet(path, max_backups)
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(sheet.to_dict(), f, indent=2)
        temp_file.replace(path)
    except (IOError, OSError) as exc:
        if temp_file.exists():
            temp_file.unlink()
        raise PersistenceError(
            f"Failed to write sheet state {path}: {exc}",
            remediation="Check that the state directory is writable",
            details={"path": str(path)},
        ) from exc

    logger.debug("Saved sheet state to %s", path)
    return path

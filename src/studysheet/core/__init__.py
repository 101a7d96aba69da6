"""Core sheet model and operations for studysheet."""

from studysheet.core.errors import (
    NotFoundError,
    PersistenceError,
    SheetError,
    ValidationError,
)

from studysheet.core.models import (
    Progress,
    Question,
    Sheet,
    SubTopic,
    Topic,
)

from studysheet.core.progress import (
    get_progress_summary,
    overall_progress,
    recalculate_progress,
)

from studysheet.core.seed import load_seed_file, normalize_seed

from studysheet.core.storage import load_sheet, save_sheet

from studysheet.core.store import SheetStore, get_store, set_store

__all__ = [
    "NotFoundError",
    "PersistenceError",
    "SheetError",
    "ValidationError",
    "Progress",
    "Question",
    "Sheet",
    "SubTopic",
    "Topic",
    "get_progress_summary",
    "overall_progress",
    "recalculate_progress",
    "load_seed_file",
    "normalize_seed",
    "load_sheet",
    "save_sheet",
    "SheetStore",
    "get_store",
    "set_store",
]

"""
In-process owner of the live study sheet.

``SheetStore`` holds the single canonical Sheet, initializes it lazily
(persisted state first, otherwise the normalized seed), and persists after
every mutation. One-time initialization is guarded by a lock so concurrent
first callers never seed twice; mutations are serialized by a second lock
so a write always transcribes a fully updated tree.

Usage:
    from studysheet.core.store import get_store

    store = get_store()
    sheet = store.create_topic("Arrays")
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from studysheet.core import mutations
from studysheet.core.errors import ValidationError
from studysheet.core.models import Sheet
from studysheet.core.progress import get_progress_summary, recalculate_progress
from studysheet.core.search import filter_questions
from studysheet.core.seed import load_seed_file
from studysheet.core.storage import DEFAULT_MAX_BACKUPS, load_sheet, save_sheet

logger = logging.getLogger(__name__)


class SheetStore:
    """Holds the live sheet and persists it after each mutation."""

    def __init__(
        self,
        state_path: Union[str, Path],
        seed_path: Union[str, Path],
        *,
        backups: bool = True,
        max_backups: int = DEFAULT_MAX_BACKUPS,
        allow_cross_topic_subtopics: bool = False,
    ):
        self.state_path = Path(state_path)
        self.seed_path = Path(seed_path)
        self.backups = backups
        self.max_backups = max_backups
        self.allow_cross_topic_subtopics = allow_cross_topic_subtopics
        self._sheet: Optional[Sheet] = None
        self._init_lock = threading.Lock()
        self._mutation_lock = threading.RLock()

    @property
    def initialized(self) -> bool:
        return self._sheet is not None

    # -- lifecycle ---------------------------------------------------------

    def load(self) -> Sheet:
        """
        Initialize the live sheet once.

        Persisted state is trusted as-is. Without it, the seed file is
        normalized and written; a seed that fails normalization writes
        nothing.

        Raises:
            ValidationError: If the seed is missing or invalid
            PersistenceError: If state cannot be read or the seed cannot be saved
        """
        with self._init_lock:
            if self._sheet is not None:
                return self._sheet

            sheet = load_sheet(self.state_path)
            if sheet is not None:
                logger.info("Loaded sheet state from %s", self.state_path)
            else:
                sheet = load_seed_file(self.seed_path)
                self._write(sheet)
                logger.info(
                    "Seeded sheet from %s (%d topics)", self.seed_path, len(sheet.topics)
                )
            self._sheet = sheet
            return sheet

    def get(self) -> Sheet:
        """Return the live sheet, loading it on first access."""
        sheet = self._sheet
        if sheet is None:
            sheet = self.load()
        return sheet

    def _write(self, sheet: Sheet) -> None:
        save_sheet(
            self.state_path, sheet, backup=self.backups, max_backups=self.max_backups
        )

    def persist(self) -> Sheet:
        """
        Recompute derived fields and write the live sheet.

        Raises:
            PersistenceError: If the write fails; the in-memory sheet keeps
                the new state
        """
        sheet = recalculate_progress(self.get())
        self._write(sheet)
        logger.debug("Persisted sheet (updatedAt=%s)", sheet.updated_at)
        return sheet

    def replace(self, sheet: Union[Sheet, Mapping[str, Any]]) -> Sheet:
        """
        Replace the live sheet unconditionally (full import).

        Args:
            sheet: Sheet or its canonical dict form; missing identifiers
                are generated

        Raises:
            ValidationError: If the payload is not a valid sheet
            PersistenceError: If the write fails
        """
        if not isinstance(sheet, Sheet):
            sheet = Sheet.from_dict(sheet)
        with self._mutation_lock:
            # mark initialized so a later get() never re-seeds over the import
            with self._init_lock:
                self._sheet = recalculate_progress(sheet)
            self._write(self._sheet)
        logger.info("Imported sheet with %d topics", len(self._sheet.topics))
        return self._sheet

    # -- mutations ---------------------------------------------------------

    def _mutate(self, operation: Callable[[Sheet], Any]) -> Sheet:
        with self._mutation_lock:
            operation(self.get())
            return self.persist()

    def create_topic(self, title: Any) -> Sheet:
        return self._mutate(lambda s: mutations.add_topic(s, title))

    def update_topic(self, topic_id: str, title: Optional[Any] = None) -> Sheet:
        return self._mutate(lambda s: mutations.update_topic(s, topic_id, title))

    def delete_topic(self, topic_id: str) -> Sheet:
        return self._mutate(lambda s: mutations.remove_topic(s, topic_id))

    def create_subtopic(self, topic_id: str, title: Any) -> Sheet:
        return self._mutate(lambda s: mutations.add_subtopic(s, topic_id, title))

    def update_subtopic(self, subtopic_id: str, title: Optional[Any] = None) -> Sheet:
        return self._mutate(lambda s: mutations.update_subtopic(s, subtopic_id, title))

    def delete_subtopic(self, subtopic_id: str) -> Sheet:
        return self._mutate(lambda s: mutations.remove_subtopic(s, subtopic_id))

    def create_question(self, subtopic_id: str, fields: Mapping[str, Any]) -> Sheet:
        return self._mutate(lambda s: mutations.add_question(s, subtopic_id, fields))

    def update_question(self, question_id: str, changes: Mapping[str, Any]) -> Sheet:
        return self._mutate(lambda s: mutations.update_question(s, question_id, changes))

    def delete_question(self, question_id: str) -> Sheet:
        return self._mutate(lambda s: mutations.remove_question(s, question_id))

    def reorder(self, payload: Mapping[str, Any]) -> Sheet:
        return self._mutate(
            lambda s: mutations.reorder(
                s, payload, allow_cross_topic=self.allow_cross_topic_subtopics
            )
        )

    # -- queries -----------------------------------------------------------

    def export(self) -> Dict[str, Any]:
        return self.get().to_dict()

    def search(self, query: str) -> Dict[str, Any]:
        if not isinstance(query, str):
            raise ValidationError("'query' must be a string", field="query")
        return filter_questions(self.get(), query)

    def progress(self) -> Dict[str, Any]:
        return get_progress_summary(self.get())


# Global store instance
_store: Optional[SheetStore] = None
_store_lock = threading.Lock()


def create_store(config: Optional[Any] = None) -> SheetStore:
    """Build a store from server configuration."""
    if config is None:
        from studysheet.config import get_config

        config = get_config()
    return SheetStore(
        config.state_path,
        config.seed_path,
        backups=config.backups,
        max_backups=config.max_backups,
        allow_cross_topic_subtopics=config.allow_cross_topic_subtopics,
    )


def get_store() -> SheetStore:
    """Get the global store instance."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = create_store()
    return _store


def set_store(store: Optional[SheetStore]) -> None:
    """Set (or clear, with None) the global store instance."""
    global _store
    with _store_lock:
        _store = store

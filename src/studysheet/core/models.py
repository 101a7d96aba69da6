"""
Entity model for study sheets.

A sheet is an ordered forest: Sheet -> Topic -> SubTopic -> Question.
Each entity is a dataclass that owns its children directly; JSON
conversion uses the camelCase keys the sheet is stored and exchanged in.

Progress values and ``order`` indices are derived data. They are carried
through (de)serialization untouched and recomputed by
``studysheet.core.progress.recalculate_progress``.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from studysheet.core.errors import ValidationError

DIFFICULTIES = ("Basic", "Easy", "Medium", "Hard")
DEFAULT_DIFFICULTY = "Basic"
DEFAULT_SOURCE = "TUF"
SCHEMA_VERSION = 1

# Editable question fields: wire key -> attribute name
QUESTION_FIELDS = {
    "title": "title",
    "source": "source",
    "difficulty": "difficulty",
    "solved": "solved",
    "starred": "starred",
    "notes": "notes",
    "youtubeUrl": "youtube_url",
    "problemUrl": "problem_url",
    "tags": "tags",
}
_FIELD_ALIASES = {"youtube_url": "youtubeUrl", "problem_url": "problemUrl"}
_STRING_FIELDS = ("source", "notes", "youtubeUrl", "problemUrl")
_BOOL_FIELDS = ("solved", "starred")


def new_id() -> str:
    """Generate an opaque, globally unique entity identifier."""
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Field validation helpers (shared with seed normalization and mutations)
# ---------------------------------------------------------------------------


def require_title(value: Any, field_name: str = "title") -> str:
    """Return ``value`` if it is a non-blank string, else raise."""
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string",
            field=field_name,
            details={"received_type": type(value).__name__},
        )
    if not value.strip():
        raise ValidationError(f"'{field_name}' must not be empty", field=field_name)
    return value


def validate_difficulty(value: Any, field_name: str = "difficulty") -> str:
    if value not in DIFFICULTIES:
        raise ValidationError(
            f"Invalid difficulty {value!r}. Must be one of: {', '.join(DIFFICULTIES)}",
            field=field_name,
            details={"allowed": list(DIFFICULTIES)},
        )
    return value


def normalize_tags(value: Any, field_name: str = "tags") -> List[str]:
    """Validate a tag list and drop duplicates, keeping first occurrence."""
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise ValidationError(
            f"'{field_name}' must be a list of strings", field=field_name
        )
    return list(dict.fromkeys(value))


def parse_question_fields(
    fields: Mapping[str, Any], *, partial: bool
) -> Dict[str, Any]:
    """Validate a question payload.

    Args:
        fields: Wire-format fields (camelCase; ``youtube_url``/``problem_url``
            are accepted as aliases)
        partial: If False, ``title`` is required (create); if True, only the
            supplied fields are validated (update)

    Returns:
        Mapping of attribute name -> validated value

    Raises:
        ValidationError: On unknown/read-only fields or wrong types
    """
    if not isinstance(fields, Mapping):
        raise ValidationError("Question fields must be an object")

    parsed: Dict[str, Any] = {}
    for raw_key, value in fields.items():
        key = _FIELD_ALIASES.get(raw_key, raw_key)
        if key in ("id", "order"):
            raise ValidationError(f"'{key}' cannot be set directly", field=key)
        if key not in QUESTION_FIELDS:
            raise ValidationError(
                f"Unknown question field '{raw_key}'",
                field=raw_key,
                details={"allowed": sorted(QUESTION_FIELDS)},
            )
        if key == "title":
            value = require_title(value)
        elif key == "difficulty":
            value = validate_difficulty(value)
        elif key == "tags":
            value = normalize_tags(value)
        elif key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ValidationError(f"'{key}' must be a boolean", field=key)
        elif key in _STRING_FIELDS:
            if not isinstance(value, str):
                raise ValidationError(f"'{key}' must be a string", field=key)
        parsed[QUESTION_FIELDS[key]] = value

    if not partial and "title" not in parsed:
        raise ValidationError("'title' is required", field="title")
    return parsed


def _optional(data: Mapping[str, Any], key: str, expected: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise ValidationError(
            f"'{key}' must be of type {expected.__name__}",
            field=key,
            details={"received_type": type(value).__name__},
        )
    return value


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{what} must be an object")
    return value


def _require_list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list", field=key)
    return value


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass
class Progress:
    """Derived ``{solved, total}`` counter."""

    solved: int = 0
    total: int = 0

    def __add__(self, other: "Progress") -> "Progress":
        return Progress(self.solved + other.solved, self.total + other.total)

    def to_dict(self) -> Dict[str, int]:
        return {"solved": self.solved, "total": self.total}

    @classmethod
    def from_dict(cls, data: Any) -> "Progress":
        if not isinstance(data, Mapping):
            return cls()
        solved = data.get("solved", 0)
        total = data.get("total", 0)
        return cls(
            solved=solved if isinstance(solved, int) else 0,
            total=total if isinstance(total, int) else 0,
        )


@dataclass
class Question:
    title: str
    id: str = field(default_factory=new_id)
    order: int = 0
    source: str = DEFAULT_SOURCE
    difficulty: str = DEFAULT_DIFFICULTY
    solved: bool = False
    starred: bool = False
    notes: str = ""
    youtube_url: str = ""
    problem_url: str = ""
    tags: List[str] = field(default_factory=list)

    def apply(self, changes: Mapping[str, Any]) -> None:
        """Assign already-validated attribute values."""
        for attr, value in changes.items():
            setattr(self, attr, list(value) if attr == "tags" else value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "order": self.order,
            "source": self.source,
            "difficulty": self.difficulty,
            "solved": self.solved,
            "starred": self.starred,
            "notes": self.notes,
            "youtubeUrl": self.youtube_url,
            "problemUrl": self.problem_url,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Question":
        data = _require_mapping(data, "Question")
        difficulty = data.get("difficulty")
        tags = data.get("tags")
        return cls(
            id=_optional(data, "id", str, None) or new_id(),
            title=require_title(data.get("title")),
            order=_optional(data, "order", int, 0),
            source=_optional(data, "source", str, DEFAULT_SOURCE),
            difficulty=(
                validate_difficulty(difficulty)
                if difficulty is not None
                else DEFAULT_DIFFICULTY
            ),
            solved=_optional(data, "solved", bool, False),
            starred=_optional(data, "starred", bool, False),
            notes=_optional(data, "notes", str, ""),
            youtube_url=_optional(data, "youtubeUrl", str, ""),
            problem_url=_optional(data, "problemUrl", str, ""),
            tags=normalize_tags(tags) if tags is not None else [],
        )


@dataclass
class SubTopic:
    title: str
    id: str = field(default_factory=new_id)
    order: int = 0
    progress: Progress = field(default_factory=Progress)
    questions: List[Question] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "order": self.order,
            "progress": self.progress.to_dict(),
            "questions": [q.to_dict() for q in self.questions],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "SubTopic":
        data = _require_mapping(data, "SubTopic")
        return cls(
            id=_optional(data, "id", str, None) or new_id(),
            title=require_title(data.get("title")),
            order=_optional(data, "order", int, 0),
            progress=Progress.from_dict(data.get("progress")),
            questions=[Question.from_dict(q) for q in _require_list(data, "questions")],
        )


@dataclass
class Topic:
    title: str
    id: str = field(default_factory=new_id)
    order: int = 0
    progress: Progress = field(default_factory=Progress)
    sub_topics: List[SubTopic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "order": self.order,
            "progress": self.progress.to_dict(),
            "subTopics": [s.to_dict() for s in self.sub_topics],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Topic":
        data = _require_mapping(data, "Topic")
        return cls(
            id=_optional(data, "id", str, None) or new_id(),
            title=require_title(data.get("title")),
            order=_optional(data, "order", int, 0),
            progress=Progress.from_dict(data.get("progress")),
            sub_topics=[SubTopic.from_dict(s) for s in _require_list(data, "subTopics")],
        )


@dataclass
class Sheet:
    """Aggregate root. The state store owns exactly one live instance."""

    topics: List[Topic] = field(default_factory=list)
    updated_at: str = ""
    version: int = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topics": [t.to_dict() for t in self.topics],
            "updatedAt": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Sheet":
        """Build a sheet from its canonical dict form.

        Missing identifiers are generated and missing optional fields get
        their defaults. ``order`` and ``progress`` are taken as given.

        Raises:
            ValidationError: On wrong shapes/types or duplicate identifiers
        """
        data = _require_mapping(data, "Sheet")
        if "topics" not in data:
            raise ValidationError("Sheet is missing 'topics'", field="topics")
        sheet = cls(
            topics=[Topic.from_dict(t) for t in _require_list(data, "topics")],
            updated_at=_optional(data, "updatedAt", str, ""),
            version=_optional(data, "version", int, SCHEMA_VERSION),
        )
        ensure_unique_ids(sheet)
        return sheet

    # -- lookups -----------------------------------------------------------

    def iter_subtopics(self) -> Iterator[Tuple[Topic, SubTopic]]:
        for topic in self.topics:
            for sub_topic in topic.sub_topics:
                yield topic, sub_topic

    def iter_questions(self) -> Iterator[Tuple[SubTopic, Question]]:
        for _, sub_topic in self.iter_subtopics():
            for question in sub_topic.questions:
                yield sub_topic, question

    def find_topic(self, topic_id: str) -> Optional[Topic]:
        return next((t for t in self.topics if t.id == topic_id), None)

    def find_subtopic(self, subtopic_id: str) -> Optional[Tuple[Topic, SubTopic]]:
        return next(
            ((t, s) for t, s in self.iter_subtopics() if s.id == subtopic_id), None
        )

    def find_question(self, question_id: str) -> Optional[Tuple[SubTopic, Question]]:
        return next(
            ((s, q) for s, q in self.iter_questions() if q.id == question_id), None
        )


def iter_ids(sheet: Sheet) -> Iterator[str]:
    for topic in sheet.topics:
        yield topic.id
        for sub_topic in topic.sub_topics:
            yield sub_topic.id
            for question in sub_topic.questions:
                yield question.id


def ensure_unique_ids(sheet: Sheet) -> None:
    seen = set()
    duplicates = []
    for entity_id in iter_ids(sheet):
        if entity_id in seen:
            duplicates.append(entity_id)
        seen.add(entity_id)
    if duplicates:
        raise ValidationError(
            f"Duplicate identifiers in sheet: {', '.join(sorted(set(duplicates)))}",
            field="id",
            details={"duplicates": sorted(set(duplicates))},
        )

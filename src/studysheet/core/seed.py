"""
Seed normalization for study sheets.

Reconciles the external JSON shapes a sheet can be seeded from into the
canonical Sheet model. Recognized shapes, probed in order:

1. hierarchical  - ``{"topics": [{"title", "subTopics": [{"title", "questions": [...]}]}]}``
2. vendor export - ``{"data": [rows]}`` or ``{"data": {"questions": [rows], ...}}``
3. flat rows     - ``[rows]``

Rows carry ``topic``/``subTopic`` labels plus question fields. Vendor rows
name their fields differently (``isSolved``, ``resource``, a nested
``questionId`` object holding platform/difficulty/link), so each question
field is resolved by probing an ordered list of accessors.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from studysheet.core.errors import ValidationError
from studysheet.core.models import (
    DEFAULT_DIFFICULTY,
    DEFAULT_SOURCE,
    DIFFICULTIES,
    Question,
    Sheet,
    SubTopic,
    Topic,
    parse_question_fields,
    require_title,
    validate_difficulty,
)
from studysheet.core.progress import recalculate_progress

logger = logging.getLogger(__name__)

UNTITLED_TOPIC = "Untitled Topic"
UNTITLED_SUBTOPIC = "Untitled Subtopic"
UNTITLED_QUESTION = "Untitled"

Accessor = Callable[[Mapping[str, Any]], Any]

# Top-level row fields that must carry the right type when present
_ROW_STRING_FIELDS = ("topic", "subTopic", "title", "source", "youtubeUrl", "notes")
_ROW_BOOL_FIELDS = ("solved", "starred")


def _key(name: str) -> Accessor:
    return lambda row: row.get(name)


def _nested(name: str) -> Accessor:
    def accessor(row: Mapping[str, Any]) -> Any:
        secondary = row.get("questionId")
        if isinstance(secondary, Mapping):
            return secondary.get(name)
        return None

    return accessor


# Probe order per question field; first usable value wins
TITLE_PROBES: Sequence[Accessor] = (_key("title"), _nested("name"), _nested("slug"))
SOURCE_PROBES: Sequence[Accessor] = (_key("source"), _nested("platform"))
DIFFICULTY_PROBES: Sequence[Accessor] = (_key("difficulty"), _nested("difficulty"))
YOUTUBE_PROBES: Sequence[Accessor] = (_key("youtubeUrl"), _key("resource"))
PROBLEM_URL_PROBES: Sequence[Accessor] = (
    _key("problemUrl"),
    _key("link"),
    _key("url"),
    _key("leetcodeUrl"),
    _key("questionUrl"),
    _key("questionLink"),
    _nested("link"),
    _nested("url"),
    _nested("questionLink"),
    _nested("problemUrl"),
)
NOTES_PROBES: Sequence[Accessor] = (_key("notes"), _nested("description"))
SOLVED_PROBES: Sequence[Accessor] = (_key("solved"), _key("isSolved"))
STARRED_PROBES: Sequence[Accessor] = (_key("starred"), _key("isStarred"))
TAGS_PROBES: Sequence[Accessor] = (_key("tags"), _nested("topics"))


def probe_string(row: Mapping[str, Any], probes: Sequence[Accessor], default: str) -> str:
    """Return the first non-empty string produced by ``probes``."""
    for probe in probes:
        value = probe(row)
        if isinstance(value, str) and value:
            return value
    return default


def probe_bool(row: Mapping[str, Any], probes: Sequence[Accessor], default: bool) -> bool:
    """Return the first boolean produced by ``probes``."""
    for probe in probes:
        value = probe(row)
        if isinstance(value, bool):
            return value
    return default


def probe_tags(row: Mapping[str, Any], probes: Sequence[Accessor]) -> List[str]:
    """Return the first list produced by ``probes``, keeping only strings."""
    for probe in probes:
        value = probe(row)
        if isinstance(value, list):
            return list(dict.fromkeys(t for t in value if isinstance(t, str)))
    return []


def probe_difficulty(row: Mapping[str, Any], probes: Sequence[Accessor]) -> str:
    """Return the first recognized difficulty, falling back to Basic."""
    for probe in probes:
        value = probe(row)
        if value is None:
            continue
        return value if value in DIFFICULTIES else DEFAULT_DIFFICULTY
    return DEFAULT_DIFFICULTY


# ---------------------------------------------------------------------------
# Shape detection
# ---------------------------------------------------------------------------


def _is_hierarchical(raw: Any) -> bool:
    return isinstance(raw, Mapping) and isinstance(raw.get("topics"), list)


def _vendor_rows(raw: Any) -> Optional[List[Any]]:
    if not isinstance(raw, Mapping) or "data" not in raw:
        return None
    data = raw["data"]
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping) and isinstance(data.get("questions"), list):
        return data["questions"]
    return None


def detect_shape(raw: Any) -> Tuple[str, Any]:
    """
    Identify which recognized shape ``raw`` has.

    Returns:
        Tuple of (shape_name, payload) where payload is the raw object for
        ``hierarchical`` and the row list for ``vendor``/``rows``

    Raises:
        ValidationError: If no shape matches
    """
    if _is_hierarchical(raw):
        return "hierarchical", raw
    rows = _vendor_rows(raw)
    if rows is not None:
        return "vendor", rows
    if isinstance(raw, list):
        return "rows", raw

    if isinstance(raw, Mapping):
        received = sorted(str(k) for k in raw.keys())
    else:
        received = type(raw).__name__
    raise ValidationError(
        "Unrecognized seed shape",
        remediation=(
            "Provide {topics: [...]}, {data: [...]}, {data: {questions: [...]}}, "
            "or a list of rows"
        ),
        details={"received": received},
    )


# ---------------------------------------------------------------------------
# Shape parsers
# ---------------------------------------------------------------------------


def _hierarchical_question(data: Any, path: str) -> Question:
    if not isinstance(data, Mapping):
        raise ValidationError(f"{path} must be an object", field=path)
    fields: Dict[str, Any] = {}
    for key in ("title", "source", "difficulty", "solved", "starred",
                "notes", "youtubeUrl", "problemUrl", "tags"):
        if data.get(key) is not None:
            fields[key] = data[key]
    try:
        parsed = parse_question_fields(fields, partial=False)
    except ValidationError as exc:
        raise ValidationError(
            f"{path}: {exc.message}",
            field=f"{path}.{exc.field}" if exc.field else path,
        ) from exc
    return Question(**parsed)


def _titled(data: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(f"{path} must be an object", field=path)
    require_title(data.get("title"), f"{path}.title")
    return data


def _children(data: Mapping[str, Any], key: str, path: str) -> List[Any]:
    value = data.get(key)
    if not isinstance(value, list):
        raise ValidationError(f"{path}.{key} must be a list", field=f"{path}.{key}")
    return value


def parse_hierarchical(raw: Mapping[str, Any]) -> List[Topic]:
    topics = []
    for t_index, topic_data in enumerate(raw["topics"]):
        t_path = f"topics[{t_index}]"
        topic_data = _titled(topic_data, t_path)
        topic = Topic(title=topic_data["title"])
        for s_index, sub_data in enumerate(_children(topic_data, "subTopics", t_path)):
            s_path = f"{t_path}.subTopics[{s_index}]"
            sub_data = _titled(sub_data, s_path)
            sub_topic = SubTopic(title=sub_data["title"])
            for q_index, q_data in enumerate(_children(sub_data, "questions", s_path)):
                sub_topic.questions.append(
                    _hierarchical_question(q_data, f"{s_path}.questions[{q_index}]")
                )
            topic.sub_topics.append(sub_topic)
        topics.append(topic)
    return topics


def _check_row_types(row: Any, index: int) -> Mapping[str, Any]:
    path = f"rows[{index}]"
    if not isinstance(row, Mapping):
        raise ValidationError(f"{path} must be an object", field=path)
    for key in _ROW_STRING_FIELDS:
        if key in row and row[key] is not None and not isinstance(row[key], str):
            raise ValidationError(f"{path}.{key} must be a string", field=f"{path}.{key}")
    for key in _ROW_BOOL_FIELDS:
        if key in row and row[key] is not None and not isinstance(row[key], bool):
            raise ValidationError(f"{path}.{key} must be a boolean", field=f"{path}.{key}")
    if row.get("difficulty") is not None:
        validate_difficulty(row["difficulty"], f"{path}.difficulty")
    return row


def row_to_question(row: Mapping[str, Any]) -> Question:
    """Map a flat or vendor row onto a Question by field probing."""
    return Question(
        title=probe_string(row, TITLE_PROBES, UNTITLED_QUESTION),
        source=probe_string(row, SOURCE_PROBES, DEFAULT_SOURCE),
        difficulty=probe_difficulty(row, DIFFICULTY_PROBES),
        youtube_url=probe_string(row, YOUTUBE_PROBES, ""),
        problem_url=probe_string(row, PROBLEM_URL_PROBES, ""),
        notes=probe_string(row, NOTES_PROBES, ""),
        solved=probe_bool(row, SOLVED_PROBES, False),
        starred=probe_bool(row, STARRED_PROBES, False),
        tags=probe_tags(row, TAGS_PROBES),
    )


def parse_rows(rows: List[Any]) -> List[Topic]:
    """Group rows by (topic, subTopic) label, preserving first-seen order."""
    grouped: Dict[str, Dict[str, List[Question]]] = {}
    for index, row in enumerate(rows):
        row = _check_row_types(row, index)
        topic_label = probe_string(row, (_key("topic"),), UNTITLED_TOPIC)
        sub_label = probe_string(row, (_key("subTopic"),), UNTITLED_SUBTOPIC)
        grouped.setdefault(topic_label, {}).setdefault(sub_label, []).append(
            row_to_question(row)
        )

    return [
        Topic(
            title=topic_label,
            sub_topics=[
                SubTopic(title=sub_label, questions=questions)
                for sub_label, questions in sub_map.items()
            ],
        )
        for topic_label, sub_map in grouped.items()
    ]


def normalize_seed(raw: Any) -> Sheet:
    """
    Normalize any recognized seed shape into a canonical Sheet.

    Every entity gets a fresh identifier; orders, progress and
    ``updatedAt`` are computed.

    Args:
        raw: Parsed JSON value

    Returns:
        Canonical Sheet

    Raises:
        ValidationError: On unrecognized shape or invalid required fields
    """
    shape, payload = detect_shape(raw)
    if shape == "hierarchical":
        topics = parse_hierarchical(payload)
    else:
        topics = parse_rows(payload)

    sheet = recalculate_progress(Sheet(topics=topics))
    logger.debug(
        "Normalized %s seed: %d topics, %d questions",
        shape,
        len(sheet.topics),
        sum(1 for _ in sheet.iter_questions()),
    )
    return sheet


def load_seed_file(path: Union[str, Path]) -> Sheet:
    """
    Read a seed JSON file and normalize it.

    Raises:
        ValidationError: If the file cannot be read, is not valid JSON, or
            does not normalize
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as exc:
        raise ValidationError(
            f"Seed file not found: {path}",
            field="seed_path",
            remediation="Set storage.seed_path or STUDYSHEET_SEED_PATH",
        ) from exc
    except (json.JSONDecodeError, OSError) as exc:
        raise ValidationError(f"Invalid seed file {path}: {exc}", field="seed_path") from exc
    return normalize_seed(raw)

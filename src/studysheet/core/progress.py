"""
Progress calculation utilities for study sheets.
Provides hierarchical progress recalculation and order renumbering.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from studysheet.core.models import Progress, Question, Sheet


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a UTC instant as ISO-8601 with a trailing ``Z``."""
    moment = moment or datetime.now(timezone.utc)
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_timestamp(previous: str = "") -> str:
    """
    Return a timestamp strictly later than ``previous``.

    Uses the wall clock, bumped by one microsecond when the clock has not
    moved past the previous stamp.

    Args:
        previous: Prior ``updatedAt`` value (may be empty or unparseable)

    Returns:
        ISO-8601 UTC timestamp string
    """
    now = datetime.now(timezone.utc)
    last = _parse_timestamp(previous)
    if last is not None and now <= last:
        now = last + timedelta(microseconds=1)
    return utc_timestamp(now)


def compute_progress(questions: Iterable[Question]) -> Progress:
    """
    Count solved and total questions.

    Args:
        questions: Questions to count

    Returns:
        Progress for the given questions
    """
    solved = 0
    total = 0
    for question in questions:
        total += 1
        if question.solved:
            solved += 1
    return Progress(solved=solved, total=total)


def recalculate_progress(sheet: Sheet) -> Sheet:
    """
    Renumber orders and recalculate progress for the whole sheet.

    Modifies sheet in-place: every ``order`` is set to its array position,
    every SubTopic's progress is recounted from its questions and every
    Topic's progress is the sum over its SubTopics. ``updated_at`` is
    advanced monotonically.

    Args:
        sheet: Sheet to normalize

    Returns:
        The same sheet (for convenience/chaining)
    """
    for topic_index, topic in enumerate(sheet.topics):
        topic.order = topic_index
        topic_progress = Progress()
        for sub_index, sub_topic in enumerate(topic.sub_topics):
            sub_topic.order = sub_index
            for question_index, question in enumerate(sub_topic.questions):
                question.order = question_index
            sub_topic.progress = compute_progress(sub_topic.questions)
            topic_progress = topic_progress + sub_topic.progress
        topic.progress = topic_progress

    sheet.updated_at = next_timestamp(sheet.updated_at)
    return sheet


def overall_progress(sheet: Sheet) -> Progress:
    """Sum of every topic's progress."""
    total = Progress()
    for topic in sheet.topics:
        total = total + topic.progress
    return total


def _percentage(progress: Progress) -> int:
    return int(progress.solved / progress.total * 100) if progress.total > 0 else 0


def get_progress_summary(sheet: Sheet) -> Dict[str, Any]:
    """
    Get a progress summary for the sheet.

    Args:
        sheet: Sheet to summarize (progress is recounted, timestamps untouched)

    Returns:
        Dictionary with overall and per-topic progress information
    """
    topics = []
    for topic in sheet.topics:
        progress = Progress()
        for sub_topic in topic.sub_topics:
            progress = progress + compute_progress(sub_topic.questions)
        topics.append({
            "id": topic.id,
            "title": topic.title,
            "solved": progress.solved,
            "total": progress.total,
            "percentage": _percentage(progress),
        })

    solved = sum(t["solved"] for t in topics)
    total = sum(t["total"] for t in topics)
    overall = Progress(solved=solved, total=total)
    starred = sum(1 for _, q in sheet.iter_questions() if q.starred)

    return {
        "solved": solved,
        "total": total,
        "remaining": total - solved,
        "percentage": _percentage(overall),
        "starred": starred,
        "topics": topics,
    }

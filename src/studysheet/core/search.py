"""Question search over a sheet."""

from typing import Any, Dict

from studysheet.core.models import Question, Sheet

SEARCH_FIELDS = ("title", "source", "difficulty")


def question_matches(question: Question, query: str) -> bool:
    """Case-insensitive substring match over title, source and difficulty."""
    needle = query.lower()
    return any(
        needle in value.lower()
        for value in (getattr(question, name) for name in SEARCH_FIELDS)
        if value
    )


def filter_questions(sheet: Sheet, query: str) -> Dict[str, Any]:
    """
    Return the sheet dict with non-matching questions filtered out.

    Topics and subtopics are kept even when empty so positions stay
    stable. A blank query returns the whole sheet.

    Args:
        sheet: Sheet to search (not modified)
        query: Search text

    Returns:
        Sheet-shaped dict plus ``query`` and ``matches`` count
    """
    data = sheet.to_dict()
    if not query or not query.strip():
        data["query"] = query or ""
        data["matches"] = sum(1 for _ in sheet.iter_questions())
        return data

    matches = 0
    for topic, topic_data in zip(sheet.topics, data["topics"]):
        for sub_topic, sub_data in zip(topic.sub_topics, topic_data["subTopics"]):
            kept = [q.to_dict() for q in sub_topic.questions if question_matches(q, query)]
            sub_data["questions"] = kept
            matches += len(kept)

    data["query"] = query
    data["matches"] = matches
    return data

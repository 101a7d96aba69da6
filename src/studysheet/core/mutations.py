"""
Tree-editing operations for study sheets.

Every operation validates its input and resolves every identifier before
touching the tree, so a failing call leaves the sheet unchanged. Callers
(see ``studysheet.core.store``) re-run the progress aggregator and persist
afterwards.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from studysheet.core.errors import NotFoundError, ValidationError
from studysheet.core.models import (
    Question,
    Sheet,
    SubTopic,
    Topic,
    parse_question_fields,
    require_title,
)

logger = logging.getLogger(__name__)

REORDER_TYPES = ("topic", "subtopic", "question")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_topic(sheet: Sheet, topic_id: str) -> Topic:
    topic = sheet.find_topic(topic_id)
    if topic is None:
        raise NotFoundError("Topic", topic_id)
    return topic


def get_subtopic(sheet: Sheet, subtopic_id: str) -> Tuple[Topic, SubTopic]:
    found = sheet.find_subtopic(subtopic_id)
    if found is None:
        raise NotFoundError("SubTopic", subtopic_id)
    return found


def get_question(sheet: Sheet, question_id: str) -> Tuple[SubTopic, Question]:
    found = sheet.find_question(question_id)
    if found is None:
        raise NotFoundError("Question", question_id)
    return found


def _optional_title(title: Optional[Any]) -> Optional[str]:
    if title is None:
        return None
    return require_title(title)


# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------


def add_topic(sheet: Sheet, title: Any) -> Topic:
    """Append a new, empty topic."""
    topic = Topic(title=require_title(title), order=len(sheet.topics))
    sheet.topics.append(topic)
    logger.debug("Added topic %s", topic.id)
    return topic


def update_topic(sheet: Sheet, topic_id: str, title: Optional[Any] = None) -> Topic:
    """Rename a topic. ``title=None`` leaves it unchanged."""
    new_title = _optional_title(title)
    topic = get_topic(sheet, topic_id)
    if new_title is not None:
        topic.title = new_title
    return topic


def _collect_descendants(topic_or_subtopic: Any) -> List[str]:
    """
    Recursively collect all descendant identifiers.

    Args:
        topic_or_subtopic: Topic or SubTopic being removed

    Returns:
        Identifiers of every SubTopic and Question below the node
    """
    descendants: List[str] = []
    if isinstance(topic_or_subtopic, Topic):
        for sub_topic in topic_or_subtopic.sub_topics:
            descendants.append(sub_topic.id)
            descendants.extend(_collect_descendants(sub_topic))
    elif isinstance(topic_or_subtopic, SubTopic):
        descendants.extend(q.id for q in topic_or_subtopic.questions)
    return descendants


def remove_topic(sheet: Sheet, topic_id: str) -> Dict[str, Any]:
    """
    Remove a topic and everything beneath it.

    Returns:
        Dict with the removed id, the cascaded descendant ids and the
        number of questions removed
    """
    topic = get_topic(sheet, topic_id)
    descendants = _collect_descendants(topic)
    questions_removed = sum(len(s.questions) for s in topic.sub_topics)
    sheet.topics = [t for t in sheet.topics if t.id != topic_id]
    logger.debug("Removed topic %s (%d descendants)", topic_id, len(descendants))
    return {
        "removed_id": topic_id,
        "cascaded_ids": descendants,
        "questions_removed": questions_removed,
    }


# ---------------------------------------------------------------------------
# SubTopics
# ---------------------------------------------------------------------------


def add_subtopic(sheet: Sheet, topic_id: str, title: Any) -> SubTopic:
    new_title = require_title(title)
    topic = get_topic(sheet, topic_id)
    sub_topic = SubTopic(title=new_title, order=len(topic.sub_topics))
    topic.sub_topics.append(sub_topic)
    logger.debug("Added subtopic %s to topic %s", sub_topic.id, topic_id)
    return sub_topic


def update_subtopic(
    sheet: Sheet, subtopic_id: str, title: Optional[Any] = None
) -> SubTopic:
    new_title = _optional_title(title)
    _, sub_topic = get_subtopic(sheet, subtopic_id)
    if new_title is not None:
        sub_topic.title = new_title
    return sub_topic


def remove_subtopic(sheet: Sheet, subtopic_id: str) -> Dict[str, Any]:
    topic, sub_topic = get_subtopic(sheet, subtopic_id)
    descendants = _collect_descendants(sub_topic)
    topic.sub_topics = [s for s in topic.sub_topics if s.id != subtopic_id]
    return {
        "removed_id": subtopic_id,
        "cascaded_ids": descendants,
        "questions_removed": len(descendants),
    }


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------


def add_question(
    sheet: Sheet, subtopic_id: str, fields: Mapping[str, Any]
) -> Question:
    """
    Append a question to a subtopic.

    Args:
        sheet: Live sheet
        subtopic_id: Owning subtopic
        fields: Question fields; ``title`` is required, everything else
            falls back to the model defaults

    Raises:
        ValidationError: On invalid fields
        NotFoundError: If the subtopic does not exist
    """
    parsed = parse_question_fields(fields, partial=False)
    _, sub_topic = get_subtopic(sheet, subtopic_id)
    question = Question(order=len(sub_topic.questions), **parsed)
    sub_topic.questions.append(question)
    logger.debug("Added question %s to subtopic %s", question.id, subtopic_id)
    return question


def update_question(
    sheet: Sheet, question_id: str, changes: Mapping[str, Any]
) -> Question:
    """Apply a partial update to a question."""
    parsed = parse_question_fields(changes, partial=True)
    _, question = get_question(sheet, question_id)
    question.apply(parsed)
    return question


def remove_question(sheet: Sheet, question_id: str) -> Dict[str, Any]:
    sub_topic, _ = get_question(sheet, question_id)
    sub_topic.questions = [q for q in sub_topic.questions if q.id != question_id]
    return {"removed_id": question_id, "cascaded_ids": [], "questions_removed": 1}


# ---------------------------------------------------------------------------
# Reorder
# ---------------------------------------------------------------------------


def _endpoint(payload: Mapping[str, Any], key: str) -> Tuple[str, int]:
    endpoint = payload.get(key)
    if not isinstance(endpoint, Mapping):
        raise ValidationError(f"'{key}' must be an object with containerId and index", field=key)
    container_id = endpoint.get("containerId", "")
    index = endpoint.get("index")
    if container_id is None:
        container_id = ""
    if not isinstance(container_id, str):
        raise ValidationError(f"'{key}.containerId' must be a string", field=f"{key}.containerId")
    if not isinstance(index, int) or isinstance(index, bool) or index < 0:
        raise ValidationError(
            f"'{key}.index' must be a non-negative integer", field=f"{key}.index"
        )
    return container_id, index


def _resolve_containers(
    sheet: Sheet,
    move_type: str,
    from_id: str,
    to_id: str,
    allow_cross_topic: bool,
) -> Tuple[List[Any], List[Any]]:
    if move_type == "topic":
        return sheet.topics, sheet.topics

    if move_type == "subtopic":
        source = get_topic(sheet, from_id)
        target = get_topic(sheet, to_id)
        if source is not target and not allow_cross_topic:
            raise ValidationError(
                "Subtopics can only be reordered within their own topic",
                field="to.containerId",
                remediation="Use the same topic for from.containerId and to.containerId",
                details={"from": from_id, "to": to_id},
            )
        return source.sub_topics, target.sub_topics

    _, source_sub = get_subtopic(sheet, from_id)
    _, target_sub = get_subtopic(sheet, to_id)
    return source_sub.questions, target_sub.questions


def reorder(
    sheet: Sheet,
    payload: Mapping[str, Any],
    *,
    allow_cross_topic: bool = False,
) -> Dict[str, Any]:
    """
    Move an item between (or within) sibling sequences.

    The item at ``from.index`` is removed from the source sequence first,
    then inserted at ``to.index`` into the destination sequence as it is
    after that removal. ``to.index`` may equal the destination size to
    append. For ``topic`` moves the container ids are ignored.

    Args:
        sheet: Live sheet
        payload: ``{type, from: {containerId, index}, to: {containerId, index}, itemId?}``
        allow_cross_topic: Permit subtopic moves between different topics

    Returns:
        Dict describing the move (``moved`` is False for a no-op)

    Raises:
        ValidationError: On malformed payload, out-of-range indices, an
            itemId that does not match the source item, or a disallowed
            cross-topic subtopic move
        NotFoundError: If a container does not resolve
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Reorder payload must be an object")
    move_type = payload.get("type")
    if move_type not in REORDER_TYPES:
        raise ValidationError(
            f"Invalid reorder type {move_type!r}. Must be one of: {', '.join(REORDER_TYPES)}",
            field="type",
        )
    from_id, from_index = _endpoint(payload, "from")
    to_id, to_index = _endpoint(payload, "to")
    item_id = payload.get("itemId")
    if item_id is not None and not isinstance(item_id, str):
        raise ValidationError("'itemId' must be a string", field="itemId")

    source, target = _resolve_containers(
        sheet, move_type, from_id, to_id, allow_cross_topic
    )

    if from_index >= len(source):
        raise ValidationError(
            f"from.index {from_index} is out of range (container has {len(source)} items)",
            field="from.index",
        )
    if to_index > len(target):
        raise ValidationError(
            f"to.index {to_index} is out of range (container has {len(target)} items)",
            field="to.index",
        )
    if item_id and source[from_index].id != item_id:
        raise ValidationError(
            f"itemId '{item_id}' is not at from.index {from_index}",
            field="itemId",
            details={"found": source[from_index].id},
        )

    moved = not (source is target and from_index == to_index)
    item = source.pop(from_index)
    target.insert(to_index, item)

    logger.debug(
        "Reordered %s %s: %s[%d] -> %s[%d]",
        move_type, item.id, from_id, from_index, to_id, to_index,
    )
    return {
        "type": move_type,
        "itemId": item.id,
        "from": {"containerId": from_id, "index": from_index},
        "to": {"containerId": to_id, "index": to_index},
        "moved": moved,
    }

"""
Unit tests for studysheet.core.mutations.

Tests CRUD operations per entity, cascading deletes, and the reorder
protocol including its validation failures.
"""

import copy

import pytest

from studysheet.core.errors import NotFoundError, ValidationError
from studysheet.core.models import Question, Sheet, SubTopic, Topic
from studysheet.core.mutations import (
    add_question,
    add_subtopic,
    add_topic,
    remove_question,
    remove_subtopic,
    remove_topic,
    reorder,
    update_question,
    update_subtopic,
    update_topic,
)
from studysheet.core.progress import overall_progress, recalculate_progress


def _snapshot(sheet: Sheet) -> dict:
    data = copy.deepcopy(sheet.to_dict())
    data.pop("updatedAt")
    return data


def _move(move_type, from_id, from_index, to_id, to_index, item_id=None):
    payload = {
        "type": move_type,
        "from": {"containerId": from_id, "index": from_index},
        "to": {"containerId": to_id, "index": to_index},
    }
    if item_id is not None:
        payload["itemId"] = item_id
    return payload


@pytest.fixture
def two_subtopic_sheet() -> Sheet:
    """Topic T with SubTopic X (3 questions) and SubTopic Y (1 question)."""
    sheet = Sheet(
        topics=[
            Topic(
                title="T",
                sub_topics=[
                    SubTopic(
                        title="X",
                        questions=[Question(title="x0"), Question(title="x1"), Question(title="x2")],
                    ),
                    SubTopic(title="Y", questions=[Question(title="y0")]),
                ],
            ),
            Topic(title="U", sub_topics=[SubTopic(title="Z")]),
        ]
    )
    return recalculate_progress(sheet)


class TestTopicOperations:
    """Tests for topic create/update/delete."""

    def test_add_topic_appends(self, sample_sheet):
        topic = add_topic(sample_sheet, "Dynamic Programming")
        assert sample_sheet.topics[-1] is topic
        assert topic.order == 2
        assert topic.sub_topics == []

    def test_add_topic_rejects_blank_title(self, sample_sheet):
        before = _snapshot(sample_sheet)
        with pytest.raises(ValidationError):
            add_topic(sample_sheet, "  ")
        assert _snapshot(sample_sheet) == before

    def test_update_topic_renames(self, sample_sheet):
        topic_id = sample_sheet.topics[0].id
        update_topic(sample_sheet, topic_id, "Arrays & Hashing")
        assert sample_sheet.topics[0].title == "Arrays & Hashing"

    def test_update_topic_without_title_is_noop(self, sample_sheet):
        before = _snapshot(sample_sheet)
        update_topic(sample_sheet, sample_sheet.topics[0].id)
        assert _snapshot(sample_sheet) == before

    def test_update_unknown_topic(self, sample_sheet):
        with pytest.raises(NotFoundError) as exc_info:
            update_topic(sample_sheet, "missing", "x")
        assert exc_info.value.kind == "Topic"

    def test_remove_topic_cascades(self, sample_sheet):
        topic = sample_sheet.topics[0]
        question_ids = [q.id for s in topic.sub_topics for q in s.questions]
        prior_total = overall_progress(sample_sheet).total
        topic_total = topic.progress.total

        result = remove_topic(sample_sheet, topic.id)
        recalculate_progress(sample_sheet)

        assert result["removed_id"] == topic.id
        assert result["questions_removed"] == 4
        assert set(question_ids) <= set(result["cascaded_ids"])
        assert all(sample_sheet.find_question(q) is None for q in question_ids)
        assert overall_progress(sample_sheet).total == prior_total - topic_total

    def test_remove_unknown_topic(self, sample_sheet):
        with pytest.raises(NotFoundError, match="Topic 'nope' not found"):
            remove_topic(sample_sheet, "nope")


class TestSubTopicOperations:
    """Tests for subtopic create/update/delete."""

    def test_add_subtopic(self, sample_sheet):
        topic = sample_sheet.topics[1]
        sub_topic = add_subtopic(sample_sheet, topic.id, "Shortest Paths")
        assert topic.sub_topics[-1] is sub_topic
        assert sub_topic.order == 1

    def test_add_subtopic_unknown_topic(self, sample_sheet):
        with pytest.raises(NotFoundError) as exc_info:
            add_subtopic(sample_sheet, "missing", "S")
        assert exc_info.value.kind == "Topic"

    def test_add_subtopic_validates_title_before_lookup(self, sample_sheet):
        with pytest.raises(ValidationError):
            add_subtopic(sample_sheet, "missing", "")

    def test_update_subtopic(self, sample_sheet):
        sub_topic = sample_sheet.topics[0].sub_topics[0]
        update_subtopic(sample_sheet, sub_topic.id, "Fundamentals")
        assert sub_topic.title == "Fundamentals"

    def test_remove_subtopic_cascades(self, sample_sheet):
        topic = sample_sheet.topics[0]
        sub_topic = topic.sub_topics[0]
        result = remove_subtopic(sample_sheet, sub_topic.id)

        assert result["questions_removed"] == 3
        assert [s.title for s in topic.sub_topics] == ["Two Pointers"]

    def test_remove_unknown_subtopic(self, sample_sheet):
        with pytest.raises(NotFoundError) as exc_info:
            remove_subtopic(sample_sheet, "missing")
        assert exc_info.value.kind == "SubTopic"


class TestQuestionOperations:
    """Tests for question create/update/delete."""

    def test_add_question_with_defaults(self, sample_sheet):
        sub_topic = sample_sheet.topics[1].sub_topics[0]
        question = add_question(sample_sheet, sub_topic.id, {"title": "Clone Graph"})

        assert sub_topic.questions[-1] is question
        assert question.order == 1
        assert question.source == "TUF"
        assert question.difficulty == "Basic"

    def test_add_question_with_fields(self, sample_sheet):
        sub_topic = sample_sheet.topics[1].sub_topics[0]
        question = add_question(
            sample_sheet,
            sub_topic.id,
            {
                "title": "Course Schedule",
                "difficulty": "Medium",
                "source": "LeetCode",
                "tags": ["topo", "topo"],
                "starred": True,
            },
        )
        assert question.difficulty == "Medium"
        assert question.tags == ["topo"]
        assert question.starred is True

    def test_add_question_invalid_fields_leaves_tree_unchanged(self, sample_sheet):
        sub_topic = sample_sheet.topics[1].sub_topics[0]
        before = _snapshot(sample_sheet)
        with pytest.raises(ValidationError):
            add_question(sample_sheet, sub_topic.id, {"title": "Q", "difficulty": "Brutal"})
        assert _snapshot(sample_sheet) == before

    def test_add_question_unknown_subtopic(self, sample_sheet):
        with pytest.raises(NotFoundError) as exc_info:
            add_question(sample_sheet, "missing", {"title": "Q"})
        assert exc_info.value.kind == "SubTopic"

    def test_update_question_merges_fields(self, sample_sheet):
        _, question = next(sample_sheet.iter_questions())
        update_question(sample_sheet, question.id, {"solved": True, "notes": "hash map"})

        assert question.solved is True
        assert question.notes == "hash map"
        assert question.title == "Two Sum"
        assert question.difficulty == "Easy"

    def test_update_question_rejects_order(self, sample_sheet):
        _, question = next(sample_sheet.iter_questions())
        with pytest.raises(ValidationError):
            update_question(sample_sheet, question.id, {"order": 3})

    def test_update_unknown_question(self, sample_sheet):
        with pytest.raises(NotFoundError) as exc_info:
            update_question(sample_sheet, "missing", {"solved": True})
        assert exc_info.value.kind == "Question"

    def test_remove_question(self, sample_sheet):
        sub_topic, question = next(sample_sheet.iter_questions())
        remove_question(sample_sheet, question.id)
        assert question.id not in [q.id for q in sub_topic.questions]
        assert len(sub_topic.questions) == 2

    def test_remove_unknown_question(self, sample_sheet):
        with pytest.raises(NotFoundError):
            remove_question(sample_sheet, "missing")


class TestReorder:
    """Tests for the reorder protocol."""

    def test_topic_move(self, sample_sheet):
        first, second = sample_sheet.topics
        reorder(sample_sheet, _move("topic", "", 0, "", 1))
        recalculate_progress(sample_sheet)

        assert sample_sheet.topics == [second, first]
        assert [t.order for t in sample_sheet.topics] == [0, 1]

    def test_topic_move_ignores_container_ids(self, sample_sheet):
        first = sample_sheet.topics[0]
        reorder(sample_sheet, _move("topic", "anything", 0, "else", 2))
        assert sample_sheet.topics[-1] is first

    def test_same_position_is_noop(self, two_subtopic_sheet):
        x = two_subtopic_sheet.topics[0].sub_topics[0]
        before = _snapshot(two_subtopic_sheet)

        result = reorder(two_subtopic_sheet, _move("question", x.id, 1, x.id, 1))
        recalculate_progress(two_subtopic_sheet)

        assert result["moved"] is False
        assert _snapshot(two_subtopic_sheet) == before

    def test_same_container_forward_move_uses_post_removal_index(self, two_subtopic_sheet):
        x = two_subtopic_sheet.topics[0].sub_topics[0]
        reorder(two_subtopic_sheet, _move("question", x.id, 0, x.id, 2))
        assert [q.title for q in x.questions] == ["x1", "x2", "x0"]

    def test_same_container_backward_move(self, two_subtopic_sheet):
        x = two_subtopic_sheet.topics[0].sub_topics[0]
        reorder(two_subtopic_sheet, _move("question", x.id, 2, x.id, 0))
        assert [q.title for q in x.questions] == ["x2", "x0", "x1"]

    def test_cross_container_question_move(self, two_subtopic_sheet):
        x, y = two_subtopic_sheet.topics[0].sub_topics
        moved = x.questions[1]

        reorder(two_subtopic_sheet, _move("question", x.id, 1, y.id, 0, item_id=moved.id))
        recalculate_progress(two_subtopic_sheet)

        assert len(x.questions) == 2
        assert len(y.questions) == 2
        assert y.questions[0] is moved
        assert moved.order == 0
        assert [q.order for q in x.questions] == [0, 1]
        assert x.progress.total == 2
        assert y.progress.total == 2

    def test_question_move_across_topics(self, two_subtopic_sheet):
        x = two_subtopic_sheet.topics[0].sub_topics[0]
        z = two_subtopic_sheet.topics[1].sub_topics[0]
        reorder(two_subtopic_sheet, _move("question", x.id, 0, z.id, 0))
        assert [q.title for q in z.questions] == ["x0"]

    def test_append_at_container_size(self, two_subtopic_sheet):
        x, y = two_subtopic_sheet.topics[0].sub_topics
        reorder(two_subtopic_sheet, _move("question", x.id, 0, y.id, 1))
        assert [q.title for q in y.questions] == ["y0", "x0"]

    def test_subtopic_move_within_topic(self, two_subtopic_sheet):
        topic = two_subtopic_sheet.topics[0]
        reorder(two_subtopic_sheet, _move("subtopic", topic.id, 1, topic.id, 0))
        assert [s.title for s in topic.sub_topics] == ["Y", "X"]

    def test_cross_topic_subtopic_move_rejected_by_default(self, two_subtopic_sheet):
        t, u = two_subtopic_sheet.topics
        before = _snapshot(two_subtopic_sheet)
        with pytest.raises(ValidationError, match="within their own topic"):
            reorder(two_subtopic_sheet, _move("subtopic", t.id, 0, u.id, 0))
        assert _snapshot(two_subtopic_sheet) == before

    def test_cross_topic_subtopic_move_when_allowed(self, two_subtopic_sheet):
        t, u = two_subtopic_sheet.topics
        moved = t.sub_topics[0]
        reorder(
            two_subtopic_sheet,
            _move("subtopic", t.id, 0, u.id, 1),
            allow_cross_topic=True,
        )
        assert u.sub_topics[-1] is moved
        assert [s.title for s in t.sub_topics] == ["Y"]

    @pytest.mark.parametrize(
        "payload, match",
        [
            ({"type": "chapter"}, "Invalid reorder type"),
            ({"type": "topic", "to": {"index": 0}}, "'from' must be an object"),
            ({"type": "topic", "from": {"index": -1}, "to": {"index": 0}}, "non-negative"),
            ({"type": "topic", "from": {"index": True}, "to": {"index": 0}}, "non-negative"),
            ({"type": "topic", "from": {"index": 0}, "to": {"index": "1"}}, "non-negative"),
            (
                {"type": "topic", "from": {"containerId": 3, "index": 0}, "to": {"index": 0}},
                "containerId' must be a string",
            ),
        ],
    )
    def test_malformed_payload(self, sample_sheet, payload, match):
        with pytest.raises(ValidationError, match=match):
            reorder(sample_sheet, payload)

    def test_from_index_out_of_range(self, two_subtopic_sheet):
        y = two_subtopic_sheet.topics[0].sub_topics[1]
        with pytest.raises(ValidationError, match="from.index 1 is out of range"):
            reorder(two_subtopic_sheet, _move("question", y.id, 1, y.id, 0))

    def test_to_index_out_of_range(self, two_subtopic_sheet):
        x, y = two_subtopic_sheet.topics[0].sub_topics
        with pytest.raises(ValidationError, match="to.index 2 is out of range"):
            reorder(two_subtopic_sheet, _move("question", x.id, 0, y.id, 2))

    def test_item_id_mismatch(self, two_subtopic_sheet):
        x = two_subtopic_sheet.topics[0].sub_topics[0]
        before = _snapshot(two_subtopic_sheet)
        with pytest.raises(ValidationError, match="is not at from.index"):
            reorder(
                two_subtopic_sheet,
                _move("question", x.id, 0, x.id, 1, item_id=x.questions[1].id),
            )
        assert _snapshot(two_subtopic_sheet) == before

    def test_unknown_containers(self, two_subtopic_sheet):
        x = two_subtopic_sheet.topics[0].sub_topics[0]
        with pytest.raises(NotFoundError) as exc_info:
            reorder(two_subtopic_sheet, _move("question", x.id, 0, "missing", 0))
        assert exc_info.value.kind == "SubTopic"

        with pytest.raises(NotFoundError) as exc_info:
            reorder(two_subtopic_sheet, _move("subtopic", "missing", 0, "missing", 0))
        assert exc_info.value.kind == "Topic"

    def test_question_container_must_be_a_subtopic(self, two_subtopic_sheet):
        topic = two_subtopic_sheet.topics[0]
        with pytest.raises(NotFoundError):
            reorder(two_subtopic_sheet, _move("question", topic.id, 0, topic.id, 0))

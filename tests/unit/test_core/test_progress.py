"""
Unit tests for studysheet.core.progress.

Tests order renumbering, bottom-up progress aggregation, monotonic
timestamps and the progress summary.
"""

from datetime import datetime, timedelta, timezone

from studysheet.core.models import Progress, Question, Sheet, SubTopic, Topic
from studysheet.core.progress import (
    compute_progress,
    get_progress_summary,
    next_timestamp,
    overall_progress,
    recalculate_progress,
    utc_timestamp,
)


def _scrambled_sheet() -> Sheet:
    """Sheet with stale orders and progress values."""
    return Sheet(
        topics=[
            Topic(
                title="A",
                order=7,
                progress=Progress(99, 99),
                sub_topics=[
                    SubTopic(
                        title="A1",
                        order=3,
                        questions=[
                            Question(title="q1", order=5, solved=True),
                            Question(title="q2", order=5),
                            Question(title="q3", order=0, solved=True),
                        ],
                    ),
                    SubTopic(title="A2", order=3, questions=[Question(title="q4")]),
                ],
            ),
            Topic(title="B", order=7),
        ]
    )


class TestRecalculateProgress:
    """Tests for recalculate_progress."""

    def test_orders_match_positions(self):
        sheet = recalculate_progress(_scrambled_sheet())

        assert [t.order for t in sheet.topics] == [0, 1]
        for topic in sheet.topics:
            assert [s.order for s in topic.sub_topics] == list(range(len(topic.sub_topics)))
            for sub_topic in topic.sub_topics:
                assert [q.order for q in sub_topic.questions] == list(
                    range(len(sub_topic.questions))
                )

    def test_subtopic_progress_counts_questions(self):
        sheet = recalculate_progress(_scrambled_sheet())
        for _, sub_topic in sheet.iter_subtopics():
            assert sub_topic.progress.total == len(sub_topic.questions)
            assert sub_topic.progress.solved == sum(q.solved for q in sub_topic.questions)

    def test_topic_progress_sums_subtopics(self):
        sheet = recalculate_progress(_scrambled_sheet())
        for topic in sheet.topics:
            assert topic.progress.solved == sum(s.progress.solved for s in topic.sub_topics)
            assert topic.progress.total == sum(s.progress.total for s in topic.sub_topics)
        assert sheet.topics[0].progress == Progress(2, 4)
        assert sheet.topics[1].progress == Progress(0, 0)

    def test_idempotent_except_timestamp(self, sample_sheet):
        before = sample_sheet.to_dict()
        recalculate_progress(sample_sheet)
        after = sample_sheet.to_dict()

        assert after["updatedAt"] > before["updatedAt"]
        before.pop("updatedAt")
        after.pop("updatedAt")
        assert before == after

    def test_does_not_add_or_remove_entities(self):
        sheet = _scrambled_sheet()
        ids = [q.id for _, q in sheet.iter_questions()]
        recalculate_progress(sheet)
        assert [q.id for _, q in sheet.iter_questions()] == ids

    def test_returns_same_instance(self):
        sheet = _scrambled_sheet()
        assert recalculate_progress(sheet) is sheet


class TestTimestamps:
    """Tests for UTC timestamp helpers."""

    def test_utc_timestamp_format(self):
        moment = datetime(2025, 1, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
        assert utc_timestamp(moment) == "2025-01-02T03:04:05.000006Z"

    def test_next_timestamp_strictly_increases_when_clock_lags(self):
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        previous = utc_timestamp(future)
        assert next_timestamp(previous) == utc_timestamp(future + timedelta(microseconds=1))

    def test_next_timestamp_ignores_unparseable_previous(self):
        stamp = next_timestamp("not-a-date")
        assert stamp.endswith("Z")

    def test_repeated_recalculation_is_strictly_monotonic(self, sample_sheet):
        stamps = []
        for _ in range(20):
            stamps.append(recalculate_progress(sample_sheet).updated_at)
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == len(stamps)


class TestSummaries:
    """Tests for compute_progress, overall_progress and get_progress_summary."""

    def test_compute_progress(self):
        questions = [Question(title="a", solved=True), Question(title="b")]
        assert compute_progress(questions) == Progress(1, 2)
        assert compute_progress([]) == Progress(0, 0)

    def test_overall_progress(self, sample_sheet):
        assert overall_progress(sample_sheet) == Progress(2, 5)

    def test_progress_summary(self, sample_sheet):
        summary = get_progress_summary(sample_sheet)

        assert summary["solved"] == 2
        assert summary["total"] == 5
        assert summary["remaining"] == 3
        assert summary["percentage"] == 40
        assert summary["starred"] == 1
        assert [t["title"] for t in summary["topics"]] == ["Arrays", "Graphs"]
        assert summary["topics"][0]["percentage"] == 25
        assert summary["topics"][1]["percentage"] == 100

    def test_progress_summary_of_empty_sheet(self):
        summary = get_progress_summary(Sheet())
        assert summary["total"] == 0
        assert summary["percentage"] == 0
        assert summary["topics"] == []

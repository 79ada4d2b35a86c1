"""
Unit tests for time-gap session segmentation.

The session gap is measured from the first query of the session, so a
steady stream of closely spaced queries is still cut once the session as a
whole reaches the gap.
"""

from datetime import timedelta

import pytest

from query_log_pipeline.processing.segmenter import SessionSegmenter
from query_log_pipeline.storage import EmissionError, MemoryEmitter

GAP = timedelta(minutes=26)


class RecordingEmitter:
    """Plain callable sink that keeps every batch."""

    def __init__(self):
        self.batches = []

    def __call__(self, batch):
        self.batches.append(batch)

    @property
    def sessions(self):
        return [s for batch in self.batches for s in batch]


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def segmenter(emitter):
    return SessionSegmenter(emitter, max_session_gap=GAP, max_batch_size=100)


class TestGapFromSessionStart:
    """Tests for the gap-from-start rule."""

    def test_fourth_query_past_gap_starts_new_session(
        self, segmenter, emitter, make_record
    ):
        """t0, +10m, +20m stay together; +30m is 30m after start."""
        for minutes, query in [(0, "q1"), (10, "q2"), (20, "q3"), (30, "q4")]:
            segmenter.ingest(make_record(1, query, minutes))
        segmenter.flush()

        sessions = emitter.sessions
        assert len(sessions) == 2
        assert sessions[0].queries == ["q1", "q2", "q3"]
        assert sessions[1].queries == ["q4"]

    def test_gap_is_not_measured_between_queries(
        self, segmenter, emitter, make_record
    ):
        """Queries 20m apart still split once 26m from the start is reached."""
        for minutes, query in [(0, "q1"), (20, "q2"), (40, "q3")]:
            segmenter.ingest(make_record(1, query, minutes))
        segmenter.flush()

        assert [s.queries for s in emitter.sessions] == [["q1", "q2"], ["q3"]]

    def test_exact_gap_starts_new_session(self, segmenter, emitter, make_record):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(1, "q2", 26))
        segmenter.flush()

        assert len(emitter.sessions) == 2

    def test_just_under_gap_joins_session(self, segmenter, emitter, make_record):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(1, "q2", 26 - 1 / 60))
        segmenter.flush()

        assert len(emitter.sessions) == 1

    def test_session_bounds(self, segmenter, emitter, make_record, t0):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(1, "q2", 5))
        segmenter.ingest(make_record(1, "q3", 12))
        segmenter.flush()

        session = emitter.sessions[0]
        assert session.user_id == 1
        assert session.start == t0
        assert session.end == t0 + timedelta(minutes=12)
        assert session.queries == ["q1", "q2", "q3"]

    def test_new_session_seeded_by_closing_record(
        self, segmenter, emitter, make_record, t0
    ):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(1, "q2", 40))

        current = segmenter.current_session
        assert current.start == t0 + timedelta(minutes=40)
        assert current.end == current.start
        assert current.queries == ["q2"]


class TestUserChange:
    """Tests for sessions closed by a different user id."""

    def test_user_change_closes_session_within_gap(
        self, segmenter, emitter, make_record
    ):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(2, "q2", 1))
        segmenter.flush()

        sessions = emitter.sessions
        assert [(s.user_id, s.queries) for s in sessions] == [
            (1, ["q1"]),
            (2, ["q2"]),
        ]

    def test_returning_user_is_not_merged(self, segmenter, emitter, make_record):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(2, "q2", 1))
        segmenter.ingest(make_record(1, "q3", 2))
        segmenter.flush()

        assert [s.user_id for s in emitter.sessions] == [1, 2, 1]
        assert emitter.sessions[2].queries == ["q3"]


class TestOutOfOrderRecords:
    """Tests for same-user records earlier than the session start."""

    def test_earlier_record_joins_and_is_counted(
        self, segmenter, emitter, make_record, t0
    ):
        segmenter.ingest(make_record(1, "q1", 10))
        segmenter.ingest(make_record(1, "q0", 5))
        segmenter.flush()

        session = emitter.sessions[0]
        assert session.queries == ["q1", "q0"]
        assert session.end >= session.start
        assert segmenter.stats.out_of_order_records == 1


class TestBatching:
    """Tests for batch emission."""

    def test_batch_emitted_when_full(self, emitter, make_record):
        segmenter = SessionSegmenter(emitter, max_session_gap=GAP, max_batch_size=3)

        # Users 1-5 each open a session; ingesting user 5 closes the fourth
        for user_id in range(1, 6):
            segmenter.ingest(make_record(user_id, f"q{user_id}", user_id))

        assert len(emitter.batches) == 1
        assert [s.user_id for s in emitter.batches[0]] == [1, 2, 3]
        assert [s.user_id for s in segmenter.pending_batch] == [4]
        assert segmenter.current_session.user_id == 5

    def test_flush_emits_remaining_sessions(self, emitter, make_record):
        segmenter = SessionSegmenter(emitter, max_session_gap=GAP, max_batch_size=3)
        for user_id in range(1, 6):
            segmenter.ingest(make_record(user_id, f"q{user_id}", user_id))
        segmenter.flush()

        assert [len(b) for b in emitter.batches] == [3, 2]
        assert segmenter.stats.batches_emitted == 2
        assert segmenter.stats.sessions_emitted == 5

    def test_batches_preserve_arrival_order(self, emitter, make_record):
        segmenter = SessionSegmenter(emitter, max_session_gap=GAP, max_batch_size=2)
        for user_id in [7, 3, 9, 1]:
            segmenter.ingest(make_record(user_id, "q", 0))
        segmenter.flush()

        assert [s.user_id for s in emitter.sessions] == [7, 3, 9, 1]

    def test_batch_emitter_instance_is_accepted(self, make_record):
        sink = MemoryEmitter()
        segmenter = SessionSegmenter(sink, max_session_gap=GAP, max_batch_size=10)
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.flush()

        assert len(sink.batches) == 1
        assert sink.sessions[0].queries == ["q1"]


class TestFlush:
    """Tests for flush()."""

    def test_flush_on_empty_state_emits_nothing(self, segmenter, emitter):
        segmenter.flush()

        assert emitter.batches == []

    def test_second_flush_is_noop(self, segmenter, emitter, make_record):
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.flush()
        segmenter.flush()

        assert len(emitter.batches) == 1

    def test_flush_after_exact_batch_emits_nothing_more(self, emitter, make_record):
        segmenter = SessionSegmenter(emitter, max_session_gap=GAP, max_batch_size=1)
        segmenter.ingest(make_record(1, "q1", 0))
        segmenter.ingest(make_record(2, "q2", 0))  # emits [user 1]
        segmenter.flush()  # emits [user 2]
        segmenter.flush()

        assert [len(b) for b in emitter.batches] == [1, 1]


class TestFailures:
    """Tests for invalid input and sink failures."""

    def test_empty_query_rejected(self, segmenter, make_record):
        with pytest.raises(ValueError):
            segmenter.ingest(make_record(1, "", 0))

        assert segmenter.current_session is None

    def test_emitter_failure_raises_emission_error(self, make_record):
        def failing(batch):
            raise OSError("disk full")

        segmenter = SessionSegmenter(failing, max_session_gap=GAP, max_batch_size=1)
        segmenter.ingest(make_record(1, "q1", 0))

        with pytest.raises(EmissionError) as exc_info:
            segmenter.ingest(make_record(2, "q2", 0))

        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.batch_size == 1

    @pytest.mark.parametrize(
        "gap,batch_size",
        [(timedelta(0), 10), (timedelta(minutes=-1), 10), (GAP, 0)],
    )
    def test_invalid_configuration(self, emitter, gap, batch_size):
        with pytest.raises(ValueError):
            SessionSegmenter(emitter, max_session_gap=gap, max_batch_size=batch_size)

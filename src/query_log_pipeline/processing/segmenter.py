"""
Time-gap session segmentation.

Groups consecutive records of the same user into sessions whose total
duration, measured from the first query of the session, stays below the
configured gap (TS-x segmentation from Lucchese et al. 2011). Closed sessions
are collected into batches that are handed to an emitter when full.

The segmenter only looks at the current open session. It never reorders
input or merges a returning user into an earlier session: one instance
serves exactly one ordered stream and is not thread-safe.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional, Sequence, Union

from ..config.constants import DEFAULT_MAX_BATCH_SIZE, DEFAULT_MAX_SESSION_GAP
from ..ingestion.base import LogRecord
from ..schemas.session import SearchSession
from ..storage.base import BatchEmitter, EmissionError

logger = logging.getLogger(__name__)

EmitFn = Callable[[Sequence[SearchSession]], None]


@dataclass
class SegmenterStats:
    """Counters for one segmentation run."""

    records_ingested: int = 0
    sessions_closed: int = 0
    batches_emitted: int = 0
    sessions_emitted: int = 0
    out_of_order_records: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "records_ingested": self.records_ingested,
            "sessions_closed": self.sessions_closed,
            "batches_emitted": self.batches_emitted,
            "sessions_emitted": self.sessions_emitted,
            "out_of_order_records": self.out_of_order_records,
        }


class SessionSegmenter:
    """
    Streaming session assembler with bounded memory.

    Holds at most one open session and one pending batch of closed
    sessions. A record joins the open session only if it belongs to the
    same user and ``record.timestamp - session.start < max_session_gap``;
    otherwise the open session is closed and the record seeds a new one.

    Usage:
        segmenter = SessionSegmenter(emitter, max_session_gap=timedelta(minutes=26))
        for record in records:
            segmenter.ingest(record)
        segmenter.flush()
    """

    def __init__(
        self,
        emitter: Union[BatchEmitter, EmitFn],
        max_session_gap: timedelta = DEFAULT_MAX_SESSION_GAP,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        """
        Initialize the segmenter.

        Args:
            emitter: Sink for full batches (BatchEmitter or plain callable)
            max_session_gap: Maximum elapsed time from session start
            max_batch_size: Number of closed sessions per emitted batch

        Raises:
            ValueError: If the gap is not positive or the batch size < 1
        """
        if max_session_gap <= timedelta(0):
            raise ValueError(f"max_session_gap must be > 0, got {max_session_gap}")
        if max_batch_size < 1:
            raise ValueError(f"max_batch_size must be >= 1, got {max_batch_size}")

        self._emit: EmitFn = (
            emitter.accept if isinstance(emitter, BatchEmitter) else emitter
        )
        self.max_session_gap = max_session_gap
        self.max_batch_size = max_batch_size

        self.current_session: Optional[SearchSession] = None
        self.pending_batch: list[SearchSession] = []
        self.stats = SegmenterStats()

    def ingest(self, record: LogRecord) -> None:
        """
        Add one cleaned record to the session stream.

        Args:
            record: Record with a non-empty cleaned query

        Raises:
            ValueError: If the record carries an empty query
            EmissionError: If a full batch is rejected by the emitter
        """
        if not record.query:
            raise ValueError(
                f"Empty query for user {record.user_id}; "
                f"empty queries must be dropped before segmentation"
            )

        self.stats.records_ingested += 1
        session = self.current_session

        if session is not None and session.user_id == record.user_id:
            elapsed = record.timestamp - session.start
            if elapsed < timedelta(0):
                self.stats.out_of_order_records += 1
                logger.debug(
                    f"Out-of-order record for user {record.user_id}: "
                    f"{record.timestamp} precedes session start {session.start}"
                )
            if elapsed < self.max_session_gap:
                session.add_query(record.query, record.timestamp)
                return

        if session is not None:
            self._close_current_session()

        self.current_session = SearchSession.from_record(record)

    def flush(self) -> None:
        """
        Close the open session and emit whatever is pending.

        Runs once after the source is exhausted. Emits nothing when there
        is neither an open session nor a pending batch, so calling it again
        is a no-op.

        Raises:
            EmissionError: If the final batch is rejected by the emitter
        """
        if self.current_session is not None:
            self._close_current_session()

        if self.pending_batch:
            self._emit_pending()

    def _close_current_session(self) -> None:
        self.pending_batch.append(self.current_session)
        self.current_session = None
        self.stats.sessions_closed += 1

        if len(self.pending_batch) >= self.max_batch_size:
            self._emit_pending()

    def _emit_pending(self) -> None:
        batch = self.pending_batch
        # A new list, since the emitter now owns the old one
        self.pending_batch = []

        try:
            self._emit(batch)
        except EmissionError:
            raise
        except Exception as e:
            raise EmissionError(
                f"Batch emitter failed: {e}",
                batch_size=len(batch),
            ) from e

        self.stats.batches_emitted += 1
        self.stats.sessions_emitted += len(batch)
        logger.info(
            f"Emitted batch {self.stats.batches_emitted} "
            f"with {len(batch):,} sessions"
        )

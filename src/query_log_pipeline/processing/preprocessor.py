"""
Query log preprocessing pipeline.

Wires a record source, the text cleaner, the session segmenter and a batch
emitter into a single synchronous run:

    source -> TextCleaner.filter -> SessionSegmenter.ingest -> BatchEmitter

Records whose cleaned query is empty are dropped before segmentation.
The segmenter is flushed exactly once after the source is exhausted.
"""

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional

from ..config.constants import DEFAULT_MAX_BATCH_SIZE, DEFAULT_MAX_SESSION_GAP
from ..config.settings import Settings
from ..ingestion.aol_reader import AolLogReader
from ..ingestion.base import LogRecord
from ..storage.base import BatchEmitter
from ..storage.factory import get_emitter
from .cleaner import TextCleaner
from .segmenter import SegmenterStats, SessionSegmenter

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging for scripts."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


@dataclass
class PreprocessResult:
    """Result of a preprocessing run."""

    success: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now().astimezone())
    completed_at: Optional[datetime] = None
    # Stats
    records_read: int = 0
    empty_queries_dropped: int = 0
    segmenter: SegmenterStats = field(default_factory=SegmenterStats)
    # Errors
    errors: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get run duration in seconds."""
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
            "duration_seconds": self.duration_seconds,
            "records_read": self.records_read,
            "empty_queries_dropped": self.empty_queries_dropped,
            **self.segmenter.to_dict(),
            "errors": self.errors,
        }


class Preprocessor:
    """
    Single-pass preprocessing of a query log stream into session batches.

    Not reusable across streams: build one Preprocessor per source.
    """

    def __init__(
        self,
        source: Iterable[LogRecord],
        cleaner: TextCleaner,
        emitter: BatchEmitter,
        max_session_gap: timedelta = DEFAULT_MAX_SESSION_GAP,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ):
        """
        Initialize the preprocessor.

        Args:
            source: Ordered record stream (e.g. an AolLogReader)
            cleaner: Query text cleaner
            emitter: Sink for session batches
            max_session_gap: Maximum elapsed time from session start
            max_batch_size: Number of sessions per emitted batch
        """
        self.source = source
        self.cleaner = cleaner
        self.emitter = emitter
        self.segmenter = SessionSegmenter(
            emitter,
            max_session_gap=max_session_gap,
            max_batch_size=max_batch_size,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        source: Optional[Iterable[LogRecord]] = None,
    ) -> "Preprocessor":
        """
        Build the full chain from settings.

        Args:
            settings: Pipeline settings
            source: Record stream to use instead of the configured log files

        Raises:
            ValueError: If the settings fail validation
        """
        errors = settings.validate()
        if errors:
            raise ValueError("Invalid settings: " + "; ".join(errors))

        pre = settings.preprocess
        if source is None:
            log_dir = Path(pre.log_dir)
            source = AolLogReader(
                [log_dir / name for name in pre.log_files],
                on_error=pre.on_parse_error,
            )
        cleaner = TextCleaner.from_file(pre.stopwords_path)

        if pre.emitter == "json":
            emitter = get_emitter(
                "json", output_dir=Path(pre.output_dir), prefix=pre.batch_prefix
            )
        elif pre.emitter == "sqlite":
            emitter = get_emitter("sqlite", db_path=Path(pre.sqlite_db_path))
        else:
            emitter = get_emitter(pre.emitter)

        return cls(
            source,
            cleaner,
            emitter,
            max_session_gap=pre.max_session_gap,
            max_batch_size=pre.max_batch_size,
        )

    def run(self) -> PreprocessResult:
        """
        Read, clean and segment the whole source.

        Returns:
            PreprocessResult with counters

        Raises:
            EmissionError: If the emitter rejects a batch (fatal, no retry)
        """
        result = PreprocessResult(segmenter=self.segmenter.stats)
        logger.info(
            f"Preprocessing with gap {self.segmenter.max_session_gap}, "
            f"batch size {self.segmenter.max_batch_size:,}"
        )

        self.emitter.open()
        try:
            for record in self.source:
                result.records_read += 1
                cleaned = self.cleaner.filter(record.query)
                if not cleaned:
                    result.empty_queries_dropped += 1
                    continue
                self.segmenter.ingest(record.with_query(cleaned))

            self.segmenter.flush()
        finally:
            self.emitter.close()

        result.success = True
        result.completed_at = datetime.now().astimezone()
        logger.info(
            f"Preprocessing complete: {result.records_read:,} records, "
            f"{result.empty_queries_dropped:,} empty queries dropped, "
            f"{self.segmenter.stats.sessions_closed:,} sessions in "
            f"{self.segmenter.stats.batches_emitted} batches "
            f"({result.duration_seconds:.1f}s)"
        )
        return result

"""
Streaming reader for AOL style query log files.

Reads an ordered list of log files as one record stream. The first line of
every file holds column names and is skipped. Malformed lines, including
lines that do not decode in the configured encoding, are resolved
here according to the configured policy so that the session segmenter
only ever sees valid records.
"""

import gzip
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Union

from ..config.constants import PARSE_ERROR_POLICIES, PROGRESS_REPORT_PERCENT
from .base import LogRecord
from .exceptions import ParseError, SourceValidationError
from .file_utils import open_file_auto_decompress, read_list_file

logger = logging.getLogger(__name__)


@dataclass
class ReaderStats:
    """Counters collected while reading log files."""

    files_read: int = 0
    files_missing: int = 0
    lines_read: int = 0
    records_read: int = 0
    lines_skipped: int = 0
    stopped_early: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "files_read": self.files_read,
            "files_missing": self.files_missing,
            "lines_read": self.lines_read,
            "records_read": self.records_read,
            "lines_skipped": self.lines_skipped,
            "stopped_early": self.stopped_early,
        }


class AolLogReader:
    """
    Record source over one or more AOL query log files.

    Malformed line policies:
        skip:  log a warning and continue with the next line
        stop:  end the whole stream at the first malformed line
        raise: propagate the ParseError to the caller

    Usage:
        reader = AolLogReader(["user-ct-test-collection-01.txt"])
        for record in reader:
            process(record)
    """

    def __init__(
        self,
        paths: Iterable[Union[str, Path]],
        on_error: str = "skip",
        skip_header: bool = True,
        encoding: str = "utf-8",
    ):
        """
        Initialize the reader.

        Args:
            paths: Log files, read in the given order
            on_error: Malformed line policy ('skip', 'stop' or 'raise')
            skip_header: Whether the first line of each file is a header
            encoding: Text encoding of the log files, applied per line

        Raises:
            SourceValidationError: If on_error is not a known policy
        """
        if on_error not in PARSE_ERROR_POLICIES:
            raise SourceValidationError(
                "Unknown parse error policy",
                source=on_error,
                reason=f"expected one of {', '.join(PARSE_ERROR_POLICIES)}",
            )

        self.paths = [Path(p) for p in paths]
        self.on_error = on_error
        self.skip_header = skip_header
        self.encoding = encoding
        self.stats = ReaderStats()
        self._iterator: Optional[Iterator[LogRecord]] = None

    @classmethod
    def from_list_file(
        cls,
        list_path: Union[str, Path],
        log_dir: Union[str, Path],
        **kwargs,
    ) -> "AolLogReader":
        """
        Build a reader from a file naming one log file per line.

        Args:
            list_path: File listing log file names
            log_dir: Directory the listed names are relative to
            **kwargs: Passed to the constructor

        Raises:
            SourceValidationError: If the list file does not exist
        """
        try:
            names = read_list_file(list_path)
        except FileNotFoundError as e:
            raise SourceValidationError(
                "Query log list file not found",
                source=str(list_path),
            ) from e

        log_dir = Path(log_dir)
        return cls([log_dir / name for name in names], **kwargs)

    def __iter__(self) -> Iterator[LogRecord]:
        return self._iter_records()

    def read_next(self) -> Optional[LogRecord]:
        """Return the next record, or None once every file is exhausted."""
        if self._iterator is None:
            self._iterator = self._iter_records()
        return next(self._iterator, None)

    def _iter_records(self) -> Iterator[LogRecord]:
        for path in self.paths:
            try:
                handle = open_file_auto_decompress(path, binary=True)
            except FileNotFoundError:
                logger.error(f"Query log file {path} not found, skipping")
                self.stats.files_missing += 1
                continue

            logger.info(f"Processing query log file {path}")
            with handle:
                stopped = yield from self._iter_file(handle, path)
            self.stats.files_read += 1
            logger.info(f"Finished reading file {path}")

            if stopped:
                self.stats.stopped_early = True
                logger.warning(
                    f"Stopped reading at malformed line in {path}; "
                    f"remaining files ignored"
                )
                return

    def _iter_file(self, handle: IO[bytes], path: Path):
        """Yield records from one open file. Returns True if the stream must stop."""
        # On-disk size of compressed input does not bound the decompressed bytes
        if isinstance(handle, gzip.GzipFile):
            file_size = 0
        else:
            file_size = path.stat().st_size
        bytes_read = 0
        next_report = PROGRESS_REPORT_PERCENT

        for line_number, raw in enumerate(handle, start=1):
            if line_number == 1 and self.skip_header:
                continue

            if file_size:
                bytes_read += len(raw)
                percent = bytes_read * 100 // file_size
                if percent >= next_report:
                    logger.info(f"    ~{next_report}% of {path.name}")
                    next_report += PROGRESS_REPORT_PERCENT

            if not raw.strip(b"\r\n"):
                continue

            self.stats.lines_read += 1
            try:
                record = self._parse_line(raw, line_number)
            except ParseError as e:
                self.stats.lines_skipped += 1
                if self.on_error == "raise":
                    raise
                if self.on_error == "stop":
                    logger.warning(f"Malformed line in {path}: {e}")
                    return True
                logger.warning(f"Skipping malformed line in {path}: {e}")
                continue

            self.stats.records_read += 1
            yield record

        return False

    def _parse_line(self, raw: bytes, line_number: int) -> LogRecord:
        """Decode and parse one line. Undecodable bytes are a ParseError."""
        try:
            line = raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ParseError(
                f"Line is not valid {self.encoding}: {e.reason} at byte {e.start}",
                line_number=line_number,
                line_content=raw.decode(self.encoding, errors="replace"),
            ) from e
        return LogRecord.from_line(line, line_number=line_number)

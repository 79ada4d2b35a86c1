"""
Ingestion layer for AOL style query logs.

Turns raw tab separated log lines into immutable LogRecord objects and
resolves malformed input at this boundary.

Usage:
    from query_log_pipeline.ingestion import AolLogReader

    reader = AolLogReader(["logs/user-ct-test-collection-01.txt"])
    for record in reader:
        print(record.user_id, record.query, record.timestamp)
"""

from .aol_reader import AolLogReader, ReaderStats
from .base import LogRecord
from .exceptions import (
    IngestionError,
    ParseError,
    SourceValidationError,
    ValidationError,
)
from .file_utils import open_file_auto_decompress, read_list_file

__all__ = [
    # Data model
    "LogRecord",
    # Readers
    "AolLogReader",
    "ReaderStats",
    # Exceptions
    "IngestionError",
    "ParseError",
    "SourceValidationError",
    "ValidationError",
    # File utilities
    "open_file_auto_decompress",
    "read_list_file",
]

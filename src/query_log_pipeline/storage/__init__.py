"""
Batch emitters for closed search sessions.

Usage:
    from query_log_pipeline.storage import get_emitter

    with get_emitter('json', output_dir='output/preprocessor-out') as emitter:
        emitter.accept(sessions)
"""

from .base import (
    BatchEmitter,
    EmissionError,
    QueryError,
    StorageConnectionError,
    StorageError,
)
from .factory import get_emitter, list_available_emitters, register_emitter
from .json_writer import JsonBatchWriter, delete_files_in_dir, read_batch_files
from .memory import MemoryEmitter
from .sqlite_backend import SQLiteSessionStore

__all__ = [
    # Base classes and exceptions
    "BatchEmitter",
    "StorageError",
    "StorageConnectionError",
    "QueryError",
    "EmissionError",
    # Emitters
    "JsonBatchWriter",
    "SQLiteSessionStore",
    "MemoryEmitter",
    # Factory functions
    "get_emitter",
    "register_emitter",
    "list_available_emitters",
    # File helpers
    "read_batch_files",
    "delete_files_in_dir",
]

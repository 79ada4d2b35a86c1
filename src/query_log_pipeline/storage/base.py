"""
Abstract base class for batch emitters.

A batch emitter persists a finished batch of search sessions. The session
segmenter hands over ownership of every batch it closes and treats any
failure as fatal to the run.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..schemas.session import SearchSession


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class StorageConnectionError(StorageError):
    """Raised when a storage connection cannot be established."""

    pass


class QueryError(StorageError):
    """Raised when a storage query or statement fails."""

    pass


class EmissionError(StorageError):
    """
    Raised when a sink rejects a batch of sessions.

    Fatal to the current run; no partial-batch retry is attempted.

    Attributes:
        batch_size: Number of sessions in the rejected batch (optional)
        message: Detailed error message
    """

    def __init__(self, message: str, batch_size: int | None = None):
        self.batch_size = batch_size
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with batch context."""
        if self.batch_size is not None:
            return f"{self.message} (batch of {self.batch_size} sessions)"
        return self.message


class BatchEmitter(ABC):
    """
    Abstract base class for session batch sinks.

    Implementations must accept batches in arrival order and raise
    EmissionError when a batch cannot be persisted.
    """

    @property
    @abstractmethod
    def emitter_type(self) -> str:
        """Return the emitter type identifier (e.g., 'json')."""
        pass

    def open(self) -> None:
        """
        Prepare the sink for a run.

        Should be idempotent - safe to call multiple times.
        """
        pass

    def close(self) -> None:
        """Release resources held by the sink."""
        pass

    @abstractmethod
    def accept(self, batch: Sequence[SearchSession]) -> None:
        """
        Persist one batch of sessions.

        Args:
            batch: Closed sessions in arrival order

        Raises:
            EmissionError: If the batch cannot be persisted
        """
        pass

    def __call__(self, batch: Sequence[SearchSession]) -> None:
        self.accept(batch)

    def __enter__(self) -> "BatchEmitter":
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

"""In-memory batch emitter."""

import logging
from typing import Sequence

from ..schemas.session import SearchSession
from .base import BatchEmitter

logger = logging.getLogger(__name__)


class MemoryEmitter(BatchEmitter):
    """Keeps every accepted batch in memory, in arrival order."""

    def __init__(self):
        self.batches: list[list[SearchSession]] = []

    @property
    def emitter_type(self) -> str:
        return "memory"

    def accept(self, batch: Sequence[SearchSession]) -> None:
        self.batches.append(list(batch))
        logger.debug(f"Accepted batch of {len(batch)} sessions")

    @property
    def sessions(self) -> list[SearchSession]:
        """All accepted sessions, flattened across batches."""
        return [session for batch in self.batches for session in batch]

"""
JSON batch file writer.

Writes each batch of sessions to its own JSON file in an output directory.
Files are numbered per prefix (``output-0.json``, ``output-1.json``, ...);
numbers already taken by leftover files are skipped.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

from ..config.constants import DEFAULT_BATCH_PREFIX, MAX_BATCH_FILE_NUMBERING
from ..schemas.session import SearchSession
from .base import BatchEmitter, EmissionError

logger = logging.getLogger(__name__)


class JsonBatchWriter(BatchEmitter):
    """
    Batch emitter writing one JSON array of session records per batch.

    Usage:
        with JsonBatchWriter("output/preprocessor-out") as writer:
            writer.accept(sessions)
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        prefix: str = DEFAULT_BATCH_PREFIX,
        clear_existing: bool = True,
        indent: Optional[int] = 2,
        encoding: str = "utf-8",
    ):
        """
        Initialize the writer.

        Args:
            output_dir: Directory batch files are written to
            prefix: File name prefix for batch files
            clear_existing: Delete plain files in output_dir when opened
            indent: JSON indentation (None for compact output)
            encoding: Text encoding of written files
        """
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.clear_existing = clear_existing
        self.indent = indent
        self.encoding = encoding
        self.files_written: list[Path] = []
        self._numbering: dict[str, int] = {}
        self._opened = False

    @property
    def emitter_type(self) -> str:
        return "json"

    def open(self) -> None:
        """Create the output directory and clear leftovers if configured."""
        if self._opened:
            return

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            if self.clear_existing:
                removed = delete_files_in_dir(self.output_dir)
                if removed:
                    logger.info(
                        f"Removed {removed} existing files from {self.output_dir}"
                    )
        except OSError as e:
            raise EmissionError(
                f"Cannot prepare output directory {self.output_dir}: {e}"
            ) from e
        self._opened = True

    def accept(self, batch: Sequence[SearchSession]) -> None:
        self.open()

        path = self._next_path(self.prefix)
        payload = [session.to_dict() for session in batch]
        try:
            with open(path, "w", encoding=self.encoding) as f:
                json.dump(payload, f, indent=self.indent, ensure_ascii=False)
        except OSError as e:
            raise EmissionError(
                f"Cannot write batch file {path}: {e}",
                batch_size=len(batch),
            ) from e

        self.files_written.append(path)
        logger.info(f"Wrote {len(batch):,} sessions to {path}")

    def _next_path(self, name: str) -> Path:
        """
        Find the next free numbered file name for a prefix.

        After MAX_BATCH_FILE_NUMBERING attempts the last candidate is
        overwritten.
        """
        number = self._numbering.get(name, 0)
        path = self.output_dir / self._make_file_name(name, number)
        while number < MAX_BATCH_FILE_NUMBERING and path.exists():
            number += 1
            path = self.output_dir / self._make_file_name(name, number)
        self._numbering[name] = number
        return path

    @staticmethod
    def _make_file_name(name: str, number: int) -> str:
        return f"{name}-{number}.json"


def delete_files_in_dir(directory: Union[str, Path]) -> int:
    """
    Delete the plain files directly inside a directory.

    Subdirectories and their contents are left alone.

    Returns:
        Number of files deleted
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    removed = 0
    for entry in directory.iterdir():
        if entry.is_file():
            entry.unlink()
            removed += 1
    return removed


def _batch_file_sort_key(path: Path) -> tuple[str, int]:
    stem, _, number = path.stem.rpartition("-")
    if number.isdigit():
        return stem, int(number)
    return path.stem, -1


def read_batch_files(
    input_dir: Union[str, Path],
    prefix: Optional[str] = None,
    encoding: str = "utf-8",
) -> Iterator[SearchSession]:
    """
    Read sessions back from JSON batch files, in batch number order.

    Args:
        input_dir: Directory holding batch files
        prefix: Only read files named ``<prefix>-<n>.json`` (all .json if None)
        encoding: Text encoding of the files

    Yields:
        SearchSession objects

    Raises:
        FileNotFoundError: If input_dir does not exist
    """
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Batch directory not found: {input_dir}")

    pattern = f"{prefix}-*.json" if prefix else "*.json"
    for path in sorted(input_dir.glob(pattern), key=_batch_file_sort_key):
        with open(path, "r", encoding=encoding) as f:
            records = json.load(f)
        logger.debug(f"Loaded {len(records)} sessions from {path}")
        for record in records:
            yield SearchSession.from_dict(record)

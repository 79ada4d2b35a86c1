"""
Shared file utilities for the ingestion and cleaning steps.
"""

import gzip
from pathlib import Path
from typing import IO, Union


def open_file_auto_decompress(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    binary: bool = False,
) -> IO:
    """
    Open a file, automatically detecting gzip compression.

    Gzip detection is performed by:
    1. Checking for .gz file extension
    2. Checking for gzip magic bytes (0x1f 0x8b) even without .gz extension

    Args:
        file_path: Path to the file
        encoding: Text encoding (default: utf-8), ignored in binary mode
        binary: Return undecoded bytes lines instead of text

    Returns:
        Open file handle (text mode, or binary mode if requested). Gzip
        input in binary mode is returned as a gzip.GzipFile.

    Raises:
        FileNotFoundError: If file doesn't exist
        gzip.BadGzipFile: If file has .gz extension but is not valid gzip
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    compressed = path.suffix.lower() == ".gz"
    if not compressed:
        with open(path, "rb") as f:
            compressed = f.read(2) == b"\x1f\x8b"

    if binary:
        return gzip.open(path, "rb") if compressed else open(path, "rb")
    if compressed:
        return gzip.open(path, "rt", encoding=encoding)
    return open(path, "r", encoding=encoding)


def read_list_file(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
) -> list[str]:
    """
    Read a one-entry-per-line file (stopwords, log file lists).

    Line endings are stripped and blank lines are skipped. Surrounding
    whitespace inside an entry is kept.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    entries = []
    with open_file_auto_decompress(file_path, encoding=encoding) as f:
        for line in f:
            entry = line.rstrip("\r\n")
            if entry:
                entries.append(entry)
    return entries

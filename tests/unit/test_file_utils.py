"""
Unit tests for ingestion file utilities.

Tests cover:
- Plain and gzip query log files (by extension and by magic bytes)
- Binary mode for per-line decoding
- FileNotFoundError handling
- One-entry-per-line list files (stopwords, log file lists)
"""

import gzip
from pathlib import Path

import pytest

from query_log_pipeline.ingestion.file_utils import (
    open_file_auto_decompress,
    read_list_file,
)

LOG_LINE = "142\tnew york pizza\t2006-03-01 10:00:00\t1\thttp://www.pizza.com\n"


class TestOpenFileAutoDecompress:
    """Tests for open_file_auto_decompress function."""

    def test_plain_text_file(self, tmp_path: Path) -> None:
        """Test reading a plain query log file."""
        test_file = tmp_path / "user-ct-test-collection-01.txt"
        test_file.write_text(LOG_LINE)

        with open_file_auto_decompress(test_file) as f:
            content = f.read()

        assert content == LOG_LINE

    def test_gzip_file_with_extension(self, tmp_path: Path) -> None:
        """Test reading a gzip file with .gz extension."""
        test_file = tmp_path / "user-ct-test-collection-01.txt.gz"
        with gzip.open(test_file, "wt", encoding="utf-8") as f:
            f.write(LOG_LINE)

        with open_file_auto_decompress(test_file) as f:
            content = f.read()

        assert content == LOG_LINE

    def test_gzip_file_magic_bytes_no_extension(self, tmp_path: Path) -> None:
        """Test reading a gzip file detected by magic bytes (no .gz extension)."""
        test_file = tmp_path / "queries.log"
        with gzip.open(test_file, "wt", encoding="utf-8") as f:
            f.write("Magic bytes detection")

        with open_file_auto_decompress(test_file) as f:
            content = f.read()

        assert content == "Magic bytes detection"

    def test_file_not_found(self, tmp_path: Path) -> None:
        """Test FileNotFoundError for non-existent file."""
        non_existent = tmp_path / "does_not_exist.txt"

        with pytest.raises(FileNotFoundError) as exc_info:
            open_file_auto_decompress(non_existent)

        assert "File not found" in str(exc_info.value)

    def test_bad_gzip_file(self, tmp_path: Path) -> None:
        """Test BadGzipFile for corrupt gzip file with .gz extension."""
        test_file = tmp_path / "corrupt.txt.gz"
        test_file.write_bytes(b"This is not gzip content")

        with pytest.raises(gzip.BadGzipFile):
            with open_file_auto_decompress(test_file) as f:
                f.read()

    def test_path_as_string(self, tmp_path: Path) -> None:
        """Test that function accepts string paths."""
        test_file = tmp_path / "test.txt"
        test_file.write_text("String path test")

        with open_file_auto_decompress(str(test_file)) as f:
            content = f.read()

        assert content == "String path test"

    def test_custom_encoding(self, tmp_path: Path) -> None:
        """Test reading file with custom encoding."""
        test_file = tmp_path / "latin1.txt"
        test_file.write_bytes("café crème".encode("latin-1"))

        with open_file_auto_decompress(test_file, encoding="latin-1") as f:
            content = f.read()

        assert content == "café crème"

    def test_binary_mode_returns_undecoded_lines(self, tmp_path: Path) -> None:
        """Test that binary mode leaves invalid utf-8 bytes untouched."""
        test_file = tmp_path / "latin1.txt"
        test_file.write_bytes(b"1\tcaf\xe9 paris\n")

        with open_file_auto_decompress(test_file, binary=True) as f:
            lines = list(f)

        assert lines == [b"1\tcaf\xe9 paris\n"]

    def test_binary_mode_gzip_magic_bytes(self, tmp_path: Path) -> None:
        """Test that binary mode decompresses and reports a GzipFile."""
        test_file = tmp_path / "queries.log"
        with gzip.open(test_file, "wb") as f:
            f.write(LOG_LINE.encode("utf-8"))

        with open_file_auto_decompress(test_file, binary=True) as f:
            assert isinstance(f, gzip.GzipFile)
            content = f.read()

        assert content == LOG_LINE.encode("utf-8")

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test reading an empty file."""
        test_file = tmp_path / "empty.txt"
        test_file.write_text("")

        with open_file_auto_decompress(test_file) as f:
            content = f.read()

        assert content == ""


class TestReadListFile:
    """Tests for read_list_file function."""

    def test_one_entry_per_line(self, tmp_path: Path) -> None:
        test_file = tmp_path / "list.txt"
        test_file.write_text("user-ct-01.txt\nuser-ct-02.txt\n")

        assert read_list_file(test_file) == ["user-ct-01.txt", "user-ct-02.txt"]

    def test_blank_lines_skipped(self, tmp_path: Path) -> None:
        test_file = tmp_path / "list.txt"
        test_file.write_text("the\n\nof\n\n")

        assert read_list_file(test_file) == ["the", "of"]

    def test_windows_line_endings(self, tmp_path: Path) -> None:
        test_file = tmp_path / "list.txt"
        test_file.write_bytes(b"the\r\nof\r\n")

        assert read_list_file(test_file) == ["the", "of"]

    def test_gzip_list(self, tmp_path: Path) -> None:
        test_file = tmp_path / "list.txt.gz"
        with gzip.open(test_file, "wt", encoding="utf-8") as f:
            f.write("a\nb\n")

        assert read_list_file(test_file) == ["a", "b"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_list_file(tmp_path / "missing.txt")

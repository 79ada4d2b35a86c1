"""
Shared fixtures for integration tests.

Provides:
- AOL style query log files (plain and gzip) in a temporary directory
- Temporary SQLite database and JSON output directory
- Pipeline component fixtures
"""

import gzip
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from query_log_pipeline.config import clear_settings_cache
from query_log_pipeline.processing import TextCleaner, reset_semantic_distance

AOL_HEADER = "AnonID\tQuery\tQueryTime\tItemRank\tClickURL\n"

T0 = datetime(2006, 3, 1, 10, 0, 0)


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


def make_log_line(
    user_id: int,
    query: str,
    minutes: float = 0,
    rank: str = "",
    click_url: str = "",
) -> str:
    """Render one AOL log line offset in minutes from T0."""
    timestamp = (T0 + timedelta(minutes=minutes)).strftime("%Y-%m-%d %H:%M:%S")
    return f"{user_id}\t{query}\t{timestamp}\t{rank}\t{click_url}\n"


def write_log_file(path: Path, lines: list[str], compress: bool = False) -> Path:
    """Write a query log file with the AOL header line."""
    content = AOL_HEADER + "".join(lines)
    if compress:
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


SAMPLE_LINES = [
    make_log_line(142, "new york pizza!!", 0, "1", "http://www.pizza.com"),
    make_log_line(142, "best, pizza nyc", 5),
    make_log_line(142, "-", 6),
    make_log_line(142, "pizza delivery", 40),
    make_log_line(217, "www.google.com", 1, "1", "http://www.google.com"),
    make_log_line(217, "the weather", 2),
    make_log_line(993, "macy's", 3),
]


@pytest.fixture
def log_line():
    """Factory for AOL log lines offset in minutes from T0."""
    return make_log_line


@pytest.fixture
def write_log():
    """Writer for query log files with the AOL header line."""
    return write_log_file


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def log_dir(tmp_path) -> Path:
    """Directory holding the sample query log."""
    directory = tmp_path / "logs"
    directory.mkdir()
    write_log_file(directory / "user-ct-test-collection-01.txt", SAMPLE_LINES)
    return directory


@pytest.fixture
def sample_log(log_dir) -> Path:
    return log_dir / "user-ct-test-collection-01.txt"


@pytest.fixture
def stopwords_file(tmp_path) -> Path:
    path = tmp_path / "stopwords.txt"
    path.write_text("the\nof\na\n", encoding="utf-8")
    return path


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "preprocessor-out"


@pytest.fixture
def temp_db_path(tmp_path) -> Path:
    return tmp_path / "test_sessions.db"


# =============================================================================
# COMPONENT FIXTURES
# =============================================================================


class IdentityStemmer:
    def stem(self, token: str) -> str:
        return token


@pytest.fixture
def cleaner(stopwords_file) -> TextCleaner:
    """Cleaner with a small stopword list and no stemming."""
    return TextCleaner.from_file(stopwords_file, stemmer=IdentityStemmer())


@pytest.fixture(autouse=True)
def _reset_global_state():
    yield
    reset_semantic_distance()
    clear_settings_cache()

"""
Pytest configuration and fixtures for performance tests.

Provides fixtures for generating large AOL style query logs.
"""

import gzip
import random
from datetime import datetime, timedelta
from pathlib import Path

import pytest

AOL_HEADER = "AnonID\tQuery\tQueryTime\tItemRank\tClickURL\n"

WORDS = [
    "new", "york", "pizza", "best", "nyc", "weather", "cheap", "flights",
    "hotel", "boston", "recipe", "chicken", "lyrics", "movie", "times",
    "the", "of", "and", "for", "car", "insurance", "free", "games",
]


@pytest.fixture
def log_file_generator(tmp_path):
    """Factory fixture for generating query logs with a given number of lines."""

    def _generate(num_records: int, compressed: bool = False, seed: int = 42) -> Path:
        rng = random.Random(seed)
        path = tmp_path / ("queries.txt.gz" if compressed else "queries.txt")
        base_time = datetime(2006, 3, 1, 0, 0, 0)

        lines = [AOL_HEADER]
        user_id = 1
        timestamp = base_time
        for _ in range(num_records):
            # Users arrive in blocks with increasing timestamps, as in the AOL logs
            if rng.random() < 0.1:
                user_id += rng.randint(1, 50)
                timestamp = base_time
            timestamp += timedelta(seconds=rng.randint(5, 900))
            query = " ".join(rng.choice(WORDS) for _ in range(rng.randint(1, 4)))
            if rng.random() < 0.05:
                query += "!!"
            lines.append(
                f"{user_id}\t{query}\t{timestamp:%Y-%m-%d %H:%M:%S}\t\t\n"
            )

        content = "".join(lines)
        if compressed:
            with gzip.open(path, "wt", encoding="utf-8") as f:
                f.write(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _generate


@pytest.fixture
def query_pairs():
    """Deterministic query pairs for distance benchmarks."""
    rng = random.Random(7)
    return [
        (
            " ".join(rng.choice(WORDS) for _ in range(rng.randint(1, 5))),
            " ".join(rng.choice(WORDS) for _ in range(rng.randint(1, 5))),
        )
        for _ in range(2_000)
    ]

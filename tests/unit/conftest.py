"""
Pytest configuration and shared fixtures for unit tests.
"""

from datetime import datetime, timedelta

import pytest

from query_log_pipeline.config import clear_settings_cache
from query_log_pipeline.ingestion import LogRecord
from query_log_pipeline.processing import reset_semantic_distance


class IdentityStemmer:
    """Stemmer that leaves tokens untouched, for deterministic cleaning tests."""

    def stem(self, token: str) -> str:
        return token


@pytest.fixture
def identity_stemmer():
    return IdentityStemmer()


@pytest.fixture
def t0():
    """Fixed base timestamp for session tests."""
    return datetime(2006, 3, 1, 10, 0, 0)


@pytest.fixture
def make_record(t0):
    """Factory for LogRecords offset in minutes from t0."""

    def _make(user_id: int, query: str, minutes: float = 0) -> LogRecord:
        return LogRecord(
            user_id=user_id,
            query=query,
            timestamp=t0 + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore the semantic distance slot and settings cache after each test."""
    yield
    reset_semantic_distance()
    clear_settings_cache()

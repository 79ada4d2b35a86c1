"""Data schemas for persisted search sessions."""

from .session import SESSION_FIELDS, SearchSession

__all__ = [
    "SearchSession",
    "SESSION_FIELDS",
]

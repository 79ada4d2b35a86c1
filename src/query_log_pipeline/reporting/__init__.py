"""Reporting helpers for preprocessed search sessions."""

from .session_stats import (
    SESSION_COLUMNS,
    compute_session_statistics,
    pairwise_distance_matrix,
    sessions_to_dataframe,
)

__all__ = [
    "SESSION_COLUMNS",
    "sessions_to_dataframe",
    "compute_session_statistics",
    "pairwise_distance_matrix",
]

"""
Summary statistics and distance matrices over search sessions.

Used to inspect preprocessing output and to prepare the per-session query
distance matrices consumed by the clustering stage.
"""

import logging
from typing import Callable, Iterable, Sequence

import numpy as np
import pandas as pd

from ..processing.query_distance import conditional_distance
from ..schemas.session import SearchSession

logger = logging.getLogger(__name__)

SESSION_COLUMNS = ["user_id", "start", "end", "duration_s", "query_count"]


def sessions_to_dataframe(sessions: Iterable[SearchSession]) -> pd.DataFrame:
    """
    Flatten sessions into one row per session.

    Args:
        sessions: Search sessions

    Returns:
        DataFrame with columns user_id, start, end, duration_s, query_count
    """
    rows = [
        {
            "user_id": s.user_id,
            "start": s.start,
            "end": s.end,
            "duration_s": s.duration.total_seconds(),
            "query_count": s.query_count,
        }
        for s in sessions
    ]
    return pd.DataFrame(rows, columns=SESSION_COLUMNS)


def compute_session_statistics(sessions: Iterable[SearchSession]) -> dict:
    """
    Compute summary statistics for a list of sessions.

    Args:
        sessions: Search sessions

    Returns:
        Dictionary with session statistics
    """
    df = sessions_to_dataframe(sessions)

    if df.empty:
        return {
            "total_sessions": 0,
            "total_queries": 0,
            "unique_users": 0,
            "mean_session_size": 0,
            "median_session_size": 0,
            "min_session_size": 0,
            "max_session_size": 0,
            "mean_duration_s": 0,
            "median_duration_s": 0,
            "singleton_count": 0,
            "singleton_rate": 0,
            "size_distribution": {},
        }

    sizes = df["query_count"].to_numpy()
    durations = df["duration_s"].to_numpy()
    total_sessions = len(df)
    singleton_count = int((sizes == 1).sum())

    size_dist = {}
    for s in sizes:
        bucket = str(s) if s <= 5 else "6-10" if s <= 10 else ">10"
        size_dist[bucket] = size_dist.get(bucket, 0) + 1

    return {
        "total_sessions": total_sessions,
        "total_queries": int(sizes.sum()),
        "unique_users": int(df["user_id"].nunique()),
        "mean_session_size": float(np.mean(sizes)),
        "median_session_size": float(np.median(sizes)),
        "min_session_size": int(sizes.min()),
        "max_session_size": int(sizes.max()),
        "mean_duration_s": float(np.mean(durations)),
        "median_duration_s": float(np.median(durations)),
        "singleton_count": singleton_count,
        "singleton_rate": singleton_count / total_sessions,
        "size_distribution": size_dist,
    }


def pairwise_distance_matrix(
    queries: Sequence[str],
    metric: Callable[[str, str], float] = conditional_distance,
) -> np.ndarray:
    """
    Compute a symmetric pairwise query distance matrix.

    Args:
        queries: Queries of one session, in arrival order
        metric: Distance function taking two queries

    Returns:
        Array of shape (n, n) with a zero diagonal
    """
    n = len(queries)
    matrix = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            d = metric(queries[i], queries[j])
            matrix[i, j] = d
            matrix[j, i] = d
    return matrix

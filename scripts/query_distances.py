#!/usr/bin/env python3
"""
Compute query distances over preprocessed search sessions.

Usage:
    # Distance between two queries
    python scripts/query_distances.py --pair "new york pizza" "nyc pizza"

    # Session statistics and within-session query pair distances
    python scripts/query_distances.py --sessions output/preprocessor-out \\
        --output data/query_pair_distances.csv

    # Read sessions from the SQLite store
    python scripts/query_distances.py --db-path data/sessions.db --summary-only
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from query_log_pipeline.config import get_settings
from query_log_pipeline.processing import QueryDistance, setup_logging
from query_log_pipeline.reporting import (
    compute_session_statistics,
    pairwise_distance_matrix,
)
from query_log_pipeline.storage import SQLiteSessionStore, read_batch_files

logger = logging.getLogger(__name__)


def pair_distances(sessions, qd: QueryDistance) -> pd.DataFrame:
    """One row per unordered query pair within each session."""
    rows = []
    for index, session in enumerate(sessions):
        matrix = pairwise_distance_matrix(session.queries, qd.conditional_distance)
        n = len(session.queries)
        for i in range(n):
            for j in range(i + 1, n):
                rows.append(
                    {
                        "session_index": index,
                        "user_id": session.user_id,
                        "query_a": session.queries[i],
                        "query_b": session.queries[j],
                        "lexical_distance": qd.lexical_distance(
                            session.queries[i], session.queries[j]
                        ),
                        "conditional_distance": float(matrix[i, j]),
                    }
                )
    return pd.DataFrame(rows)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Query distances over preprocessed search sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--pair",
        nargs=2,
        metavar=("QUERY_A", "QUERY_B"),
        help="Print all distances between two queries",
    )
    source.add_argument(
        "--sessions",
        type=Path,
        help="Directory of JSON batch files",
    )
    source.add_argument(
        "--db-path",
        type=Path,
        help="SQLite session store",
    )
    parser.add_argument("--config", type=str, help="Path to YAML config file")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="CSV file for within-session query pair distances",
    )
    parser.add_argument(
        "--summary-only",
        action="store_true",
        help="Only print session statistics",
    )
    parser.add_argument("--verbose", "-v", action="store_true")

    args = parser.parse_args()
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = get_settings(args.config)
    errors = settings.distance.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1
    qd = QueryDistance.from_settings(settings)

    if args.pair:
        a, b = args.pair
        print(
            json.dumps(
                {
                    "lexical_distance": qd.lexical_distance(a, b),
                    "distance": qd.distance(a, b),
                    "conditional_distance": qd.conditional_distance(a, b),
                },
                indent=2,
            )
        )
        return 0

    try:
        if args.sessions:
            sessions = list(read_batch_files(args.sessions))
        else:
            with SQLiteSessionStore.open_existing(args.db_path) as store:
                sessions = list(store.iter_sessions())
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Loaded {len(sessions):,} sessions")
    print(json.dumps(compute_session_statistics(sessions), indent=2))

    if args.summary_only:
        return 0

    df = pair_distances(sessions, qd)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.output, index=False)
        logger.info(f"Wrote {len(df):,} query pairs to {args.output}")
    else:
        print(df.to_string(index=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())

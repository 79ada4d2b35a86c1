#!/usr/bin/env python3
"""
Preprocess AOL query logs into time-gap search sessions.

Reads the configured query log files, cleans every query (punctuation,
stopwords, Porter stemming), segments each user's queries into sessions
bounded by total duration and writes batches of sessions to the configured
sink.

Usage:
    # Use config.yaml (or QLP_* environment variables)
    python scripts/preprocess_logs.py

    # Explicit input files and output directory
    python scripts/preprocess_logs.py -i logs/user-ct-test-collection-01.txt \\
        --output-dir output/preprocessor-out

    # Log files listed in a file, relative to --log-dir
    python scripts/preprocess_logs.py --list-file config/logfiles.txt --log-dir input/querylogs

    # Store sessions in SQLite instead of JSON files
    python scripts/preprocess_logs.py -i logs/*.txt --emitter sqlite --db-path data/sessions.db
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from query_log_pipeline.config import get_settings
from query_log_pipeline.ingestion import AolLogReader, IngestionError
from query_log_pipeline.processing import Preprocessor, setup_logging
from query_log_pipeline.storage import EmissionError, StorageError

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type for integers >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be >= 1, got {number}")
    return number


def positive_float(value: str) -> float:
    """argparse type for floats > 0."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"Must be > 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Preprocess query logs into time-gap search sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML config file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--input",
        "-i",
        nargs="+",
        type=Path,
        help="Query log files, read in the given order",
    )
    parser.add_argument(
        "--list-file",
        type=Path,
        help="File naming one query log file per line (relative to --log-dir)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        help="Directory for files named in --list-file (default: from settings)",
    )
    parser.add_argument(
        "--stopwords",
        type=Path,
        help="Stopword file, one word per line (default: from settings)",
    )
    parser.add_argument(
        "--gap-minutes",
        type=positive_float,
        help="Maximum session duration from first query in minutes (default: 26)",
    )
    parser.add_argument(
        "--batch-size",
        type=positive_int,
        help="Sessions per emitted batch (default: 100000)",
    )
    parser.add_argument(
        "--on-parse-error",
        choices=["skip", "stop", "raise"],
        help="Handling of malformed log lines (default: skip)",
    )
    parser.add_argument(
        "--emitter",
        choices=["json", "sqlite"],
        help="Session sink (default: json)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for JSON batch files (default: from settings)",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        help="SQLite database for the sqlite emitter (default: from settings)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main() -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = get_settings(args.config)
    pre = settings.preprocess

    if args.gap_minutes is not None:
        pre.max_session_gap_minutes = args.gap_minutes
    if args.batch_size is not None:
        pre.max_batch_size = args.batch_size
    if args.on_parse_error:
        pre.on_parse_error = args.on_parse_error
    if args.emitter:
        pre.emitter = args.emitter
    if args.output_dir:
        pre.output_dir = str(args.output_dir)
    if args.db_path:
        pre.sqlite_db_path = str(args.db_path)
    if args.stopwords:
        pre.stopwords_path = str(args.stopwords)
    if args.log_dir:
        pre.log_dir = str(args.log_dir)

    errors = settings.validate()
    if pre.emitter == "memory":
        errors.append("emitter 'memory' keeps sessions only for the life of the process")
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        if args.input:
            source = AolLogReader(args.input, on_error=pre.on_parse_error)
        elif args.list_file:
            source = AolLogReader.from_list_file(
                args.list_file, pre.log_dir, on_error=pre.on_parse_error
            )
        elif pre.log_files:
            source = None
        else:
            parser.error("No input: use --input, --list-file or preprocess.log_files")

        result = Preprocessor.from_settings(settings, source=source).run()

    except EmissionError as e:
        logger.error(f"Session batch could not be written, run aborted: {e}")
        return 1
    except (IngestionError, StorageError) as e:
        logger.error(f"Preprocessing failed: {e}")
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

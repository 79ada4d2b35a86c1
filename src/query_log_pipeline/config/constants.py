"""
Constants for query log preprocessing and query distance computation.
"""

from datetime import timedelta

# =============================================================================
# Time-Gap Session Configuration
# =============================================================================

# Sessions are bounded by total duration measured from the first query
# (TS-26 in Lucchese et al. 2011), not by the spacing between queries.
DEFAULT_MAX_SESSION_GAP_MINUTES = 26
DEFAULT_MAX_SESSION_GAP = timedelta(minutes=DEFAULT_MAX_SESSION_GAP_MINUTES)

# Number of closed sessions collected before a batch is handed to the emitter
DEFAULT_MAX_BATCH_SIZE = 100_000

# =============================================================================
# Query Distance Configuration
# =============================================================================

# 1.0 means only lexical distance is considered, 0.0 only semantic distance
DEFAULT_LEXICAL_WEIGHT = 1.0

# Below this lexical distance the semantic term is skipped entirely (pg285)
DEFAULT_LEXICAL_OVERRIDE_THRESHOLD = 0.5
DEFAULT_SEMANTIC_MULTIPLIER = 4.0

# n-gram size used by the Jaccard component of lexical distance
DEFAULT_NGRAM_SIZE = 3

# =============================================================================
# AOL Query Log Format
# =============================================================================

# AnonID, Query, QueryTime, ItemRank, ClickURL (tab separated)
AOL_FIELD_COUNT = 5
AOL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Progress is logged every N percent of each log file read
PROGRESS_REPORT_PERCENT = 10

# =============================================================================
# Default Paths
# =============================================================================

DEFAULT_STOPWORDS_PATH = "config/stopwords.txt"
DEFAULT_LOG_DIR = "input/querylogs"
DEFAULT_OUTPUT_DIR = "output/preprocessor-out"
DEFAULT_BATCH_PREFIX = "output"
DEFAULT_SQLITE_DB_PATH = "data/search-sessions.db"

# Batch file numbering gives up looking for a free name after this many tries
MAX_BATCH_FILE_NUMBERING = 500

# Malformed log line policies understood by AolLogReader
PARSE_ERROR_POLICIES = ("skip", "stop", "raise")

# SQLite table names
TABLE_SEARCH_SESSIONS = "search_sessions"

# Batch emitter kinds accepted by storage.get_emitter
EMITTER_TYPES = ("json", "sqlite", "memory")

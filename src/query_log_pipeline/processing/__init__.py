"""Query cleaning, session segmentation and query distance."""

from .cleaner import PorterTokenStemmer, TextCleaner, load_stopwords
from .preprocessor import Preprocessor, PreprocessResult, setup_logging
from .query_distance import (
    QueryDistance,
    conditional_distance,
    distance,
    jaccard,
    levenshtein,
    lexical_distance,
    ngrams,
    normalized_levenshtein,
    reset_semantic_distance,
    semantic_distance,
    set_semantic_distance,
)
from .segmenter import SegmenterStats, SessionSegmenter

__all__ = [
    # Cleaning
    "TextCleaner",
    "PorterTokenStemmer",
    "load_stopwords",
    # Segmentation
    "SessionSegmenter",
    "SegmenterStats",
    # Pipeline
    "Preprocessor",
    "PreprocessResult",
    "setup_logging",
    # Query distance
    "QueryDistance",
    "levenshtein",
    "normalized_levenshtein",
    "ngrams",
    "jaccard",
    "lexical_distance",
    "semantic_distance",
    "set_semantic_distance",
    "reset_semantic_distance",
    "distance",
    "conditional_distance",
]

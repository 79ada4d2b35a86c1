"""
Query text cleaning: punctuation stripping, stopword removal and stemming.

The cleaner keeps '.' and apostrophes (domain names and contractions are
common in query logs) and replaces every other ASCII punctuation mark with a
space before tokenizing.
"""

import logging
import re
import string
from pathlib import Path
from typing import Iterable, Optional, Protocol, Union

from ..ingestion.file_utils import read_list_file

logger = logging.getLogger(__name__)

KEPT_PUNCTUATION = ".'"

# Input made only of punctuation and whitespace carries no query
_DEGENERATE_RE = re.compile(rf"[{re.escape(string.punctuation)}\s]*")

_PUNCTUATION_RE = re.compile(
    "[" + re.escape("".join(c for c in string.punctuation if c not in KEPT_PUNCTUATION)) + "]"
)


class Stemmer(Protocol):
    """Anything that maps a token to its stem."""

    def stem(self, token: str) -> str: ...


def load_stopwords(path: Union[str, Path]) -> frozenset[str]:
    """
    Load a stopword list, one word per line.

    A missing file is not fatal: a warning is logged and an empty set is
    returned so preprocessing proceeds without stopword removal.

    Args:
        path: Stopword file path

    Returns:
        Immutable set of stopwords
    """
    try:
        words = read_list_file(path)
    except FileNotFoundError:
        logger.warning(
            f"Stopwords file ({path}) not found, continuing without stopwords"
        )
        return frozenset()

    stopwords = frozenset(words)
    logger.info(f"Loaded {len(stopwords)} stopwords from {path}")
    return stopwords


class PorterTokenStemmer:
    """
    Classic Porter stemming (NLTK's ORIGINAL_ALGORITHM mode).

    Stems keep the token's case, matching the case-sensitive stopword check
    that runs before stemming.
    """

    def __init__(self):
        from nltk.stem import PorterStemmer

        self._porter = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)

    def stem(self, token: str) -> str:
        return self._porter.stem(token, to_lowercase=False)


class TextCleaner:
    """
    Normalizes raw query text before session segmentation.

    Usage:
        cleaner = TextCleaner.from_file("config/stopwords.txt")
        cleaner.filter("new york pizza!!")  # 'new york pizza'
    """

    def __init__(
        self,
        stopwords: Iterable[str] = (),
        stemmer: Optional[Stemmer] = None,
    ):
        """
        Initialize the cleaner.

        Args:
            stopwords: Words removed from queries (exact, case-sensitive match)
            stemmer: Stemming capability (defaults to PorterTokenStemmer)
        """
        self.stopwords = frozenset(stopwords)
        self.stemmer = stemmer if stemmer is not None else PorterTokenStemmer()

    @classmethod
    def from_file(
        cls,
        stopwords_path: Union[str, Path],
        stemmer: Optional[Stemmer] = None,
    ) -> "TextCleaner":
        """Create a cleaner with stopwords loaded from a file."""
        return cls(load_stopwords(stopwords_path), stemmer=stemmer)

    def filter(self, raw: str) -> str:
        """
        Clean a raw query.

        Args:
            raw: Query text as found in the log

        Returns:
            Space separated stemmed tokens with stopwords removed, or an
            empty string when the query holds no usable text
        """
        if _DEGENERATE_RE.fullmatch(raw.strip()):
            return ""

        text = _PUNCTUATION_RE.sub(" ", raw)

        tokens = []
        for token in text.split(" "):
            if not token or token in self.stopwords:
                continue
            tokens.append(self.stemmer.stem(token))

        return " ".join(tokens)

    __call__ = filter

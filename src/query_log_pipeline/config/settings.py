"""
Application settings and configuration management.

Supports loading from:
1. YAML config files (config.yaml)
2. Environment variables (fallback)
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from .constants import (
    DEFAULT_BATCH_PREFIX,
    DEFAULT_LEXICAL_OVERRIDE_THRESHOLD,
    DEFAULT_LEXICAL_WEIGHT,
    DEFAULT_LOG_DIR,
    DEFAULT_MAX_BATCH_SIZE,
    DEFAULT_MAX_SESSION_GAP_MINUTES,
    DEFAULT_NGRAM_SIZE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SEMANTIC_MULTIPLIER,
    DEFAULT_SQLITE_DB_PATH,
    DEFAULT_STOPWORDS_PATH,
    EMITTER_TYPES,
    PARSE_ERROR_POLICIES,
)

logger = logging.getLogger(__name__)


def _safe_int(key: str, default: int) -> int:
    """Safely parse int from env var, using default on error."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def _safe_float(key: str, default: float) -> float:
    """Safely parse float from env var, using default on error."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


def _safe_list(key: str) -> list[str]:
    """Parse a comma separated env var into a list of non-empty items."""
    raw = os.environ.get(key, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# =============================================================================
# Preprocessing Settings
# =============================================================================


@dataclass
class PreprocessSettings:
    """
    Configuration for log reading, cleaning and time-gap segmentation.

    The session gap is measured from the first query of a session, so
    ``max_session_gap_minutes`` bounds the total session duration.
    """

    max_session_gap_minutes: float = DEFAULT_MAX_SESSION_GAP_MINUTES
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE

    # Inputs
    stopwords_path: str = DEFAULT_STOPWORDS_PATH
    log_dir: str = DEFAULT_LOG_DIR
    log_files: list[str] = field(default_factory=list)
    on_parse_error: str = "skip"

    # Outputs
    emitter: str = "json"
    output_dir: str = DEFAULT_OUTPUT_DIR
    batch_prefix: str = DEFAULT_BATCH_PREFIX
    sqlite_db_path: str = DEFAULT_SQLITE_DB_PATH

    @property
    def max_session_gap(self) -> timedelta:
        """Session gap as a timedelta."""
        return timedelta(minutes=self.max_session_gap_minutes)

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.max_session_gap_minutes <= 0:
            errors.append(
                f"max_session_gap_minutes must be > 0, "
                f"got {self.max_session_gap_minutes}"
            )
        if self.max_batch_size < 1:
            errors.append(f"max_batch_size must be >= 1, got {self.max_batch_size}")
        if self.on_parse_error not in PARSE_ERROR_POLICIES:
            errors.append(
                f"on_parse_error must be one of {', '.join(PARSE_ERROR_POLICIES)}, "
                f"got {self.on_parse_error!r}"
            )
        if self.emitter not in EMITTER_TYPES:
            errors.append(
                f"emitter must be one of {', '.join(EMITTER_TYPES)}, "
                f"got {self.emitter!r}"
            )

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "max_session_gap_minutes": self.max_session_gap_minutes,
            "max_batch_size": self.max_batch_size,
            "stopwords_path": self.stopwords_path,
            "log_dir": self.log_dir,
            "log_files": list(self.log_files),
            "on_parse_error": self.on_parse_error,
            "emitter": self.emitter,
            "output_dir": self.output_dir,
            "batch_prefix": self.batch_prefix,
            "sqlite_db_path": self.sqlite_db_path,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "PreprocessSettings":
        """Create from configuration dictionary."""
        return cls(
            max_session_gap_minutes=config.get(
                "max_session_gap_minutes", DEFAULT_MAX_SESSION_GAP_MINUTES
            ),
            max_batch_size=config.get("max_batch_size", DEFAULT_MAX_BATCH_SIZE),
            stopwords_path=config.get("stopwords_path", DEFAULT_STOPWORDS_PATH),
            log_dir=config.get("log_dir", DEFAULT_LOG_DIR),
            log_files=list(config.get("log_files") or []),
            on_parse_error=config.get("on_parse_error", "skip"),
            emitter=config.get("emitter", "json"),
            output_dir=config.get("output_dir", DEFAULT_OUTPUT_DIR),
            batch_prefix=config.get("batch_prefix", DEFAULT_BATCH_PREFIX),
            sqlite_db_path=config.get("sqlite_db_path", DEFAULT_SQLITE_DB_PATH),
        )

    @classmethod
    def from_env(cls) -> "PreprocessSettings":
        """Create from environment variables."""
        return cls(
            max_session_gap_minutes=_safe_float(
                "QLP_MAX_SESSION_GAP_MINUTES", DEFAULT_MAX_SESSION_GAP_MINUTES
            ),
            max_batch_size=_safe_int("QLP_MAX_BATCH_SIZE", DEFAULT_MAX_BATCH_SIZE),
            stopwords_path=os.environ.get(
                "QLP_STOPWORDS_PATH", DEFAULT_STOPWORDS_PATH
            ),
            log_dir=os.environ.get("QLP_LOG_DIR", DEFAULT_LOG_DIR),
            log_files=_safe_list("QLP_LOG_FILES"),
            on_parse_error=os.environ.get("QLP_ON_PARSE_ERROR", "skip"),
            emitter=os.environ.get("QLP_EMITTER", "json"),
            output_dir=os.environ.get("QLP_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
            batch_prefix=os.environ.get("QLP_BATCH_PREFIX", DEFAULT_BATCH_PREFIX),
            sqlite_db_path=os.environ.get(
                "QLP_SQLITE_DB_PATH", DEFAULT_SQLITE_DB_PATH
            ),
        )


# =============================================================================
# Query Distance Settings
# =============================================================================


@dataclass
class DistanceSettings:
    """Weights and thresholds for the composite query distance."""

    lexical_weight: float = DEFAULT_LEXICAL_WEIGHT
    lexical_override_threshold: float = DEFAULT_LEXICAL_OVERRIDE_THRESHOLD
    semantic_multiplier: float = DEFAULT_SEMANTIC_MULTIPLIER
    ngram_size: int = DEFAULT_NGRAM_SIZE

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if not 0.0 <= self.lexical_weight <= 1.0:
            errors.append(f"lexical_weight must be 0-1, got {self.lexical_weight}")
        if self.lexical_override_threshold < 0.0:
            errors.append(
                f"lexical_override_threshold must be >= 0, "
                f"got {self.lexical_override_threshold}"
            )
        if self.semantic_multiplier < 0.0:
            errors.append(
                f"semantic_multiplier must be >= 0, got {self.semantic_multiplier}"
            )
        if self.ngram_size < 1:
            errors.append(f"ngram_size must be >= 1, got {self.ngram_size}")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "lexical_weight": self.lexical_weight,
            "lexical_override_threshold": self.lexical_override_threshold,
            "semantic_multiplier": self.semantic_multiplier,
            "ngram_size": self.ngram_size,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "DistanceSettings":
        """Create from configuration dictionary."""
        return cls(
            lexical_weight=config.get("lexical_weight", DEFAULT_LEXICAL_WEIGHT),
            lexical_override_threshold=config.get(
                "lexical_override_threshold", DEFAULT_LEXICAL_OVERRIDE_THRESHOLD
            ),
            semantic_multiplier=config.get(
                "semantic_multiplier", DEFAULT_SEMANTIC_MULTIPLIER
            ),
            ngram_size=config.get("ngram_size", DEFAULT_NGRAM_SIZE),
        )

    @classmethod
    def from_env(cls) -> "DistanceSettings":
        """Create from environment variables."""
        return cls(
            lexical_weight=_safe_float("QLP_LEXICAL_WEIGHT", DEFAULT_LEXICAL_WEIGHT),
            lexical_override_threshold=_safe_float(
                "QLP_LEXICAL_OVERRIDE_THRESHOLD", DEFAULT_LEXICAL_OVERRIDE_THRESHOLD
            ),
            semantic_multiplier=_safe_float(
                "QLP_SEMANTIC_MULTIPLIER", DEFAULT_SEMANTIC_MULTIPLIER
            ),
            ngram_size=_safe_int("QLP_NGRAM_SIZE", DEFAULT_NGRAM_SIZE),
        )


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """Application settings."""

    preprocess: PreprocessSettings = field(default_factory=PreprocessSettings)
    distance: DistanceSettings = field(default_factory=DistanceSettings)

    def validate(self) -> list[str]:
        """Validate nested settings. Returns list of errors."""
        errors = []
        errors.extend(self.preprocess.validate())
        errors.extend(self.distance.validate())
        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "preprocess": self.preprocess.to_dict(),
            "distance": self.distance.to_dict(),
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from configuration dictionary (e.g., from YAML)."""
        return cls(
            preprocess=PreprocessSettings.from_dict(config.get("preprocess") or {}),
            distance=DistanceSettings.from_dict(config.get("distance") or {}),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            preprocess=PreprocessSettings.from_env(),
            distance=DistanceSettings.from_env(),
        )


# Default config file path
DEFAULT_CONFIG_PATH = Path("config.yaml")


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from YAML config file if available, otherwise from env vars.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        Settings instance
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if path.exists():
        try:
            from .loader import load_yaml_file

            config = load_yaml_file(path)
            return Settings.from_dict(config)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Falling back to environment variables")

    return Settings.from_env()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()

"""Configuration module."""

from .constants import (
    DEFAULT_LEXICAL_OVERRIDE_THRESHOLD,
    DEFAULT_LEXICAL_WEIGHT,
    DEFAULT_MAX_BATCH_SIZE,
    DEFAULT_MAX_SESSION_GAP,
    DEFAULT_NGRAM_SIZE,
    DEFAULT_SEMANTIC_MULTIPLIER,
)
from .loader import load_yaml_file
from .settings import (
    DistanceSettings,
    PreprocessSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Session configuration
    "DEFAULT_MAX_SESSION_GAP",
    "DEFAULT_MAX_BATCH_SIZE",
    # Query distance configuration
    "DEFAULT_LEXICAL_WEIGHT",
    "DEFAULT_LEXICAL_OVERRIDE_THRESHOLD",
    "DEFAULT_SEMANTIC_MULTIPLIER",
    "DEFAULT_NGRAM_SIZE",
    # Settings
    "Settings",
    "PreprocessSettings",
    "DistanceSettings",
    "get_settings",
    "clear_settings_cache",
    # Config loading
    "load_yaml_file",
]

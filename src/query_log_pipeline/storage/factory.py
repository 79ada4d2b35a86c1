"""
Batch emitter factory.

Provides a factory function to create session sinks by name.
"""

import logging
from pathlib import Path
from typing import Optional

from .base import BatchEmitter, StorageError

logger = logging.getLogger(__name__)

# Registry of available emitters
_EMITTER_REGISTRY: dict[str, type[BatchEmitter]] = {}


def register_emitter(emitter_type: str, emitter_class: type[BatchEmitter]) -> None:
    """
    Register a batch emitter class.

    Args:
        emitter_type: Emitter identifier (e.g., 'json')
        emitter_class: Class implementing the BatchEmitter interface
    """
    _EMITTER_REGISTRY[emitter_type.lower()] = emitter_class
    logger.debug(f"Registered batch emitter: {emitter_type}")


def get_emitter(
    emitter_type: Optional[str] = None,
    **kwargs,
) -> BatchEmitter:
    """
    Get a batch emitter instance based on configuration.

    Args:
        emitter_type: Emitter type ('json', 'sqlite' or 'memory').
                      If None, loads from settings.
        **kwargs: Additional arguments passed to the emitter constructor.
                  For json: output_dir, prefix. For sqlite: db_path.

    Returns:
        BatchEmitter instance (not yet opened).

    Raises:
        StorageError: If emitter type is not supported or creation fails.

    Examples:
        emitter = get_emitter('json', output_dir='output/preprocessor-out')
        emitter = get_emitter('sqlite', db_path='data/sessions.db')
    """
    if emitter_type is None:
        from ..config.settings import get_settings

        emitter_type = get_settings().preprocess.emitter

    emitter_type = emitter_type.lower()

    if emitter_type not in _EMITTER_REGISTRY:
        _load_emitter(emitter_type)

    if emitter_type not in _EMITTER_REGISTRY:
        available = list(_EMITTER_REGISTRY.keys()) if _EMITTER_REGISTRY else ["none"]
        raise StorageError(
            f"Unknown batch emitter: '{emitter_type}'. "
            f"Available emitters: {', '.join(available)}"
        )

    emitter_class = _EMITTER_REGISTRY[emitter_type]

    if not kwargs:
        kwargs = _get_default_kwargs(emitter_type)

    try:
        emitter = emitter_class(**kwargs)
        logger.info(f"Created {emitter_type} batch emitter")
        return emitter
    except (TypeError, OSError) as e:
        raise StorageError(f"Failed to create {emitter_type} emitter: {e}") from e


def _load_emitter(emitter_type: str) -> None:
    """Lazy-load an emitter implementation."""
    if emitter_type == "json":
        from .json_writer import JsonBatchWriter

        register_emitter("json", JsonBatchWriter)
    elif emitter_type == "sqlite":
        from .sqlite_backend import SQLiteSessionStore

        register_emitter("sqlite", SQLiteSessionStore)
    elif emitter_type == "memory":
        from .memory import MemoryEmitter

        register_emitter("memory", MemoryEmitter)


def _get_default_kwargs(emitter_type: str) -> dict:
    """Get default constructor arguments from settings."""
    from ..config.settings import get_settings

    settings = get_settings().preprocess

    if emitter_type == "json":
        return {
            "output_dir": Path(settings.output_dir),
            "prefix": settings.batch_prefix,
        }
    elif emitter_type == "sqlite":
        return {"db_path": Path(settings.sqlite_db_path)}
    return {}


def list_available_emitters() -> list[str]:
    """List all registered emitter types."""
    for emitter_type in ["json", "sqlite", "memory"]:
        if emitter_type not in _EMITTER_REGISTRY:
            _load_emitter(emitter_type)

    return list(_EMITTER_REGISTRY.keys())

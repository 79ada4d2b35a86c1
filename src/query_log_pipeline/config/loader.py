"""
YAML configuration loader.

Reads pipeline configuration mappings from plain YAML files.
"""

from pathlib import Path
from typing import Any

import yaml


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """
    Read a YAML configuration file and return its mapping.

    Args:
        file_path: Path to the YAML file

    Returns:
        Configuration as dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is not valid YAML or not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {file_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Config file {file_path} must contain a mapping, "
            f"got {type(config).__name__}"
        )
    return config

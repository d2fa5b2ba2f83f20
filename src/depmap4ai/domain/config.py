from __future__ import annotations

"""
Configuration Domain Management.

Builds the default analysis configuration and handles its persistent
storage as JSON in the user data directory. Unknown keys in a stored file
are kept so newer settings survive a round-trip through older builds.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from depmap4ai.domain.constants import (
    DEFAULT_BUILD_EXTENSIONS,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_EXTERNAL_PREFIXES,
    DEFAULT_MARKUP_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_MEMORY,
    DEFAULT_OUTPUT_DIR_PREFIX,
    DEFAULT_PRUNE_DIRS,
    DEFAULT_SOURCE_EXTENSIONS,
    DEFAULT_SOURCE_ROOTS,
    DEFAULT_TARGET_MODEL,
    MEMORY_POLICY_WARN,
    UNBOUNDED_DEPTH,
)
from depmap4ai.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def get_config_file_path() -> str:
    """Return the default location of the persisted configuration."""
    return os.path.join(get_user_data_dir(), CONFIG_FILENAME)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the analysis pipeline.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # IO Paths
        "project_root": base,
        "entry_file": "",
        "output_base_dir": base,
        "output_dir_prefix": DEFAULT_OUTPUT_DIR_PREFIX,

        # Traversal Bounds
        "max_depth": UNBOUNDED_DEPTH,
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
        "max_memory": DEFAULT_MAX_MEMORY,
        "memory_policy": MEMORY_POLICY_WARN,

        # Import Classification
        "project_package": "",
        "external_prefixes": list(DEFAULT_EXTERNAL_PREFIXES),

        # Filtering & Resolution
        "exclude_patterns": list(DEFAULT_EXCLUDE_PATTERNS),
        "prune_dirs": list(DEFAULT_PRUNE_DIRS),
        "source_roots": list(DEFAULT_SOURCE_ROOTS),
        "source_extensions": list(DEFAULT_SOURCE_EXTENSIONS),
        "markup_extensions": list(DEFAULT_MARKUP_EXTENSIONS),
        "build_extensions": list(DEFAULT_BUILD_EXTENSIONS),

        # Metrics
        "target_model": DEFAULT_TARGET_MODEL,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the stored configuration merged over the defaults.

    A missing file yields the defaults; a corrupt file is reported and
    ignored.

    Args:
        path: Optional explicit config file. Defaults to the user data dir.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    config_file = path or get_config_file_path()

    if not os.path.exists(config_file):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    config.update(data)
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist a configuration dictionary as JSON.

    Args:
        config: The configuration to save.
        path: Optional explicit config file. Defaults to the user data dir.
    """
    config_file = path or get_config_file_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_file)), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")

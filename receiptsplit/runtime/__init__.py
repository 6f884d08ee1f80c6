"""Runtime infrastructure for receiptsplit.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Settings loading via load_settings()

Usage:
    from receiptsplit.runtime import get_logger, get_paths, load_settings

    logger = get_logger(__name__)
    settings = load_settings()
"""

from receiptsplit.runtime.logging import enable_debug_logging, get_logger
from receiptsplit.runtime.paths import ProjectPaths, get_paths, set_data_root
from receiptsplit.runtime.settings import Settings, build_settings, load_settings

__all__ = [
    # Logging
    "get_logger",
    "enable_debug_logging",
    # Paths
    "get_paths",
    "set_data_root",
    "ProjectPaths",
    # Settings
    "Settings",
    "build_settings",
    "load_settings",
]

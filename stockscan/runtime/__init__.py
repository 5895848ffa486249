"""Runtime infrastructure for stockscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Configuration via load_scan_config()
- Correction memory and its stores

Usage:
    from stockscan.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.corrections_file)
"""

from stockscan.runtime.cancellation import CancellationToken, ProgressCallback, ProgressReporter
from stockscan.runtime.config import OCRConfig, ScanConfig, build_scan_config, load_scan_config
from stockscan.runtime.correction_memory import CorrectionMemory, CorrectionStore, InMemoryCorrectionStore
from stockscan.runtime.correction_store import JsonFileCorrectionStore
from stockscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from stockscan.runtime.paths import ProjectPaths, get_paths, set_root

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Paths
    "ProjectPaths",
    "get_paths",
    "set_root",
    # Config
    "OCRConfig",
    "ScanConfig",
    "build_scan_config",
    "load_scan_config",
    # Corrections
    "CorrectionMemory",
    "CorrectionStore",
    "InMemoryCorrectionStore",
    "JsonFileCorrectionStore",
    # Scan control
    "CancellationToken",
    "ProgressCallback",
    "ProgressReporter",
]

"""Centralized path management for stockscan.

This module provides a single source of truth for the on-device files the
scanner keeps: the TOML configuration and the correction memory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_default_root() -> Path:
    """Determine the data root directory."""
    env_root = os.environ.get("STOCKSCAN_HOME")
    if env_root:
        return Path(env_root).expanduser()
    return Path("~/.stockscan").expanduser()


@dataclass
class ProjectPaths:
    """Container for all stockscan paths.

    All paths are computed relative to the data root so that tests and
    alternative installs can relocate everything by changing one directory.
    """

    root: Path = field(default_factory=_get_default_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config_file(self) -> Path:
        """Scanner configuration TOML file."""
        return self.root / "config.toml"

    # --- Learned data ---
    @property
    def corrections_file(self) -> Path:
        """Persisted user corrections (JSON)."""
        return self.root / "corrections.json"

    def ensure_directories(self) -> None:
        """Create the data root if it doesn't exist."""
        self.root.mkdir(parents=True, exist_ok=True)


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def set_root(root: Path) -> None:
    """Point the singleton at a different data root.

    Args:
        root: New data root directory.
    """
    global _paths
    _paths = ProjectPaths(root=root)

"""Centralized path management for receiptsplit.

All on-disk locations (config, persisted splits and members) are derived
from a single data root so tests can point everything at a temp dir.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_data_root() -> Path:
    """Resolve the data root from RECEIPTSPLIT_HOME or the home directory."""
    override = os.environ.get("RECEIPTSPLIT_HOME")
    if override:
        return Path(override).expanduser()
    return Path("~/.receiptsplit").expanduser()


@dataclass
class ProjectPaths:
    """Container for all receiptsplit paths."""

    root: Path = field(default_factory=_get_data_root)

    def __post_init__(self) -> None:
        self.root = Path(self.root).resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def settings_file(self) -> Path:
        """Tax/display settings TOML file."""
        return self.config / "receiptsplit.toml"

    # --- Data paths ---
    @property
    def data(self) -> Path:
        """Persisted state directory (data/)."""
        return self.root / "data"

    @property
    def splits_file(self) -> Path:
        return self.data / "splits.json"

    @property
    def members_file(self) -> Path:
        return self.data / "members.json"

    def ensure_directories(self) -> None:
        """Create config and data directories if they don't exist."""
        self.config.mkdir(parents=True, exist_ok=True)
        self.data.mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the process-wide ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def set_data_root(root: Path | str) -> ProjectPaths:
    """Point path resolution at a different data root (CLI --home, tests)."""
    global _paths
    _paths = ProjectPaths(root=Path(root))
    return _paths

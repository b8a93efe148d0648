"""Project path helpers."""

from __future__ import annotations

import os
from pathlib import Path


def repo_root() -> Path:
    """Return the repository root directory based on package location."""
    override = os.environ.get("COVID19MX_ROOT")
    if override:
        return Path(override).resolve()
    return Path(__file__).resolve().parents[2]


def data_dir() -> Path:
    """Return the data directory path."""
    return repo_root() / "data"


def config_path() -> Path:
    """Return the default config.yml path."""
    return repo_root() / "config.yml"


def log_dir() -> Path:
    """Return the log directory path."""
    return data_dir() / "logs"

"""Resolve the directory that holds session rollout files."""

import os
from pathlib import Path
from typing import Optional, Union

from .runtime_config import RolloutSettings, settings_from_env


PROJECT_SESSIONS_DIRNAME = "_sessions"


def resolve_sessions_root(
    settings: RolloutSettings,
    cwd: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Pick the rollout directory for the given settings.

    Order:
        1. `settings.sessions_root` when it is not blank
        2. project-local `./_sessions` under the working directory

    Parameters:
        settings: Resolved rollout settings.
        cwd: Base directory for relative paths (default: process cwd).
    """
    base_dir = Path(cwd) if cwd is not None else Path.cwd()
    override = settings.sessions_root
    if override and override.strip():
        return _absolute(base_dir, override)
    return _absolute(base_dir, PROJECT_SESSIONS_DIRNAME)


def get_sessions_root() -> Path:
    """Resolve the sessions root from the current environment."""
    return resolve_sessions_root(settings_from_env())


def _absolute(base_dir: Path, raw_path: str) -> Path:
    """Join onto base_dir and normalize without following symlinks."""
    return Path(os.path.normpath(os.path.join(os.path.abspath(base_dir), raw_path)))

"""Per-session rollout filename policies and the filename cache."""

import re
from typing import Dict, Optional

from .runtime_config import RolloutSettings


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class SessionFilenameCache:
    """Session id -> filename mapping, kept for the owner's lifetime."""

    def __init__(self):
        self._filenames: Dict[str, str] = {}

    def get(self, session_id: str) -> Optional[str]:
        """Return the cached filename for a session, if any."""
        return self._filenames.get(session_id)

    def set(self, session_id: str, filename: str) -> None:
        """Remember the filename chosen for a session."""
        self._filenames[session_id] = filename

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._filenames

    def __len__(self) -> int:
        return len(self._filenames)


def sanitize_component(raw_value: str) -> str:
    """Trim and replace every character outside [A-Za-z0-9_-] with '_'."""
    return _UNSAFE_CHARS.sub("_", raw_value.strip())


def name_based_filename(
    session_id: str,
    session_name: Optional[str] = None,
    session_branch: Optional[str] = None,
    sanitize_session_id: bool = False,
) -> str:
    """Build '{branch}-{name}.json' or '{name}.json' from naming hints."""
    name = sanitize_component(session_name) if session_name else ""
    if not name:
        name = sanitize_component(session_id) if sanitize_session_id else session_id

    branch = sanitize_component(session_branch) if session_branch else ""
    if branch:
        return f"{branch}-{name}.json"
    return f"{name}.json"


def timestamp_based_filename(session_id: str, timestamp: str) -> str:
    """Build 'rollout-{YYYY-MM-DD}-{session_id}.json' from an ISO timestamp."""
    datestamp = timestamp.replace(":", "-").replace(".", "-")[:10]
    return f"rollout-{datestamp}-{session_id}.json"


def assign_filename(
    session_id: str,
    settings: RolloutSettings,
    cache: SessionFilenameCache,
    timestamp: str,
) -> str:
    """Return the cached filename for a session, computing it on first use."""
    filename = cache.get(session_id)
    if filename:
        return filename

    if settings.filename_policy == "timestamp":
        filename = timestamp_based_filename(session_id, timestamp)
    else:
        filename = name_based_filename(
            session_id = session_id,
            session_name = settings.session_name,
            session_branch = settings.session_branch,
            sanitize_session_id = settings.sanitize_session_id,
        )

    cache.set(session_id, filename)
    return filename

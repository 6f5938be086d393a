"""Rollout settings parsed from CLI flags and environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


BOOL_TRUE = {"1", "true", "yes", "y", "on"}
BOOL_FALSE = {"0", "false", "no", "n", "off"}

FILENAME_POLICIES = {"name", "timestamp"}

DEFAULT_FALLBACK_ROOT = Path.home() / ".codex" / "sessions"


@dataclass
class RolloutSettings:
    """Rollout storage switches merged from CLI and environment variables."""

    sessions_root: Optional[str] = None
    session_name: Optional[str] = None
    session_branch: Optional[str] = None
    filename_policy: str = "name"
    fallback_root: Path = DEFAULT_FALLBACK_ROOT
    sanitize_session_id: bool = False

    def as_dict(self) -> dict:
        """Return JSON-serializable dict form for diagnostics."""
        return {
            "sessions_root": self.sessions_root,
            "session_name": self.session_name,
            "session_branch": self.session_branch,
            "filename_policy": self.filename_policy,
            "fallback_root": str(self.fallback_root),
            "sanitize_session_id": self.sanitize_session_id,
        }


def add_rollout_args(parser: Any) -> None:
    """Attach rollout storage flags to an argparse parser."""
    import argparse

    parser.add_argument(
        "--sessions-root",
        dest = "sessions_root",
        default = None,
        help = "Directory for rollout files (default: ./_sessions).",
    )
    parser.add_argument(
        "--session-name",
        dest = "session_name",
        default = None,
        help = "Human-readable session name used in the rollout filename.",
    )
    parser.add_argument(
        "--session-branch",
        dest = "session_branch",
        default = None,
        help = "Branch label prefixed to the rollout filename.",
    )
    parser.add_argument(
        "--filename-policy",
        dest = "filename_policy",
        choices = sorted(FILENAME_POLICIES),
        default = None,
        help = "Rollout filename policy.",
    )
    parser.add_argument(
        "--fallback-root",
        dest = "fallback_root",
        default = None,
        help = "Directory used when the sessions root cannot be created.",
    )
    parser.add_argument(
        "--sanitize-session-id",
        dest = "sanitize_session_id",
        action = argparse.BooleanOptionalAction,
        default = None,
        help = "Sanitize the session id when it is used as the filename.",
    )


def rollout_settings_from_args(args: Any = None) -> RolloutSettings:
    """Build rollout settings with CLI > ENV > default precedence."""
    sessions_root = _resolve_raw(
        cli_value = getattr(args, "sessions_root", None),
        env_name = "CODEX_SESSIONS_ROOT",
    )
    session_name = _resolve_raw(
        cli_value = getattr(args, "session_name", None),
        env_name = "CODEX_SESSION_NAME",
    )
    session_branch = _resolve_raw(
        cli_value = getattr(args, "session_branch", None),
        env_name = "CODEX_SESSION_BRANCH",
    )
    filename_policy = _resolve_enum(
        cli_value = getattr(args, "filename_policy", None),
        env_name = "CODEX_SESSION_FILENAME_POLICY",
        default = "name",
        allowed = FILENAME_POLICIES,
    )
    raw_fallback_root = _resolve_str(
        cli_value = getattr(args, "fallback_root", None),
        env_name = "CODEX_SESSIONS_FALLBACK_ROOT",
        default = str(DEFAULT_FALLBACK_ROOT),
    )
    sanitize_session_id = _resolve_bool(
        cli_value = getattr(args, "sanitize_session_id", None),
        env_name = "CODEX_SANITIZE_SESSION_ID",
        default = False,
    )

    return RolloutSettings(
        sessions_root = sessions_root,
        session_name = session_name,
        session_branch = session_branch,
        filename_policy = filename_policy,
        fallback_root = Path(raw_fallback_root).expanduser(),
        sanitize_session_id = sanitize_session_id,
    )


def settings_from_env() -> RolloutSettings:
    """Read rollout settings from the environment only."""
    return rollout_settings_from_args(None)


def _resolve_bool(cli_value: Any, env_name: str, default: bool) -> bool:
    """Resolve bool with CLI > ENV > default precedence."""
    if cli_value is not None:
        return bool(cli_value)

    raw_env = os.getenv(env_name)
    if raw_env is None:
        return default

    normalized = raw_env.strip().lower()
    if normalized in BOOL_TRUE:
        return True
    if normalized in BOOL_FALSE:
        return False
    return default


def _resolve_enum(cli_value: Any, env_name: str, default: str, allowed: set) -> str:
    """Resolve enum option with validation."""
    if cli_value is not None and str(cli_value) in allowed:
        return str(cli_value)

    raw_env = os.getenv(env_name)
    if raw_env is not None:
        normalized = raw_env.strip().lower()
        if normalized in allowed:
            return normalized

    return default


def _resolve_str(cli_value: Any, env_name: str, default: str) -> str:
    """Resolve string option with CLI > ENV > default precedence."""
    if cli_value is not None and str(cli_value).strip():
        return str(cli_value)

    raw_env = os.getenv(env_name)
    if raw_env is not None and raw_env.strip():
        return raw_env.strip()

    return default


def _resolve_raw(cli_value: Any, env_name: str) -> Optional[str]:
    """Resolve an optional string, keeping the raw value untouched."""
    # Blank checks happen downstream, where trimming rules differ per field.
    if cli_value is not None:
        return str(cli_value)
    return os.getenv(env_name)

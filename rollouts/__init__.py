"""Best-effort session rollout persistence."""

from .config import AppConfig, load_config
from .filename_policy import SessionFilenameCache, name_based_filename, timestamp_based_filename
from .rollout_writer import RolloutWriteResult, RolloutWriter, get_default_writer, save_rollout
from .runtime_config import RolloutSettings, add_rollout_args, rollout_settings_from_args, settings_from_env
from .sessions_root import get_sessions_root, resolve_sessions_root

__all__ = [
    "AppConfig",
    "load_config",
    "SessionFilenameCache",
    "name_based_filename",
    "timestamp_based_filename",
    "RolloutWriteResult",
    "RolloutWriter",
    "get_default_writer",
    "save_rollout",
    "RolloutSettings",
    "add_rollout_args",
    "rollout_settings_from_args",
    "settings_from_env",
    "get_sessions_root",
    "resolve_sessions_root",
]

"""Best-effort persistence of session rollouts as pretty-printed JSON files."""

import asyncio
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Set, Union

from .config import AppConfig, load_config
from .filename_policy import SessionFilenameCache, assign_filename
from .runtime_config import RolloutSettings, settings_from_env
from .sessions_root import resolve_sessions_root


@dataclass
class RolloutWriteResult:
    """Outcome of one rollout write attempt."""

    session_id: str
    path: Optional[Path]
    ok: bool
    error: Optional[str] = None
    used_fallback: bool = False


async def ensure_writable_root(
    root: Path,
    fallback_root: Path,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Create the sessions root, falling back to `fallback_root` once.

    The fallback is returned even when it cannot be created either; the
    following write then fails and is logged on its own.

    Parameters:
        root: Preferred rollout directory.
        fallback_root: Directory used when `root` cannot be created.
        logger: Logger receiving the fallback warning.
    """
    log = logger or logging.getLogger("RolloutWriter")
    try:
        await asyncio.to_thread(root.mkdir, parents = True, exist_ok = True)
        return root
    except (OSError, ValueError) as exc:
        log.warning(
            f"Warning: failed to use sessions directory '{root}': {exc}. "
            f"Falling back to '{fallback_root}'."
        )

    try:
        await asyncio.to_thread(fallback_root.mkdir, parents = True, exist_ok = True)
    except (OSError, ValueError):
        # Reported by the write that follows.
        pass
    return fallback_root


def build_rollout_record(
    session_id: str,
    items: Sequence[Any],
    instructions: str,
    timestamp: str,
) -> Dict[str, Any]:
    """Assemble the on-disk `{session, items}` document."""
    return {
        "session": {
            "timestamp": timestamp,
            "id": session_id,
            "instructions": instructions,
        },
        "items": [_to_jsonable(item) for item in items],
    }


class RolloutWriter:
    """Writes one stable JSON file per session id, never raising to callers."""

    def __init__(
        self,
        settings: Optional[RolloutSettings] = None,
        cache: Optional[SessionFilenameCache] = None,
        config_loader: Optional[Callable[[], AppConfig]] = None,
        logger: Optional[logging.Logger] = None,
        cwd: Optional[Union[str, Path]] = None,
    ):
        self.settings = settings
        self.cache = cache if cache is not None else SessionFilenameCache()
        self.config_loader = config_loader or load_config
        self.logger = logger or logging.getLogger("RolloutWriter")
        self.cwd = cwd
        self._futures: Set[Future] = set()
        self._executor: Optional[ThreadPoolExecutor] = None

    def current_settings(self) -> RolloutSettings:
        """Return fixed settings, or read them from the environment per call."""
        if self.settings is not None:
            return self.settings
        return settings_from_env()

    async def write_rollout(self, session_id: str, items: Sequence[Any]) -> RolloutWriteResult:
        """Write the rollout file and report the outcome instead of raising."""
        root: Optional[Path] = None
        file_path: Optional[Path] = None
        used_fallback = False
        try:
            settings = self.current_settings()
            root = resolve_sessions_root(settings, cwd = self.cwd)
            effective_root = await ensure_writable_root(root, settings.fallback_root, self.logger)
            used_fallback = effective_root != root

            timestamp = _now_iso()
            filename = assign_filename(session_id, settings, self.cache, timestamp)
            file_path = effective_root / filename

            config = self.config_loader()
            record = build_rollout_record(
                session_id = session_id,
                items = items,
                instructions = config.instructions,
                timestamp = timestamp,
            )
            content = json.dumps(record, indent = 2, ensure_ascii = False)
            await asyncio.to_thread(file_path.write_text, content, encoding = "utf-8")
        except Exception as exc:
            target = file_path or root or f"session '{session_id}'"
            self.logger.error(f"error: failed to save rollout to {target}: {exc}")
            return RolloutWriteResult(
                session_id = session_id,
                path = file_path,
                ok = False,
                error = str(exc),
                used_fallback = used_fallback,
            )

        return RolloutWriteResult(
            session_id = session_id,
            path = file_path,
            ok = True,
            used_fallback = used_fallback,
        )

    def save_rollout(self, session_id: str, items: Sequence[Any]) -> None:
        """
        Start a rollout write and discard its outcome.

        The write always runs on this writer's worker thread, never as a task
        on the caller's event loop, so shutting that loop down cannot cancel
        it. Failures were already logged by `write_rollout`, so nothing is
        logged or raised here.
        """
        snapshot = list(items)
        future = self._get_executor().submit(asyncio.run, self.write_rollout(session_id, snapshot))
        self._futures.add(future)
        future.add_done_callback(self._futures.discard)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until pending background writes have finished."""
        pending = self._futures.copy()
        if pending:
            wait(pending, timeout = timeout)

    async def drain(self) -> None:
        """Await pending background writes from inside an event loop."""
        pending = [asyncio.wrap_future(future) for future in self._futures.copy()]
        if pending:
            await asyncio.gather(*pending, return_exceptions = True)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers = 1,
                thread_name_prefix = "rollout-writer",
            )
        return self._executor


_default_writer: Optional[RolloutWriter] = None


def get_default_writer() -> RolloutWriter:
    """Return the process-wide writer that backs `save_rollout`."""
    global _default_writer
    if _default_writer is None:
        _default_writer = RolloutWriter()
    return _default_writer


def save_rollout(session_id: str, items: Sequence[Any]) -> None:
    """Persist a session rollout in the background, best-effort."""
    get_default_writer().save_rollout(session_id, items)


def _to_jsonable(item: Any) -> Any:
    """Dump SDK model objects to plain data; pass everything else through."""
    model_dump = getattr(item, "model_dump", None)
    if callable(model_dump):
        return model_dump()
    return item


def _now_iso() -> str:
    """Return current UTC instant as ISO-8601 with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec = "milliseconds").replace("+00:00", "Z")

"""Application config loading (instructions and model endpoint)."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_INSTRUCTIONS_FILE = Path.home() / ".codex" / "instructions.md"


@dataclass
class AppConfig:
    """Config snapshot taken at the time of each rollout write."""

    instructions: str = ""
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None


def load_config(dotenv_path: Optional[Path] = None) -> AppConfig:
    """
    Load config from `.env`, environment variables and the instructions file.

    Instructions come from `CODEX_INSTRUCTIONS` when set, otherwise from the
    file named by `CODEX_INSTRUCTIONS_FILE` (default ~/.codex/instructions.md).
    A missing instructions file yields empty instructions.

    Parameters:
        dotenv_path: Optional explicit `.env` path (default: search from cwd).
    """
    load_dotenv(dotenv_path)

    instructions = os.getenv("CODEX_INSTRUCTIONS")
    if instructions is None:
        instructions = _read_instructions_file(
            Path(os.getenv("CODEX_INSTRUCTIONS_FILE") or DEFAULT_INSTRUCTIONS_FILE).expanduser()
        )

    return AppConfig(
        instructions = instructions,
        model = os.getenv("LLM_MODEL"),
        base_url = os.getenv("LLM_BASE_URL"),
        api_key = os.getenv("LLM_API_KEY"),
    )


def _read_instructions_file(path: Path) -> str:
    """Read instructions text, or return '' when the file is absent."""
    if not path.is_file():
        return ""
    return path.read_text(encoding = "utf-8", errors = "replace").strip()

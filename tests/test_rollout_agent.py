"""
Rollout agent tests: chat turns persist the growing history as a rollout.

Uses a fake chat client, so no LLM endpoint is needed.
"""

import io
import json
import os
import sys
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from tests.utils import FakeChatClient, capture_logger, run_tests

from rollout_agent_demo.rollout_agent import chat, main, parse_args
from rollouts.config import AppConfig
from rollouts.rollout_writer import RolloutWriter
from rollouts.runtime_config import RolloutSettings


def _writer(tmpdir):
    logger, _ = capture_logger("test.rollout_agent")
    return RolloutWriter(
        settings = RolloutSettings(sessions_root = tmpdir, session_name = "demo"),
        config_loader = lambda: AppConfig(instructions = "demo instructions"),
        logger = logger,
    )


def test_chat_saves_history_each_turn():
    """Each turn rewrites the same rollout file with the full history."""
    with tempfile.TemporaryDirectory() as tmpdir:
        client = FakeChatClient(replies = ["first reply", "second reply"])
        writer = _writer(tmpdir)
        history = []

        reply = chat("hello", client, "fake-model", writer, "session-1", history)
        assert reply == "first reply"
        chat("again", client, "fake-model", writer, "session-1", history)
        writer.flush(timeout = 10)

        files = sorted(p.name for p in Path(tmpdir).iterdir())
        assert files == ["demo.json"], f"Unexpected files: {files}"
        data = json.loads((Path(tmpdir) / "demo.json").read_text(encoding = "utf-8"))
        assert data["session"]["id"] == "session-1"
        assert data["session"]["instructions"] == "demo instructions"
        assert [item["content"] for item in data["items"]] == [
            "hello",
            "first reply",
            "again",
            "second reply",
        ]

        last_request = client.requests[-1]
        assert last_request["model"] == "fake-model"
        assert last_request["messages"][0]["role"] == "system"
        assert len(last_request["messages"]) == 4

    print("PASS: test_chat_saves_history_each_turn")
    return True


def test_parse_args_builds_settings():
    """CLI flags flow into rollout settings."""
    args = parse_args(
        [
            "hi",
            "--session-id",
            "abc",
            "--sessions-root",
            "out",
            "--session-branch",
            "dev",
        ]
    )
    assert args.prompt == "hi"
    assert args.session_id == "abc"
    assert args.rollout_settings.sessions_root == "out"
    assert args.rollout_settings.session_branch == "dev"

    print("PASS: test_parse_args_builds_settings")
    return True


def test_print_root():
    """--print-root prints the resolved sessions directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            exit_code = main(["--print-root", "--sessions-root", tmpdir])

        assert exit_code == 0
        assert buffer.getvalue().strip() == os.path.abspath(tmpdir)

    print("PASS: test_print_root")
    return True


if __name__ == "__main__":
    sys.exit(0 if run_tests([
        test_chat_saves_history_each_turn,
        test_parse_args_builds_settings,
        test_print_root,
    ]) else 1)

"""
Shared test utilities for this repository.

Provides:
1) Environment snapshot helpers
2) In-memory log capture
3) Fake OpenAI-compatible chat client
4) Common test runner
"""

import logging
import os
import traceback


ROLLOUT_ENV_VARS = [
    "CODEX_SESSIONS_ROOT",
    "CODEX_SESSION_NAME",
    "CODEX_SESSION_BRANCH",
    "CODEX_SESSION_FILENAME_POLICY",
    "CODEX_SESSIONS_FALLBACK_ROOT",
    "CODEX_SANITIZE_SESSION_ID",
]


def set_env(overrides):
    """
    Set env variables and return previous snapshot for restoration.

    Parameters:
        overrides: Mapping of name -> value, None removes the variable.
    """
    before = {}
    for key, value in overrides.items():
        before[key] = os.environ.get(key)
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    return before


def restore_env(snapshot):
    """
    Restore env variables from snapshot.

    Parameters:
        snapshot: Value returned by set_env.
    """
    for key, value in snapshot.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


def clear_rollout_env():
    """Unset every rollout variable and return the snapshot."""
    return set_env({name: None for name in ROLLOUT_ENV_VARS})


class ListHandler(logging.Handler):
    """Logging handler that keeps formatted records in memory."""

    def __init__(self):
        super().__init__(level = logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)

    def messages(self, level = None):
        """Return messages, optionally filtered by level number."""
        return [
            record.getMessage()
            for record in self.records
            if level is None or record.levelno == level
        ]


def capture_logger(name):
    """
    Build an isolated logger with an in-memory handler.

    Parameters:
        name: Logger name, unique per test to avoid handler sharing.
    """
    handler = ListHandler()
    logger = logging.getLogger(name)
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, handler


class FakeMessage:
    """Simple fake assistant message payload."""

    def __init__(self, content = "ok"):
        self.content = content
        self.tool_calls = None


class FakeChoice:
    """Simple fake choice wrapper."""

    def __init__(self, message):
        self.message = message


class FakeResponse:
    """Simple fake chat completion response."""

    def __init__(self, content = "ok"):
        self.choices = [FakeChoice(FakeMessage(content = content))]


class FakeChatClient:
    """Fake OpenAI-compatible client returning scripted replies."""

    def __init__(self, replies = None):
        self.replies = list(replies or ["ok"])
        self.requests = []
        self.chat = self
        self.completions = self

    def create(self, **kwargs):
        """Record the request and return the next scripted reply."""
        self.requests.append(kwargs)
        content = self.replies.pop(0) if self.replies else "ok"
        return FakeResponse(content = content)


def run_tests(test_functions):
    """
    Run test callables and print a compact summary.

    Parameters:
        test_functions: List of test functions.
    """
    failed = []
    for test_function in test_functions:
        print(f"\n{'=' * 60}")
        print(f"Running: {test_function.__name__}")
        print("=" * 60)
        try:
            if not test_function():
                failed.append(test_function.__name__)
        except Exception as exc:
            print(f"FAILED: {exc}")
            traceback.print_exc()
            failed.append(test_function.__name__)

    passed = len(test_functions) - len(failed)
    print(f"\n{'=' * 60}")
    print(f"Results: {passed}/{len(test_functions)} passed")
    print("=" * 60)
    if failed:
        print(f"FAILED: {failed}")
        return False
    print("All tests passed!")
    return True

"""conftest.py - Shared fixtures: a fake runtime, an in-memory sink, a fixed clock."""

from datetime import datetime, timezone
from typing import Any, List, Optional

import pytest

import faultlog
from faultlog.events import ErrorEvent
from faultlog.provider import OutputProvider
from faultlog.runtime import RuntimeHooks

FIXED_NOW = datetime(2024, 3, 7, 14, 2, 11, tzinfo=timezone.utc)


class FakeRuntime(RuntimeHooks):
    """Records installations; ``terminate`` raises SystemExit like sys.exit."""

    def __init__(self, last_error: Optional[ErrorEvent] = None) -> None:
        self.error_handler = None
        self.error_level = None
        self.exception_handler = None
        self.shutdown_handler = None
        self.silenced = False
        self.restored = False
        self.exit_codes: List[int] = []
        self.last_error = last_error

    def install_error_handler(self, callback, level):
        self.error_handler = callback
        self.error_level = level

    def install_exception_handler(self, callback):
        self.exception_handler = callback

    def install_shutdown_handler(self, callback):
        self.shutdown_handler = callback

    def silence_builtin_reporting(self):
        self.silenced = True

    def last_fatal_error(self):
        return self.last_error

    def terminate(self, status):
        self.exit_codes.append(status)
        raise SystemExit(status)

    def restore(self):
        self.restored = True


class MemorySink(OutputProvider):
    """Collects every call as a tuple; optionally fails on demand."""

    def __init__(self, accept: bool = True, fail_with: Optional[Exception] = None):
        self.calls: List[tuple] = []
        self.accept = accept
        self.fail_with = fail_with

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    def log_error(self, code, description, file, line):
        self._record("error", code, description, file, line)
        return self.accept

    def log_exception(self, exc):
        self._record("exception", exc)

    def log_message(self, message):
        self._record("message", message)

    def log_value(self, value, comment=""):
        self._record("value", value, comment)


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture(autouse=True)
def _unregister(monkeypatch):
    """Every test starts and ends unregistered, with the debug flag unset."""
    monkeypatch.delenv("FAULTLOG_DEBUG", raising=False)
    faultlog.reset()
    yield
    faultlog.reset()

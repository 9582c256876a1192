"""test_handler.py - Unit and integration tests for FaultLogHandler.

Covers:
    - emit() maps logging levels onto user-level severity codes
    - emit() uses the record's pathname and line number
    - emit() prepends the exception class name when exc_info is present
    - Records from faultlog's own loggers are dropped
    - Without an explicit or registered dispatcher, records are dropped
    - The dispatcher's level still filters bridged records
    - CRITICAL records end the process through the dispatcher
    - Sink failures go through logging's handleError
    - Integration: a plain logger with the handler attached
"""

import logging
import sys

import pytest

import faultlog
from faultlog import severity
from faultlog.dispatcher import Dispatcher
from faultlog.handler import FaultLogHandler

from conftest import FakeRuntime, MemorySink


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_record(
    msg: str,
    level: int = logging.INFO,
    exc_info=None,
    name: str = "app",
) -> logging.LogRecord:
    """Create a minimal LogRecord attributed to /srv/app.py:12."""
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="/srv/app.py",
        lineno=12,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


# ---------------------------------------------------------------------------
# emit()
# ---------------------------------------------------------------------------


class TestEmit:
    def setup_method(self):
        self.sink = MemorySink()
        self.runtime = FakeRuntime()
        self.handler = FaultLogHandler(
            Dispatcher(self.sink, severity.ALL, runtime=self.runtime)
        )

    @pytest.mark.parametrize(
        "level, code",
        [
            (logging.DEBUG, severity.E_USER_NOTICE),
            (logging.INFO, severity.E_USER_NOTICE),
            (logging.WARNING, severity.E_USER_WARNING),
            (logging.ERROR, severity.E_USER_WARNING),
        ],
    )
    def test_level_mapping(self, level, code):
        self.handler.handle(_make_record("disk low", level))
        assert self.sink.calls == [("error", code, "disk low", "/srv/app.py", 12)]

    def test_critical_record_exits(self):
        with pytest.raises(SystemExit):
            self.handler.handle(_make_record("db gone", logging.CRITICAL))
        assert self.sink.calls[0][1] == severity.E_USER_ERROR
        assert self.runtime.exit_codes == [1]

    def test_exception_class_is_prepended(self):
        try:
            raise ValueError("bad id")
        except ValueError:
            exc_info = sys.exc_info()
        self.handler.handle(_make_record("lookup failed", logging.ERROR, exc_info))
        assert self.sink.calls[0][2] == "ValueError: lookup failed"

    @pytest.mark.parametrize("name", ["faultlog", "faultlog.file_sink"])
    def test_own_records_are_dropped(self, name):
        self.handler.handle(_make_record("internal", logging.WARNING, name=name))
        assert self.sink.calls == []

    def test_similarly_named_logger_is_not_dropped(self):
        self.handler.handle(_make_record("x", logging.WARNING, name="faultlogger"))
        assert len(self.sink.calls) == 1

    def test_sink_failure_goes_through_handle_error(self, capsys):
        self.sink.fail_with = OSError("disk full")
        self.handler.handle(_make_record("w", logging.WARNING))
        assert "Logging error" in capsys.readouterr().err


class TestDispatcherLookup:
    def test_no_dispatcher_drops_records(self):
        FaultLogHandler().handle(_make_record("nobody listens", logging.WARNING))

    def test_registered_dispatcher_is_used(self, sink, runtime):
        faultlog.register(sink, severity.ALL, runtime=runtime)
        FaultLogHandler().handle(_make_record("late", logging.WARNING))
        assert sink.calls == [("error", severity.E_USER_WARNING, "late", "/srv/app.py", 12)]

    def test_level_filters_bridged_records(self, sink, runtime):
        faultlog.register(sink, severity.WARNINGS, runtime=runtime)
        handler = FaultLogHandler()
        handler.handle(_make_record("chatty", logging.INFO))
        handler.handle(_make_record("important", logging.WARNING))
        assert [c[2] for c in sink.calls] == ["important"]


# ---------------------------------------------------------------------------
# Integration
# ---------------------------------------------------------------------------


class TestIntegration:
    def test_logger_with_handler_attached(self, sink, runtime):
        faultlog.register(sink, severity.ALL, runtime=runtime)
        logger = logging.getLogger("test_handler.payments")
        logger.setLevel(logging.DEBUG)
        handler = FaultLogHandler()
        logger.addHandler(handler)
        try:
            logger.info("payment attempt user_id=%d", 42)
            logger.warning("retrying charge")
        finally:
            logger.removeHandler(handler)

        assert [(c[1], c[2]) for c in sink.calls] == [
            (severity.E_USER_NOTICE, "payment attempt user_id=42"),
            (severity.E_USER_WARNING, "retrying charge"),
        ]
        assert all(c[3] == __file__ for c in sink.calls)

"""test_formatting.py - Unit tests for events and record formatting.

Covers:
    - ErrorEvent / ExceptionEvent are immutable
    - ExceptionEvent.from_exception takes file/line from the innermost frame
    - fill() substitutes known placeholders only, without re-expansion
    - describe_type() for scalars, containers, callables, classes, objects
    - render_error / render_exception / render_message / render_dump layouts
"""

import io
from datetime import datetime, timezone

import pytest

from faultlog import formatting, severity
from faultlog.events import ErrorEvent, ExceptionEvent

WHEN = datetime(2024, 3, 7, 14, 2, 11, tzinfo=timezone.utc)


class _Widget:
    def spin(self):
        pass


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEvents:
    def test_error_event_stores_fields(self):
        event = ErrorEvent(severity.E_WARNING, "disk low", "app.py", 12, WHEN)
        assert (event.code, event.description, event.file, event.line) == (
            severity.E_WARNING,
            "disk low",
            "app.py",
            12,
        )
        assert event.timestamp == WHEN

    def test_error_event_rejects_assignment(self):
        event = ErrorEvent(severity.E_WARNING, "disk low", "app.py", 12)
        with pytest.raises(AttributeError):
            event.code = severity.E_ERROR

    def test_error_event_defaults_to_aware_local_timestamp(self):
        event = ErrorEvent(severity.E_NOTICE, "x", "f", 1)
        assert event.timestamp.tzinfo is not None

    def test_exception_event_uses_innermost_frame(self):
        def inner():
            raise KeyError("order-7")

        try:
            inner()
        except KeyError as exc:
            event = ExceptionEvent.from_exception(exc, WHEN)

        assert event.type_name == "KeyError"
        assert event.message == "'order-7'"
        assert event.file == __file__
        assert event.line == inner.__code__.co_firstlineno + 1

    def test_exception_event_without_traceback(self):
        event = ExceptionEvent.from_exception(ValueError("never raised"))
        assert (event.file, event.line) == ("<unknown>", 0)

    def test_exception_event_qualifies_non_builtin_classes(self):
        event = ExceptionEvent.from_exception(io.UnsupportedOperation("nope"))
        assert event.type_name == "io.UnsupportedOperation"

    def test_exception_event_rejects_assignment(self):
        event = ExceptionEvent.from_exception(ValueError("x"))
        with pytest.raises(AttributeError):
            event.message = "y"


# ---------------------------------------------------------------------------
# fill()
# ---------------------------------------------------------------------------


class TestFill:
    def test_fill_replaces_known_placeholders(self):
        assert formatting.fill("[{a}] {b}!", {"a": 1, "b": "two"}) == "[1] two!"

    def test_fill_leaves_unknown_placeholders(self):
        assert formatting.fill("{a} {zzz}", {"a": "x"}) == "x {zzz}"

    def test_fill_does_not_expand_braces_inside_values(self):
        assert formatting.fill("{a}-{b}", {"a": "{b}", "b": "B"}) == "{b}-B"

    def test_fill_handles_unbalanced_braces(self):
        assert formatting.fill("{a} {oops", {"a": 1}) == "1 {oops"


# ---------------------------------------------------------------------------
# describe_type()
# ---------------------------------------------------------------------------


class TestDescribeType:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, "None"),
            (True, "Boolean"),
            (7, "Integer"),
            (2.5, "Float"),
            ("3.14", "Numeric"),
            ("hello", "String"),
            (b"abc", "Bytes[3]"),
            ([1, 2, 3], "list[3]"),
            ({"a": 1}, "dict[1]"),
            ((), "tuple[0]"),
        ],
    )
    def test_describe_scalars_and_containers(self, value, expected):
        assert formatting.describe_type(value) == expected

    def test_describe_function_and_method(self):
        def handler():
            pass

        assert formatting.describe_type(handler).startswith("(callable) Function: ")
        assert formatting.describe_type(_Widget().spin) == "(callable) Method: _Widget.spin"

    def test_describe_class_and_instance(self):
        assert formatting.describe_type(_Widget) == "Class: test_formatting._Widget"
        assert formatting.describe_type(_Widget()) == "Object of class: test_formatting._Widget"

    def test_describe_stream_as_resource(self):
        assert formatting.describe_type(io.StringIO()).startswith("Resource: ")


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


class TestRenderers:
    FMT = "%Y-%m-%d %H:%M:%S"

    def test_render_error(self):
        event = ErrorEvent(severity.E_USER_WARNING, "disk low\n", "/srv/app.py", 42, WHEN)
        line = formatting.render_error(event, self.FMT)
        assert line == (
            "[2024-03-07 14:02:11] <WARNING: User generated warning> "
            "disk low (in /srv/app.py:42)"
        )

    def test_render_exception(self):
        event = ExceptionEvent("ValueError", "bad id", "/srv/app.py", 9, WHEN)
        line = formatting.render_exception(event, self.FMT)
        assert line == "[2024-03-07 14:02:11] <EXCEPTION: ValueError> bad id (in /srv/app.py:9)"

    def test_render_message(self):
        assert formatting.render_message("hello", self.FMT, WHEN) == "[2024-03-07 14:02:11] hello"

    def test_render_dump_puts_value_on_following_lines(self):
        text = formatting.render_dump({"retries": 3}, "state", self.FMT, WHEN)
        head, value = text.split("\n", 1)
        assert head == "[2024-03-07 14:02:11] DUMP <dict[1]>: state"
        assert value == "{'retries': 3}"

    def test_default_timestamp_format_is_iso8601(self):
        assert formatting.format_timestamp(WHEN) == "2024-03-07T14:02:11+0000"

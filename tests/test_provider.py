"""test_provider.py - Unit tests for OutputProvider and ScreenSink.

Covers:
    - OutputProvider is abstract
    - ScreenSink writes one record per call and accepts every error
    - Default stream is stderr; colours are off for non-tty streams
    - ANSI colouring of the header and continuation lines, custom colour slots
"""

import io

import pytest

from faultlog import severity
from faultlog.provider import DEFAULT_COLORS, OutputProvider, ScreenSink

FMT = "%Y"


def _screen(**options) -> ScreenSink:
    options.setdefault("stream", io.StringIO())
    options.setdefault("timestamp_format", FMT)
    return ScreenSink(**options)


class TestOutputProvider:
    def test_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            OutputProvider()


class TestScreenSink:
    def test_log_error_writes_record_and_accepts(self):
        stream = io.StringIO()
        accepted = _screen(stream=stream).log_error(
            severity.E_USER_WARNING, "disk low", "/srv/app.py", 42
        )
        assert accepted is True
        line = stream.getvalue()
        assert line.endswith("<WARNING: User generated warning> disk low (in /srv/app.py:42)\n")
        assert "\033[" not in line

    def test_log_message_and_exception(self):
        stream = io.StringIO()
        screen = _screen(stream=stream)
        screen.log_message("started")
        screen.log_exception(ValueError("bad id"))
        first, second = stream.getvalue().splitlines()
        assert first.endswith("] started")
        assert "<EXCEPTION: ValueError> bad id" in second

    def test_log_value_spans_lines(self):
        stream = io.StringIO()
        _screen(stream=stream).log_value({"a": 1}, "state")
        assert stream.getvalue().splitlines()[1:] == ["{'a': 1}"]

    def test_default_stream_is_stderr(self, capsys):
        ScreenSink(timestamp_format=FMT).log_message("to stderr")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.endswith("] to stderr\n")

    def test_colored_header_and_body(self):
        stream = io.StringIO()
        _screen(stream=stream, use_colors=True).log_value([1], "ids")
        head, body = stream.getvalue().rstrip("\n").split("\n")
        assert head.startswith(f"\033[{DEFAULT_COLORS['dump-text']}m")
        assert head.endswith("\033[0m")
        assert body == f"\033[{DEFAULT_COLORS['dump-color']}m[1]\033[0m"

    def test_color_slot_follows_category(self):
        stream = io.StringIO()
        _screen(stream=stream, use_colors=True).log_error(severity.E_NOTICE, "n", "f", 1)
        assert stream.getvalue().startswith(f"\033[{DEFAULT_COLORS['notice-text']}m")

    def test_custom_colors_merge_over_defaults(self):
        stream = io.StringIO()
        screen = _screen(stream=stream, use_colors=True, colors={"error-text": "1;35"})
        screen.log_error(severity.E_USER_ERROR, "boom", "f", 1)
        screen.log_message("m")
        first, second = stream.getvalue().splitlines()
        assert first.startswith("\033[1;35m")
        assert second.startswith(f"\033[{DEFAULT_COLORS['message-text']}m")

    def test_options_mapping_is_accepted(self):
        stream = io.StringIO()
        ScreenSink({"stream": stream, "timestamp_format": FMT, "unknown": 1}).log_message("x")
        assert stream.getvalue().endswith("] x\n")

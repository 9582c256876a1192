"""provider.py - Pluggable output destinations for intercepted signals.

This module defines the OutputProvider interface and the default screen
implementation:

    OutputProvider  : abstract sink with the four logging operations.
    ScreenSink      : writes plain-text records to a stream (default: stderr),
                      optionally coloured with ANSI escape codes.

``FileSink`` (rotating log file) lives in ``faultlog.file_sink``. Embedding
applications may subclass OutputProvider to send records anywhere else and
pass an instance to ``faultlog.register()``.

Typical usage::

    import faultlog
    from faultlog.provider import ScreenSink

    faultlog.register(ScreenSink(colors={"error-text": "1;35"}))
"""

import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from . import formatting, severity
from .config import merge_options
from .events import ErrorEvent, ExceptionEvent


class OutputProvider(ABC):
    """Abstract base class for every faultlog sink.

    The dispatcher calls exactly one of these methods per intercepted signal.
    ``log_value`` is only ever called while debug mode is active.

    Example:
        >>> class MemorySink(OutputProvider):
        ...     def __init__(self):
        ...         self.lines = []
        ...     def log_error(self, code, description, file, line):
        ...         self.lines.append(description)
        ...         return True
        ...     def log_exception(self, exc):
        ...         self.lines.append(repr(exc))
        ...     def log_message(self, message):
        ...         self.lines.append(message)
        ...     def log_value(self, value, comment=""):
        ...         self.lines.append(f"{comment}: {value!r}")
    """

    @abstractmethod
    def log_error(self, code: int, description: str, file: str, line: int) -> bool:
        """Record an error, warning or notice signal.

        Args:
            code: Severity code (``faultlog.severity.E_*``).
            description: The signal's message.
            file: Source file the signal originated from.
            line: Line number in ``file``.

        Returns:
            True if the record was accepted.
        """

    @abstractmethod
    def log_exception(self, exc: BaseException) -> None:
        """Record an uncaught exception."""

    @abstractmethod
    def log_message(self, message: str) -> None:
        """Record a free-form message."""

    @abstractmethod
    def log_value(self, value: Any, comment: str = "") -> None:
        """Record a dump of ``value`` (debug mode only)."""


DEFAULT_COLORS: Dict[str, str] = {
    "error-color": "31",
    "error-text": "1;31",
    "warning-color": "33",
    "warning-text": "1;33",
    "notice-color": "34",
    "notice-text": "1;34",
    "exception-color": "31",
    "exception-text": "1;31",
    "message-color": "37",
    "message-text": "1;37",
    "dump-color": "35",
    "dump-text": "1;35",
}


class ScreenSink(OutputProvider):
    """Write records to a stream, one block per signal.

    This is the sink ``register()`` installs when debug mode is active and no
    provider was supplied.

    Attributes:
        _stream: Writable file-like object.
        _timestamp_format (str): strftime pattern for ``{timestamp}``.
        _colors (dict): Named colour slots mapped to ANSI SGR parameters.
        _use_colors (bool): Wrap output in escape codes.
    """

    _defaults = {
        "timestamp_format": formatting.DEFAULT_TIMESTAMP_FORMAT,
        "colors": None,
        "stream": None,
        "use_colors": None,
    }

    def __init__(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """Initialise the screen sink.

        Args:
            options: Mapping of recognised options. Unknown keys are ignored.
            **kwargs: Same options as keyword arguments; these win over
                ``options``.

        Recognised options:
            timestamp_format: strftime pattern. Defaults to ISO-8601.
            colors: Partial mapping of colour slots (``error-color``,
                ``error-text``, ``warning-color`` ...) merged over the defaults.
            stream: Writable stream. Defaults to ``sys.stderr``.
            use_colors: Force colour on or off. Defaults to ``stream.isatty()``.
        """
        opts = merge_options(self._defaults, options, owner="ScreenSink", **kwargs)
        self._stream = opts["stream"] or sys.stderr
        self._timestamp_format = opts["timestamp_format"]
        self._colors = dict(DEFAULT_COLORS)
        if isinstance(opts["colors"], Mapping):
            self._colors.update(opts["colors"])
        use_colors = opts["use_colors"]
        if use_colors is None:
            isatty = getattr(self._stream, "isatty", None)
            use_colors = bool(isatty and isatty())
        self._use_colors = use_colors

    # ---------------------------------------------------------------------- #
    # OutputProvider
    # ---------------------------------------------------------------------- #

    def log_error(self, code: int, description: str, file: str, line: int) -> bool:
        event = ErrorEvent(code, description, file, line)
        kind = severity.category(code).lower()
        self._write(formatting.render_error(event, self._timestamp_format), kind)
        return True

    def log_exception(self, exc: BaseException) -> None:
        event = ExceptionEvent.from_exception(exc)
        self._write(
            formatting.render_exception(event, self._timestamp_format), "exception"
        )

    def log_message(self, message: str) -> None:
        self._write(formatting.render_message(message, self._timestamp_format), "message")

    def log_value(self, value: Any, comment: str = "") -> None:
        self._write(
            formatting.render_dump(value, comment, self._timestamp_format), "dump"
        )

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _paint(self, text: str, slot: str) -> str:
        code = self._colors.get(slot)
        if not self._use_colors or not code:
            return text
        return f"\033[{code}m{text}\033[0m"

    def _write(self, record: str, kind: str) -> None:
        # Header line in the "-text" colour, continuation lines in "-color".
        head, sep, rest = record.partition("\n")
        out = self._paint(head, f"{kind}-text")
        if sep:
            out += "\n" + self._paint(rest, f"{kind}-color")
        print(out, file=self._stream)
        flush = getattr(self._stream, "flush", None)
        if flush:
            flush()

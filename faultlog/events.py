"""events.py - Immutable records built for each intercepted signal.

An ``ErrorEvent`` is created for every error/warning/notice signal that
passes the dispatcher's severity filter; an ``ExceptionEvent`` for every
uncaught exception. Sinks render these records through the templates in
``faultlog.formatting``.

Both classes use ``__slots__`` and reject attribute assignment after
construction, so an event handed to a sink cannot be altered on its way to
the log file.
"""

import traceback
from datetime import datetime
from typing import Optional, Tuple


def _now() -> datetime:
    return datetime.now().astimezone()


class _Frozen:
    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")


class ErrorEvent(_Frozen):
    """A runtime error, warning or notice signal.

    Attributes:
        code (int): Severity code, one of the ``E_*`` constants in
            ``faultlog.severity``.
        description (str): The signal's message.
        file (str): Source file the signal was raised from.
        line (int): Line number in ``file``.
        timestamp (datetime): Local, timezone-aware wall-clock time of creation.
    """

    __slots__ = ("code", "description", "file", "line", "timestamp")

    def __init__(
        self,
        code: int,
        description: str,
        file: str,
        line: int,
        timestamp: Optional[datetime] = None,
    ) -> None:
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "description", description)
        object.__setattr__(self, "file", file)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "timestamp", timestamp or _now())

    def __eq__(self, other):
        if not isinstance(other, ErrorEvent):
            return NotImplemented
        return (self.code, self.description, self.file, self.line) == (
            other.code,
            other.description,
            other.file,
            other.line,
        )

    def __hash__(self):
        return hash((self.code, self.description, self.file, self.line))

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"ErrorEvent({self.code}, {self.description!r}, "
            f"{self.file!r}, {self.line})"
        )


def exception_location(exc: BaseException) -> Tuple[str, int]:
    """Return ``(file, line)`` of the innermost frame of ``exc``'s traceback.

    Falls back to ``("<unknown>", 0)`` for exceptions that were never raised.
    """
    tb = exc.__traceback__
    if tb is None:
        return "<unknown>", 0
    frame = traceback.extract_tb(tb)[-1]
    return frame.filename, frame.lineno or 0


def qualified_name(klass: type) -> str:
    """``module.QualName`` for a class, bare ``QualName`` for builtins."""
    module = klass.__module__
    if module in (None, "builtins", "__main__"):
        return klass.__qualname__
    return f"{module}.{klass.__qualname__}"


class ExceptionEvent(_Frozen):
    """An uncaught exception, flattened for rendering.

    Attributes:
        type_name (str): Qualified class name of the exception.
        message (str): ``str(exc)``.
        file (str): File of the innermost traceback frame.
        line (int): Line of the innermost traceback frame.
        timestamp (datetime): Local, timezone-aware time of creation.
    """

    __slots__ = ("type_name", "message", "file", "line", "timestamp")

    def __init__(
        self,
        type_name: str,
        message: str,
        file: str,
        line: int,
        timestamp: Optional[datetime] = None,
    ) -> None:
        object.__setattr__(self, "type_name", type_name)
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "file", file)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "timestamp", timestamp or _now())

    @classmethod
    def from_exception(
        cls, exc: BaseException, timestamp: Optional[datetime] = None
    ) -> "ExceptionEvent":
        """Build an event from a live exception object.

        Example:
            >>> try:
            ...     raise KeyError("id")
            ... except KeyError as exc:
            ...     event = ExceptionEvent.from_exception(exc)
            >>> event.type_name
            'KeyError'
        """
        file, line = exception_location(exc)
        return cls(qualified_name(type(exc)), str(exc), file, line, timestamp)

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"ExceptionEvent({self.type_name!r}, {self.message!r}, "
            f"{self.file!r}, {self.line})"
        )

"""runtime.py - Hook layer between the dispatcher and the Python runtime.

The dispatcher never touches interpreter globals itself. It asks a
``RuntimeHooks`` implementation to install its callbacks, to report the
last error the runtime handled on its own, and to end the process.
``PythonRuntime`` is the real implementation:

    error handler      ``warnings.showwarning``. Warnings inside the level
                       go to the callback. Warnings outside it are not
                       displayed; they only become the last error.
    exception handler  ``sys.excepthook`` and ``threading.excepthook``.
    shutdown handler   ``atexit``.
    unraisable errors  ``sys.unraisablehook``; recorded as the last error
                       (``E_CORE_WARNING``) and passed on.
    silencing          A ``warnings.catch_warnings`` block with the
                       ``"default"`` action: every category reaches the
                       error handler, repeats from one location are dropped.

Python has no fatal error class that bypasses these hooks, so the "last
fatal error" reported at shutdown is only ever a warning outside the
level or an unraisable exception.
"""

import atexit
import logging
import os
import sys
import threading
import warnings
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, NoReturn, Optional, Tuple

from . import severity
from .events import ErrorEvent, exception_location

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[int, str, str, int], bool]
ExceptionCallback = Callable[[BaseException], None]


class RuntimeHooks(ABC):
    """Everything the dispatcher needs from the platform."""

    @abstractmethod
    def install_error_handler(self, callback: ErrorCallback, level: int) -> None:
        """Route error/warning/notice signals whose code overlaps ``level``."""

    @abstractmethod
    def install_exception_handler(self, callback: ExceptionCallback) -> None:
        """Route uncaught exceptions."""

    @abstractmethod
    def install_shutdown_handler(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once when the process exits."""

    @abstractmethod
    def silence_builtin_reporting(self) -> None:
        """Make the installed handlers the sole reporter."""

    @abstractmethod
    def last_fatal_error(self) -> Optional[ErrorEvent]:
        """The last error the runtime handled without the error handler."""

    @abstractmethod
    def terminate(self, status: int) -> NoReturn:
        """End the process with ``status``."""

    @abstractmethod
    def restore(self) -> None:
        """Undo every installation made through this object."""


class PythonRuntime(RuntimeHooks):
    """RuntimeHooks for the running CPython interpreter."""

    def __init__(self) -> None:
        self._saved: Dict[str, Tuple[Any, str, Any]] = {}
        self._last_error: Optional[ErrorEvent] = None
        self._shutdown_callback: Optional[Callable[[], None]] = None
        self._shutting_down = False
        self._catcher: Optional[warnings.catch_warnings] = None
        self._local = threading.local()

    def _save(self, owner: Any, attr: str) -> Any:
        key = f"{getattr(owner, '__name__', owner)}.{attr}"
        if key not in self._saved:
            self._saved[key] = (owner, attr, getattr(owner, attr))
        return self._saved[key][2]

    # ---------------------------------------------------------------------- #
    # RuntimeHooks
    # ---------------------------------------------------------------------- #

    def install_error_handler(self, callback: ErrorCallback, level: int) -> None:
        self._save(warnings, "showwarning")
        previous_unraisable = self._save(sys, "unraisablehook")
        local = self._local

        def showwarning(message, category, filename, lineno, file=None, line=None):
            code = severity.code_for_warning(category)
            description = str(message)
            # A warning raised while a sink is writing is only recorded.
            if code & level and not getattr(local, "busy", False):
                local.busy = True
                try:
                    callback(code, description, filename, lineno)
                finally:
                    local.busy = False
                return
            self._last_error = ErrorEvent(code, description, filename, lineno)

        def unraisablehook(unraisable):
            exc = unraisable.exc_value
            prefix = unraisable.err_msg or "Exception ignored in"
            description = f"{prefix}: {unraisable.object!r}"
            if exc is not None:
                description += f": {type(exc).__name__}: {exc}"
                file, line = exception_location(exc)
            else:
                file, line = "<unknown>", 0
            self._last_error = ErrorEvent(
                severity.E_CORE_WARNING, description, file, line
            )
            previous_unraisable(unraisable)

        warnings.showwarning = showwarning
        sys.unraisablehook = unraisablehook
        logger.debug("error handler installed for level %d", level)

    def install_exception_handler(self, callback: ExceptionCallback) -> None:
        self._save(sys, "excepthook")
        self._save(threading, "excepthook")

        def excepthook(exc_type, exc, tb):
            callback(exc if exc is not None else exc_type())

        def thread_excepthook(args):
            if args.exc_type is SystemExit:
                return
            exc = args.exc_value
            callback(exc if exc is not None else args.exc_type())

        sys.excepthook = excepthook
        threading.excepthook = thread_excepthook
        logger.debug("exception handler installed")

    def install_shutdown_handler(self, callback: Callable[[], None]) -> None:
        def on_exit():
            self._shutting_down = True
            callback()

        self._shutdown_callback = on_exit
        atexit.register(on_exit)
        logger.debug("shutdown handler installed")

    def silence_builtin_reporting(self) -> None:
        if self._catcher is None:
            self._catcher = warnings.catch_warnings()
            self._catcher.__enter__()
        warnings.simplefilter("default")

    def last_fatal_error(self) -> Optional[ErrorEvent]:
        return self._last_error

    def terminate(self, status: int) -> NoReturn:
        """End the process with ``status``.

        On the main thread this raises ``SystemExit`` so ``atexit`` handlers
        still run. From any other thread, or while exit handlers are already
        running, ``SystemExit`` would not end the process, so the standard
        streams are flushed and ``os._exit`` is used instead.
        """
        if self._shutting_down or threading.current_thread() is not threading.main_thread():
            for stream in (sys.stdout, sys.stderr):
                try:
                    stream.flush()
                except (AttributeError, OSError, ValueError):
                    pass
            os._exit(status)
        sys.exit(status)

    def restore(self) -> None:
        if self._catcher is not None:
            self._catcher.__exit__(None, None, None)
            self._catcher = None
        for owner, attr, value in self._saved.values():
            setattr(owner, attr, value)
        self._saved.clear()
        if self._shutdown_callback is not None:
            atexit.unregister(self._shutdown_callback)
            self._shutdown_callback = None
        logger.debug("runtime hooks restored")

"""handler.py - Bridge from the standard logging pipeline into faultlog.

FaultLogHandler is a ``logging.Handler`` subclass that turns log records
into error signals, so that messages an application already logs are
filtered, classified and persisted by the registered dispatcher like any
runtime warning.

Level mapping (see ``severity.code_for_level``):
    CRITICAL and above  → E_USER_ERROR   (fatal: the process exits with 1)
    WARNING, ERROR      → E_USER_WARNING
    anything lower      → E_USER_NOTICE

Typical usage::

    import logging
    import faultlog
    from faultlog import FaultLogHandler, FileSink

    faultlog.register(FileSink())
    logging.getLogger().addHandler(FaultLogHandler())

    logging.getLogger("app").warning("disk almost full")  # goes to the log file
"""

import logging
from typing import Optional

from . import severity
from .dispatcher import Dispatcher, get_dispatcher

_OWN_LOGGER = "faultlog"


class FaultLogHandler(logging.Handler):
    """A logging.Handler that forwards records to a faultlog Dispatcher.

    Records from faultlog's own loggers (``faultlog`` and ``faultlog.*``)
    are dropped.

    Thread-safety:
        ``logging.Handler.handle`` serialises ``emit()`` with the handler's
        RLock. The dispatcher and the sinks do their own locking.

    Attributes:
        _dispatcher (Dispatcher | None): Explicit target. When None, the
            dispatcher registered at emit time is used, and records are
            silently dropped while none is registered.
    """

    def __init__(
        self, dispatcher: Optional[Dispatcher] = None, level: int = logging.NOTSET
    ) -> None:
        super().__init__(level)
        self._dispatcher = dispatcher

    def emit(self, record: logging.LogRecord) -> None:
        """Translate ``record`` into an error signal.

        Failures of the sink are routed through ``handleError`` as the
        logging machinery expects. ``SystemExit`` from a fatal record is
        not caught.
        """
        if record.name == _OWN_LOGGER or record.name.startswith(_OWN_LOGGER + "."):
            return
        dispatcher = self._dispatcher or get_dispatcher()
        if dispatcher is None:
            return
        try:
            code = severity.code_for_level(record.levelno)
            dispatcher.handle_error(
                code, self._describe(record), record.pathname, record.lineno
            )
        except Exception:
            self.handleError(record)

    def _describe(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        # Prepend the exception class so the one-line record names the failure.
        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            return f"{type(exc).__name__}: {msg}"
        return msg

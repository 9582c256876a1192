"""dispatcher.py - The process-wide registration point and signal router.

A ``Dispatcher`` owns the active output provider, the severity level and
the debug flag. ``register()`` builds one, installs its handlers through the
runtime hook layer and commits it as the process's dispatcher. From then on
its configuration is fixed:

    Unregistered --register()--> Registered   (until the process exits)

A second ``register()`` raises ``AlreadyRegisteredError``. ``reset()``
uninstalls the hooks and returns to the unregistered state; it exists for
tests and for applications that embed faultlog in a larger lifecycle.

Termination policy:
    - A signal whose code overlaps ``severity.ERRORS`` ends the process with
      status 1 once the provider has been called, whatever it returned.
    - An uncaught exception always ends the process with status 1.

Typical usage::

    import faultlog
    from faultlog import FileSink

    faultlog.register(FileSink(filename_template="./logs/{date}.log"))
    faultlog.log("worker started")
"""

import inspect
import logging
import sys
import threading
import traceback
import warnings
from typing import Any, Optional

from . import severity
from .config import debug_from_env
from .errors import AlreadyRegisteredError, ConfigurationError
from .provider import OutputProvider, ScreenSink
from .runtime import PythonRuntime, RuntimeHooks

logger = logging.getLogger(__name__)


def _diagnose(text: str) -> None:
    """Best-effort write straight to stderr, bypassing every sink."""
    try:
        print(text, file=sys.stderr)
        sys.stderr.flush()
    except (AttributeError, OSError, ValueError):
        pass


class Dispatcher:
    """Filter runtime signals by severity and forward them to a provider.

    Attributes:
        _output (OutputProvider): Destination of every accepted record.
        _level (int): Severity bitmask; a code is accepted iff ``code & level``.
        _debug (bool): Enables ``dump()``.
        _runtime (RuntimeHooks): Hook layer used to install handlers and
            to terminate the process.
        _registered (bool): True once ``install()`` committed the hooks.
    """

    def __init__(
        self,
        output: Optional[OutputProvider],
        level: int = severity.DEFAULT,
        debug: bool = False,
        runtime: Optional[RuntimeHooks] = None,
    ) -> None:
        self._output = output
        self._level = level
        self._debug = debug
        self._runtime = runtime or PythonRuntime()
        self._registered = False

    @property
    def output(self) -> Optional[OutputProvider]:
        return self._output

    @property
    def level(self) -> int:
        return self._level

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def registered(self) -> bool:
        return self._registered

    @property
    def runtime(self) -> RuntimeHooks:
        return self._runtime

    def is_debug(self) -> bool:
        return self._debug

    # ---------------------------------------------------------------------- #
    # Lifecycle
    # ---------------------------------------------------------------------- #

    def install(self) -> None:
        """Install the error, exception and shutdown handlers.

        Raises:
            AlreadyRegisteredError: The handlers are already installed.
        """
        if self._registered:
            raise AlreadyRegisteredError("dispatcher is already installed")
        runtime = self._runtime
        runtime.install_error_handler(self.handle_error, self._level)
        runtime.install_exception_handler(self.handle_exception)
        runtime.install_shutdown_handler(self.handle_shutdown)
        runtime.silence_builtin_reporting()
        self._registered = True

    def uninstall(self) -> None:
        self._runtime.restore()
        self._registered = False

    # ---------------------------------------------------------------------- #
    # Handlers
    # ---------------------------------------------------------------------- #

    def handle_error(self, code: int, description: str, file: str, line: int) -> bool:
        """Forward an error/warning/notice signal to the provider.

        Args:
            code: Severity code of the signal.
            description: Signal message.
            file: Originating source file.
            line: Originating line.

        Returns:
            False without calling the provider if ``code`` does not overlap
            the level. Otherwise the provider's result.

        Raises:
            FileWriteError: The provider failed to persist a non-fatal record.
        """
        if not code & self._level:
            return False

        fatal = severity.is_fatal(code)
        try:
            processed = self._output.log_error(code, description, file, line)
        except Exception as exc:
            if not fatal:
                raise
            _diagnose(
                f"{type(exc).__name__} while logging a fatal error: {exc}\n"
                f"{severity.label(code)}: {description} (in {file}:{line})"
            )
            processed = False

        if fatal:
            self._runtime.terminate(1)
        return processed

    def handle_exception(self, exc: BaseException) -> None:
        """Log an uncaught exception, then end the process with status 1.

        A failure inside the provider is reported directly on stderr together
        with the original exception; it does not propagate.
        """
        try:
            self._output.log_exception(exc)
        except Exception as secondary:
            _diagnose(
                f'Exception [{type(secondary).__name__}]: "{secondary}"\n\n'
                "Exception was raised while handling exception:"
            )
            try:
                traceback.print_exception(
                    type(exc), exc, exc.__traceback__, file=sys.stderr
                )
            except (AttributeError, OSError, ValueError):
                pass
        finally:
            self._runtime.terminate(1)

    def handle_shutdown(self) -> None:
        """Forward the runtime's last unhandled error, if any, at exit."""
        event = self._runtime.last_fatal_error()
        if event is not None and event.code:
            self.handle_error(event.code, event.description, event.file, event.line)

    # ---------------------------------------------------------------------- #
    # Explicit logging
    # ---------------------------------------------------------------------- #

    def log(self, message: str) -> None:
        """Record ``message`` regardless of the severity level."""
        if self._output is not None:
            self._output.log_message(message)

    def dump(self, value: Any, comment: str = "") -> None:
        """Record a dump of ``value``; a no-op unless debug mode is active."""
        if self._debug and self._output is not None:
            self._output.log_value(value, comment)


# ---------------------------------------------------------------------------
# Process-wide registration
# ---------------------------------------------------------------------------
_lock = threading.Lock()
_active: Optional[Dispatcher] = None


def register(
    provider: Optional[OutputProvider] = None,
    level: int = severity.DEFAULT,
    debug: bool = False,
    *,
    runtime: Optional[RuntimeHooks] = None,
) -> Dispatcher:
    """Create, install and commit the process's dispatcher.

    Args:
        provider: Output provider. May be None only in debug mode, in which
            case a ``ScreenSink`` writing to stderr is used.
        level: Severity bitmask. Ignored in debug mode, which captures
            everything (``severity.DEBUG``).
        debug: Enable debug mode. The ``FAULTLOG_DEBUG`` environment flag
            enables it as well.
        runtime: Hook layer. Defaults to a new ``PythonRuntime``.

    Returns:
        The committed Dispatcher.

    Raises:
        ConfigurationError: No provider outside debug mode.
        AlreadyRegisteredError: A dispatcher is already registered.
    """
    global _active
    with _lock:
        if _active is not None:
            raise AlreadyRegisteredError(
                "faultlog is already registered; call reset() before registering again"
            )

        debug = bool(debug) or debug_from_env()
        if not debug and provider is None:
            raise ConfigurationError("log output provider required")

        if debug:
            level = severity.DEBUG
            if provider is None:
                provider = ScreenSink()

        dispatcher = Dispatcher(provider, level, debug, runtime)
        dispatcher.install()
        _active = dispatcher

    logger.debug(
        "registered %s (level=%d, debug=%s)", type(provider).__name__, level, debug
    )
    return dispatcher


def reset() -> None:
    """Uninstall the registered dispatcher's hooks and forget it."""
    global _active
    with _lock:
        if _active is not None:
            _active.uninstall()
            _active = None


def get_dispatcher() -> Optional[Dispatcher]:
    return _active


def is_debug() -> bool:
    return _active is not None and _active.debug


def log(message: str) -> None:
    """Record ``message`` through the registered dispatcher, if any."""
    dispatcher = _active
    if dispatcher is not None:
        dispatcher.log(message)


def dump(value: Any, comment: str = "") -> None:
    """Dump ``value`` through the registered dispatcher (debug mode only)."""
    dispatcher = _active
    if dispatcher is not None:
        dispatcher.dump(value, comment)


def trigger_error(
    message: str, code: int = severity.E_USER_NOTICE, stacklevel: int = 1
) -> None:
    """Raise a user-level error signal attributed to the caller.

    The signal travels the same path as any other warning, so it is filtered
    by the registered level. An ``E_USER_ERROR`` ends the process when its
    code is in the registered level; outside it, execution continues.

    Args:
        message: Signal description.
        code: One of ``E_USER_ERROR``, ``E_USER_WARNING``, ``E_USER_NOTICE``,
            ``E_USER_DEPRECATED``.
        stacklevel: 1 attributes the signal to the direct caller, 2 to its
            caller, and so on.

    Raises:
        ValueError: ``code`` is not a user-level code.
    """
    category = severity.warning_class_for(code)
    frame = inspect.currentframe()
    try:
        for _ in range(stacklevel):
            if frame.f_back is None:
                break
            frame = frame.f_back
        filename = frame.f_code.co_filename
        lineno = frame.f_lineno
        module = frame.f_globals.get("__name__")
    finally:
        del frame
    warnings.warn_explicit(str(message), category, filename, lineno, module=module)

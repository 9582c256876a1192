"""faultlog/__init__.py - Public API for the faultlog package.

faultlog is a last-resort diagnostic logger. Installed once at process start,
it intercepts warnings, user-triggered errors, uncaught exceptions (main and
worker threads) and unraisable exceptions, classifies each one by severity and
writes a one-line record to a pluggable sink: the screen, a rotating log file,
or any OutputProvider the application supplies.

Quick start:
    import faultlog
    from faultlog import FileSink, severity

    # 1. Register once, as early as possible
    faultlog.register(FileSink(filename_template="./logs/{date}.log"),
                      level=severity.ERRORS | severity.WARNINGS)

    # 2. Warnings and uncaught exceptions now land in ./logs/<today>.log
    import warnings
    warnings.warn("cache is cold")          # logged, execution continues

    # 3. Explicit records
    faultlog.log("batch 42 started")        # always written
    faultlog.dump({"retries": 3}, "state")  # written in debug mode only

    # 4. Raise your own signals
    faultlog.trigger_error("quota exceeded", severity.E_USER_ERROR)  # logged, exit(1)

Exported names:
    register:         Install and commit the process's Dispatcher.
    reset:            Uninstall it again (tests, embedding).
    log, dump:        Explicit records through the registered dispatcher.
    trigger_error:    Raise a user-level error signal.
    Dispatcher:       The signal router returned by register().
    OutputProvider:   Base class for custom sinks.
    ScreenSink:       Writes records to stderr; the debug-mode default.
    FileSink:         Appends records to a size-rotated log file.
    FaultLogHandler:  logging.Handler feeding log records into the dispatcher.
"""

import logging

from . import severity
from .dispatcher import (
    Dispatcher,
    dump,
    get_dispatcher,
    is_debug,
    log,
    register,
    reset,
    trigger_error,
)
from .errors import (
    AlreadyRegisteredError,
    ConfigurationError,
    FaultLogError,
    FileAccessError,
    FileWriteError,
    InvalidConfigurationError,
)
from .file_sink import FileSink
from .handler import FaultLogHandler
from .provider import OutputProvider, ScreenSink

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "register",
    "reset",
    "get_dispatcher",
    "is_debug",
    "log",
    "dump",
    "trigger_error",
    "Dispatcher",
    "OutputProvider",
    "ScreenSink",
    "FileSink",
    "FaultLogHandler",
    "severity",
    "FaultLogError",
    "ConfigurationError",
    "AlreadyRegisteredError",
    "InvalidConfigurationError",
    "FileAccessError",
    "FileWriteError",
]
__version__ = "0.1.0"

"""errors.py - Exception taxonomy for faultlog.

Configuration and file-initialisation errors are raised from ``register()``
and from sink construction, before any signal is handled. Write-time
failures are raised from ``FileSink.write_log()`` and are left to
propagate; nothing in faultlog retries or suppresses them.
"""

from typing import Optional


class FaultLogError(Exception):
    """Base class for every error raised by faultlog."""


class ConfigurationError(FaultLogError, ValueError):
    """Bad registration arguments, e.g. no output provider outside debug mode."""


class AlreadyRegisteredError(ConfigurationError):
    """``register()`` was called after the dispatcher was already committed."""


class InvalidConfigurationError(ConfigurationError):
    """A sink option is unusable, e.g. the log filename resolves to a directory."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class FileAccessError(FaultLogError, OSError):
    """The log file or its directory could not be created, removed or opened.

    Attributes:
        path: The filesystem path the failing operation was applied to.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class FileWriteError(FileAccessError):
    """Appending a record to the log file failed."""

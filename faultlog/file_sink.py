"""file_sink.py - Rotating log file output provider.

FileSink appends one plain-text record per signal to a log file whose name
is derived from a template (see ``faultlog.naming``). Once the file reaches
``max_size_bytes`` the next write rolls over first:

    overwrite_on_rollover=True   the full file is deleted and recreated
                                 under the same name.
    overwrite_on_rollover=False  the full file is kept and writing continues
                                 in the next free name (``{n}`` counter, or a
                                 timestamp suffix when the template has none).

The sink resolves the template and creates the file when it is constructed,
so a misconfigured path fails at start-up and not on the first error.

Typical usage::

    import faultlog
    from faultlog import FileSink, severity

    faultlog.register(
        FileSink(filename_template="/var/log/myapp/{yyyy}-{mm}-{dd}_{n}.log",
                 max_size_bytes=5 * 1024 * 1024,
                 overwrite_on_rollover=False),
        level=severity.ALL,
    )
"""

import logging
import os
import threading
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from . import formatting, naming
from .config import merge_options
from .errors import FileAccessError, FileWriteError, InvalidConfigurationError
from .events import ErrorEvent, ExceptionEvent
from .provider import OutputProvider

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_TEMPLATE = "./logs/{date}.log"
DEFAULT_MAX_SIZE_BYTES = 1024 * 1024

# Both modes are applied as given; DIR_MODE is still masked by the umask.
DIR_MODE = 0o777
FILE_MODE = 0o664


class FileSink(OutputProvider):
    """Append records to a size-rotated log file.

    Thread-safety:
        The size check, the rollover and the append run under one
        ``threading.RLock`` per sink, so threads sharing a sink cannot
        interleave a rollover with a write. Several processes writing the
        same file are not coordinated.

    Attributes:
        _template (str): Filename template, kept for every rollover.
        _path (str): Absolute path of the file currently written to.
        _max_size (int): Rollover threshold in bytes.
        _overwrite (bool): Delete instead of preserving full files.
        _timestamp_format (str): strftime pattern for record timestamps.
        _encoding (str): File encoding.
        _clock: Callable returning the current timezone-aware datetime.

    Example:
        >>> sink = FileSink({"filename_template": "/tmp/faultlog/{date}.log"})
        >>> sink.log_message("service started")
    """

    _defaults = {
        "timestamp_format": formatting.DEFAULT_TIMESTAMP_FORMAT,
        "filename_template": DEFAULT_FILENAME_TEMPLATE,
        "max_size_bytes": DEFAULT_MAX_SIZE_BYTES,
        "overwrite_on_rollover": True,
        "encoding": "utf-8",
    }

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        **kwargs: Any,
    ) -> None:
        """Initialise the sink and make sure its log file exists.

        Args:
            options: Mapping of recognised options. Unknown keys are ignored.
            clock: Returns "now" for record timestamps, date placeholders and
                rollover names. Defaults to the local wall clock.
            **kwargs: Same options as keyword arguments; these win over
                ``options``.

        Recognised options:
            timestamp_format: strftime pattern. Defaults to ISO-8601.
            filename_template: Defaults to ``"./logs/{date}.log"``.
            max_size_bytes: Rollover threshold. Defaults to 1 MiB.
            overwrite_on_rollover: Defaults to True.
            encoding: Defaults to ``"utf-8"``.

        Raises:
            InvalidConfigurationError: ``max_size_bytes`` is not a positive
                integer, or the filename resolves to a directory.
            FileAccessError: The directory or the file could not be created.
        """
        opts = merge_options(self._defaults, options, owner="FileSink", **kwargs)

        max_size = opts["max_size_bytes"]
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size <= 0:
            raise InvalidConfigurationError(
                f"max_size_bytes must be a positive integer, got {max_size!r}"
            )

        self._template = str(opts["filename_template"])
        self._max_size = max_size
        self._overwrite = bool(opts["overwrite_on_rollover"])
        self._timestamp_format = opts["timestamp_format"]
        self._encoding = opts["encoding"]
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._lock = threading.RLock()
        self._path: Optional[str] = None
        self._dated = naming.has_date_tokens(self._template)
        self._expanded: Optional[str] = None

        self.ensure_log_file()

    @property
    def path(self) -> str:
        """Absolute path of the current log file."""
        return self._path

    @property
    def template(self) -> str:
        return self._template

    # ---------------------------------------------------------------------- #
    # OutputProvider
    # ---------------------------------------------------------------------- #

    def log_error(self, code: int, description: str, file: str, line: int) -> bool:
        event = ErrorEvent(code, description, file, line, self._clock())
        self.write_log(formatting.render_error(event, self._timestamp_format))
        return True

    def log_exception(self, exc: BaseException) -> None:
        event = ExceptionEvent.from_exception(exc, self._clock())
        self.write_log(formatting.render_exception(event, self._timestamp_format))

    def log_message(self, message: str) -> None:
        self.write_log(
            formatting.render_message(message, self._timestamp_format, self._clock())
        )

    def log_value(self, value: Any, comment: str = "") -> None:
        self.write_log(
            formatting.render_dump(
                value, comment, self._timestamp_format, self._clock()
            )
        )

    # ---------------------------------------------------------------------- #
    # File management
    # ---------------------------------------------------------------------- #

    def write_log(self, line: str) -> None:
        """Append ``line`` and a newline to the log file.

        Rolls over first if the current file has reached the threshold or has
        disappeared, and re-resolves the name once its date placeholders
        expand differently. A failed append is not retried.

        Raises:
            FileWriteError: The append failed.
            FileAccessError: A rollover was needed and failed.
        """
        with self._lock:
            if self._needs_rollover() or self._date_changed():
                self.ensure_log_file()
            try:
                with open(self._path, "a", encoding=self._encoding) as f:
                    f.write(line + "\n")
            except OSError as exc:
                raise FileWriteError(
                    f'could not write to log file "{self._path}": {exc}', self._path
                ) from exc

    def ensure_log_file(self) -> str:
        """Resolve the template and make sure a usable log file exists.

        Returns:
            The absolute path now written to.

        Raises:
            InvalidConfigurationError: The resolved name is a directory.
            FileAccessError: A full file could not be deleted, an existing file
                is not writable, or creating the directory, the file or setting
                its mode failed.
        """
        with self._lock:
            now = self._clock()
            self._expanded = naming.expand_dates(self._template, now)
            path = naming.resolve_filename(
                self._template,
                overwrite=self._overwrite,
                max_size=self._max_size,
                now=now,
            )

            if naming.is_full(path, self._max_size):
                if self._overwrite:
                    try:
                        os.remove(path)
                    except OSError as exc:
                        raise FileAccessError(
                            f'could not delete old log file "{path}": {exc}', path
                        ) from exc
                    logger.debug("removed full log file %s", path)
                else:
                    full = path
                    path = naming.rollover_name(full, self._max_size, now)
                    logger.debug("log file %s is full, continuing in %s", full, path)

            if os.path.isdir(path):
                raise InvalidConfigurationError(f'bad log file name "{path}"', path)

            if os.path.isfile(path):
                if not os.access(path, os.W_OK):
                    raise FileAccessError(
                        f'log file "{path}" is not available for write', path
                    )
            else:
                self._create(path)

            self._path = os.path.abspath(path)
            return self._path

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _needs_rollover(self) -> bool:
        try:
            return os.path.getsize(self._path) >= self._max_size
        except FileNotFoundError:
            return True

    def _date_changed(self) -> bool:
        if not self._dated:
            return False
        return naming.expand_dates(self._template, self._clock()) != self._expanded

    def _create(self, path: str) -> None:
        parent = os.path.dirname(os.path.abspath(path))
        try:
            os.makedirs(parent, mode=DIR_MODE, exist_ok=True)
        except OSError as exc:
            raise FileAccessError(
                f'could not create directory "{parent}": {exc}', parent
            ) from exc

        try:
            with open(path, "a", encoding=self._encoding):
                pass
        except OSError as exc:
            raise FileAccessError(f'could not create file "{path}": {exc}', path) from exc

        try:
            os.chmod(path, FILE_MODE)
        except OSError as exc:
            raise FileAccessError(
                f'could not change access mode on file "{path}": {exc}', path
            ) from exc

        logger.debug("created log file %s", path)

"""severity.py - Severity codes, bitmask presets and the code classifier.

Every runtime signal faultlog intercepts is reduced to one integer code from
a closed set of bit flags. A dispatcher is configured with a *level*, an
OR-combination of codes, and forwards a signal only when::

    code & level != 0

The named presets below cover the usual choices. ``ALL`` and ``DEBUG`` are
``-1`` so that every bit, including codes outside the known set, overlaps.

Python does not emit these codes natively. ``code_for_warning()`` and
``code_for_level()`` translate warning classes and ``logging`` levels into
the code space so they can be filtered and classified uniformly.
"""

import logging
from typing import Tuple, Type

# ---------------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------------
E_ERROR = 1
E_WARNING = 2
E_PARSE = 4
E_NOTICE = 8
E_CORE_ERROR = 16
E_CORE_WARNING = 32
E_COMPILE_ERROR = 64
E_COMPILE_WARNING = 128
E_USER_ERROR = 256
E_USER_WARNING = 512
E_USER_NOTICE = 1024
E_STRICT = 2048
E_RECOVERABLE_ERROR = 4096
E_DEPRECATED = 8192
E_USER_DEPRECATED = 16384
E_ALL = 32767

# ---------------------------------------------------------------------------
# Bitmask presets
# ---------------------------------------------------------------------------
ALL = -1
NONE = 0
ERRORS = (
    E_ERROR
    | E_PARSE
    | E_CORE_ERROR
    | E_COMPILE_ERROR
    | E_RECOVERABLE_ERROR
    | E_USER_ERROR
)
WARNINGS = E_WARNING | E_CORE_WARNING | E_COMPILE_WARNING | E_USER_WARNING
NOTICES = E_NOTICE | E_STRICT | E_DEPRECATED | E_USER_NOTICE | E_USER_DEPRECATED
DEFAULT = E_ALL & ~E_NOTICE & ~E_STRICT & ~E_DEPRECATED
DEBUG = -1

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
ERROR = "ERROR"
WARNING = "WARNING"
NOTICE = "NOTICE"
UNKNOWN = "UNKNOWN"

_CATEGORIES = {
    E_PARSE: ERROR,
    E_ERROR: ERROR,
    E_CORE_ERROR: ERROR,
    E_COMPILE_ERROR: ERROR,
    E_USER_ERROR: ERROR,
    E_WARNING: WARNING,
    E_CORE_WARNING: WARNING,
    E_USER_WARNING: WARNING,
    E_COMPILE_WARNING: WARNING,
    E_RECOVERABLE_ERROR: WARNING,
    E_NOTICE: NOTICE,
    E_STRICT: NOTICE,
    E_DEPRECATED: NOTICE,
    E_USER_NOTICE: NOTICE,
    E_USER_DEPRECATED: NOTICE,
}

_LABELS = {
    E_PARSE: "Parse error",
    E_ERROR: "Error",
    E_CORE_ERROR: "Core error",
    E_COMPILE_ERROR: "Compile error",
    E_RECOVERABLE_ERROR: "Recoverable error",
    E_USER_ERROR: "User generated error",
    E_WARNING: "Warning",
    E_CORE_WARNING: "Core warning",
    E_COMPILE_WARNING: "Compile warning",
    E_USER_WARNING: "User generated warning",
    E_NOTICE: "Notice",
    E_STRICT: "Strict notice",
    E_DEPRECATED: "Deprecated!",
    E_USER_NOTICE: "User generated notice",
    E_USER_DEPRECATED: "User marked deprecated",
}


def category(code: int) -> str:
    """Return the category of ``code``: ERROR, WARNING, NOTICE or UNKNOWN.

    Only exact codes are classified; combined masks are UNKNOWN.

    Example:
        >>> category(E_USER_WARNING)
        'WARNING'
        >>> category(E_WARNING | E_NOTICE)
        'UNKNOWN'
    """
    return _CATEGORIES.get(code, UNKNOWN)


def label(code: int) -> str:
    """Return the human-readable label of ``code``.

    Example:
        >>> label(E_DEPRECATED)
        'Deprecated!'
        >>> label(3)
        'Unknown error [3]'
    """
    try:
        return _LABELS[code]
    except KeyError:
        return f"Unknown error [{code}]"


def is_fatal(code: int) -> bool:
    """True if ``code`` overlaps the fatal ``ERRORS`` mask."""
    return bool(code & ERRORS)


# ---------------------------------------------------------------------------
# Warning classes for user-triggered signals
# ---------------------------------------------------------------------------


class UserError(UserWarning):
    """Warning category carrying an ``E_USER_ERROR`` signal."""


class UserNotice(UserWarning):
    """Warning category carrying an ``E_USER_NOTICE`` signal."""


class UserDeprecation(DeprecationWarning):
    """Warning category carrying an ``E_USER_DEPRECATED`` signal."""


# Checked in order; the first class the warning is a subclass of wins.
_WARNING_CODES: Tuple[Tuple[Type[Warning], int], ...] = (
    (UserError, E_USER_ERROR),
    (UserNotice, E_USER_NOTICE),
    (UserDeprecation, E_USER_DEPRECATED),
    (DeprecationWarning, E_DEPRECATED),
    (PendingDeprecationWarning, E_DEPRECATED),
    (FutureWarning, E_DEPRECATED),
    (SyntaxWarning, E_COMPILE_WARNING),
    (ResourceWarning, E_STRICT),
    (EncodingWarning, E_STRICT),
    (ImportWarning, E_NOTICE),
    (BytesWarning, E_NOTICE),
    (UnicodeWarning, E_NOTICE),
    (UserWarning, E_USER_WARNING),
)

_USER_WARNING_CLASSES = {
    E_USER_ERROR: UserError,
    E_USER_WARNING: UserWarning,
    E_USER_NOTICE: UserNotice,
    E_USER_DEPRECATED: UserDeprecation,
}


def code_for_warning(warning_class: Type[Warning]) -> int:
    """Translate a ``warnings`` category into a severity code.

    Args:
        warning_class: The category passed to ``warnings.showwarning``.

    Returns:
        The code of the first matching entry, or ``E_WARNING`` for any
        other ``Warning`` subclass.
    """
    for klass, code in _WARNING_CODES:
        if issubclass(warning_class, klass):
            return code
    return E_WARNING


def warning_class_for(code: int) -> Type[Warning]:
    """Return the warning category used to raise a user-level ``code``.

    Raises:
        ValueError: If ``code`` is not one of the ``E_USER_*`` codes.
    """
    try:
        return _USER_WARNING_CLASSES[code]
    except KeyError:
        raise ValueError(
            f"only E_USER_* codes can be triggered, got {code}"
        ) from None


def code_for_level(levelno: int) -> int:
    """Translate a ``logging`` level number into a severity code."""
    if levelno >= logging.CRITICAL:
        return E_USER_ERROR
    if levelno >= logging.WARNING:
        return E_USER_WARNING
    return E_USER_NOTICE


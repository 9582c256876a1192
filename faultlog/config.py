"""config.py - Process debug flag and sink option handling.

Two configuration surfaces exist:

    Debug flag: ``FAULTLOG_DEBUG`` in the process environment. It is read
                once, by ``register()``; changing the variable afterwards has
                no effect on an already registered dispatcher.

    Options:    Sinks accept a mapping and/or keyword arguments. Keys the sink
                does not recognise are ignored (and logged at DEBUG level),
                never rejected.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "FAULTLOG_DEBUG"

_TRUTHY = {"1", "true", "yes", "on"}


def debug_from_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True if the process-wide debug flag is set.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.
    """
    if environ is None:
        environ = os.environ
    return environ.get(DEBUG_ENV_VAR, "").strip().lower() in _TRUTHY


def merge_options(
    defaults: Mapping[str, Any],
    options: Optional[Mapping[str, Any]] = None,
    owner: str = "sink",
    **overrides: Any,
) -> Dict[str, Any]:
    """Overlay recognised keys from ``options`` and ``overrides`` on ``defaults``.

    Keyword overrides win over the mapping. Unknown keys are dropped.

    Example:
        >>> merge_options({"a": 1, "b": 2}, {"b": 3, "zzz": 0})
        {'a': 1, 'b': 3}
    """
    merged = dict(defaults)
    for source in (options or {}, overrides):
        for key, value in source.items():
            if key in merged:
                merged[key] = value
            else:
                logger.debug("%s: ignoring unknown option %r", owner, key)
    return merged

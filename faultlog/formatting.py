"""formatting.py - Record templates and formatting helpers shared by sinks.

Sinks do not inherit formatting behaviour; they call these free functions.
Records are produced by plain placeholder substitution into a template, not
by a structured serialiser::

    error     [{timestamp}] <{category}: {type}> {description} (in {file}:{line})
    message   [{timestamp}] {message}
    dump      [{timestamp}] DUMP <{type}>: {comment}
              {value}

Uncaught exceptions use the error template with ``EXCEPTION`` as the
category and the exception's class name as the type.
"""

import inspect
import io
import pprint
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from . import severity
from .events import ErrorEvent, ExceptionEvent, qualified_name

# ISO-8601 with UTC offset, e.g. 2024-03-07T14:02:11+0100
DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

EXCEPTION_CATEGORY = "EXCEPTION"

TEMPLATES: Dict[str, str] = {
    "error": "[{timestamp}] <{category}: {type}> {description} (in {file}:{line})",
    "message": "[{timestamp}] {message}",
    "dump": "[{timestamp}] DUMP <{type}>: {comment}\n{value}",
}


def format_timestamp(
    when: Optional[datetime] = None, fmt: str = DEFAULT_TIMESTAMP_FORMAT
) -> str:
    """Render ``when`` (default: now, local time) with a strftime pattern."""
    if when is None:
        when = datetime.now().astimezone()
    return when.strftime(fmt)


def fill(template: str, values: Mapping[str, Any]) -> str:
    """Replace each ``{key}`` in ``template`` with ``str(values[key])``.

    Placeholders without a value are left untouched, and braces appearing in
    the substituted values are never re-expanded.

    Example:
        >>> fill("[{a}] {b}", {"a": 1, "b": "{a}"})
        '[1] {a}'
    """
    out = []
    i = 0
    while i < len(template):
        start = template.find("{", i)
        if start < 0:
            out.append(template[i:])
            break
        end = template.find("}", start)
        if end < 0:
            out.append(template[i:])
            break
        key = template[start + 1 : end]
        out.append(template[i:start])
        if key in values:
            out.append(str(values[key]))
        else:
            out.append(template[start : end + 1])
        i = end + 1
    return "".join(out)


def _is_numeric(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def describe_type(value: Any) -> str:
    """Return a short human description of ``value``'s type for dumps.

    Example:
        >>> describe_type([1, 2, 3])
        'list[3]'
        >>> describe_type("42")
        'Numeric'
    """
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, int):
        return "Integer"
    if isinstance(value, float):
        return "Float"
    if isinstance(value, str):
        return "Numeric" if _is_numeric(value) else "String"
    if isinstance(value, (bytes, bytearray)):
        return f"Bytes[{len(value)}]"
    if isinstance(value, io.IOBase):
        return f"Resource: {qualified_name(type(value))}"
    if inspect.isclass(value):
        return f"Class: {qualified_name(value)}"
    if inspect.ismethod(value):
        return f"(callable) Method: {value.__qualname__}"
    if inspect.isfunction(value) or inspect.isbuiltin(value):
        return f"(callable) Function: {value.__qualname__}"
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return f"{type(value).__name__}[{len(value)}]"
    return f"Object of class: {qualified_name(type(value))}"


def render_value(value: Any) -> str:
    """Pretty-printed representation of a dumped value."""
    if isinstance(value, str):
        return value
    return pprint.pformat(value)


# ---------------------------------------------------------------------- #
# Record renderers
# ---------------------------------------------------------------------- #


def render_error(
    event: ErrorEvent,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    template: str = TEMPLATES["error"],
) -> str:
    return fill(
        template,
        {
            "timestamp": format_timestamp(event.timestamp, timestamp_format),
            "category": severity.category(event.code),
            "type": severity.label(event.code),
            "description": event.description.strip(),
            "file": event.file,
            "line": event.line,
        },
    )


def render_exception(
    event: ExceptionEvent,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    template: str = TEMPLATES["error"],
) -> str:
    return fill(
        template,
        {
            "timestamp": format_timestamp(event.timestamp, timestamp_format),
            "category": EXCEPTION_CATEGORY,
            "type": event.type_name,
            "description": event.message,
            "file": event.file,
            "line": event.line,
        },
    )


def render_message(
    message: str,
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    when: Optional[datetime] = None,
    template: str = TEMPLATES["message"],
) -> str:
    return fill(
        template,
        {"timestamp": format_timestamp(when, timestamp_format), "message": message},
    )


def render_dump(
    value: Any,
    comment: str = "",
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
    when: Optional[datetime] = None,
    template: str = TEMPLATES["dump"],
) -> str:
    return fill(
        template,
        {
            "timestamp": format_timestamp(when, timestamp_format),
            "type": describe_type(value),
            "comment": comment,
            "value": render_value(value),
        },
    )

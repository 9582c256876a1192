"""naming.py - Log filename templates and rollover names.

A filename template may contain date placeholders and one counter
placeholder. Date placeholders are case sensitive and always use English
month and weekday names:

    {date}                  2024-03-07
    {year} {Y} {yyyy}       2024
    {yy}                    24
    {Month}                 March
    {month} {M}             Mar
    {mm}                    03
    {m}                     3
    {Day}                   Thursday
    {day} {D}               Thu
    {dd}                    07
    {d}                     7

``{n}`` is the counter. With overwrite-on-rollover enabled the counter is
meaningless and is removed together with one of the separators around it.
Otherwise it becomes the first integer (1, 2, 3, ...) whose file is missing
or still below the size threshold.

Rollover uses the same first-fit rule everywhere: when a template without
``{n}`` fills up and must be preserved, the sink continues in
``name.<YYYY-mm-dd_HH-MM-SS>.ext``, then ``name.<stamp>-2.ext``, and so on.
"""

import itertools
import os
import re
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

COUNTER = "{n}"
ROLLOVER_STAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_SEPARATORS = "._-"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _year(d: datetime) -> str:
    return f"{d.year:04d}"


def _short_month(d: datetime) -> str:
    return _MONTHS[d.month - 1][:3]


def _short_day(d: datetime) -> str:
    return _DAYS[d.weekday()][:3]


DATE_TOKENS: Dict[str, Callable[[datetime], str]] = {
    "date": lambda d: f"{d.year:04d}-{d.month:02d}-{d.day:02d}",
    "year": _year,
    "Y": _year,
    "yyyy": _year,
    "yy": lambda d: f"{d.year % 100:02d}",
    "Month": lambda d: _MONTHS[d.month - 1],
    "month": _short_month,
    "M": _short_month,
    "mm": lambda d: f"{d.month:02d}",
    "m": lambda d: str(d.month),
    "Day": lambda d: _DAYS[d.weekday()],
    "day": _short_day,
    "D": _short_day,
    "dd": lambda d: f"{d.day:02d}",
    "d": lambda d: str(d.day),
}

_DATE_RE = re.compile(r"\{(" + "|".join(DATE_TOKENS) + r")\}")


def has_date_tokens(template: str) -> bool:
    return _DATE_RE.search(template) is not None


def expand_dates(template: str, now: Optional[datetime] = None) -> str:
    """Substitute every date placeholder in ``template``.

    The template is returned unchanged when it holds no date placeholder.

    Example:
        >>> expand_dates("./logs/{date}.log", datetime(2024, 3, 7))
        './logs/2024-03-07.log'
        >>> expand_dates("{Day} {d} {Month} {yy}", datetime(2024, 3, 7))
        'Thursday 7 March 24'
    """
    if not has_date_tokens(template):
        return template
    if now is None:
        now = datetime.now()
    return _DATE_RE.sub(lambda m: DATE_TOKENS[m.group(1)](now), template)


def strip_counter(name: str) -> str:
    """Remove ``{n}`` and collapse the separator pair it leaves behind.

    Example:
        >>> strip_counter("app_{n}.log")
        'app.log'
        >>> strip_counter("app-{n}-err.log")
        'app-err.log'
    """
    while COUNTER in name:
        head, tail = name.split(COUNTER, 1)
        if head[-1:] and head[-1] in _SEPARATORS and tail[:1] and tail[0] in _SEPARATORS:
            head = head[:-1]
        name = head + tail
    return name


def is_full(path: str, max_size: int) -> bool:
    """True if ``path`` is an existing file at or over ``max_size`` bytes."""
    return os.path.isfile(path) and os.path.getsize(path) >= max_size


def first_fit(candidates: Iterable[str], max_size: int) -> str:
    """Return the first candidate that is missing or below ``max_size``."""
    for candidate in candidates:
        if not is_full(candidate, max_size):
            return candidate
    raise ValueError("candidate sequence exhausted")


def resolve_filename(
    template: str,
    *,
    overwrite: bool,
    max_size: int,
    now: Optional[datetime] = None,
) -> str:
    """Expand a filename template into a concrete path.

    Args:
        template: Filename template, e.g. ``"./logs/{yyyy}-{mm}-{dd}_{n}.log"``.
        overwrite: Overwrite-on-rollover mode; removes ``{n}``.
        max_size: Size threshold in bytes used by the counter's first-fit search.
        now: Timestamp for date placeholders. Defaults to the current local time.

    Returns:
        The expanded path, relative if the template was relative.
    """
    name = expand_dates(template, now)
    if COUNTER in name:
        if overwrite:
            name = strip_counter(name)
        else:
            name = first_fit(
                (name.replace(COUNTER, str(i)) for i in itertools.count(1)),
                max_size,
            )
    return name


def rollover_name(path: str, max_size: int, now: Optional[datetime] = None) -> str:
    """Return the file to continue in once ``path`` is full and must be kept.

    Example:
        >>> rollover_name("/var/log/app.log", 1024, datetime(2024, 3, 7, 9, 5, 0))
        '/var/log/app.2024-03-07_09-05-00.log'
    """
    if now is None:
        now = datetime.now()
    root, ext = os.path.splitext(path)
    stamp = now.strftime(ROLLOVER_STAMP_FORMAT)

    def candidates():
        yield f"{root}.{stamp}{ext}"
        for i in itertools.count(2):
            yield f"{root}.{stamp}-{i}{ext}"

    return first_fit(candidates(), max_size)

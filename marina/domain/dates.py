"""Day-granularity date helpers.

Every date in the marina is a whole calendar day. Values read from the
store (``YYYY-MM-DD`` strings), values typed into a form, and ``datetime``
objects built in memory all pass through :func:`to_day` so that they
compare equal when they name the same day. Day-only strings are read as
the day they spell out, never shifted through a time zone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterator

import dateparser
from dateutil.parser import isoparse
from dateutil.rrule import DAILY, rrule

DayLike = date | datetime | str

_FULL_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}")
# A bare year or year-month; isoparse would silently fill in the first day.
_PARTIAL_ISO_DAY = re.compile(r"\d{4}(-\d{1,2})?")


class DayParseError(ValueError):
    """Raised when a value cannot be read as a calendar day."""


def to_day(value: DayLike) -> date:
    """Normalize *value* to a plain ``date``.

    ``datetime`` values keep their own calendar day (local for naive
    values, the attached zone for aware ones) with the time discarded.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return isoparse(text).date()
        except ValueError as exc:
            raise DayParseError(f"Not an ISO date: {value!r}") from exc
    raise DayParseError(f"Unsupported date value: {value!r}")


def compare_days(a: DayLike, b: DayLike) -> int:
    """Return -1, 0 or 1 as day *a* is before, equal to, or after day *b*."""
    left, right = to_day(a), to_day(b)
    return (left > right) - (left < right)


def iter_days(start: DayLike, end: DayLike) -> Iterator[date]:
    """Yield every day from *start* to *end* inclusive, ascending.

    Yields nothing when *end* is before *start*.
    """
    first, last = to_day(start), to_day(end)
    if last < first:
        return
    for occurrence in rrule(
        DAILY,
        dtstart=datetime.combine(first, datetime.min.time()),
        until=datetime.combine(last, datetime.min.time()),
    ):
        yield occurrence.date()


def add_days(day: DayLike, count: int) -> date:
    return to_day(day) + timedelta(days=count)


def parse_day_input(text: DayLike | None, today: date) -> date:
    """Read a day typed into a form.

    Full ``YYYY-MM-DD`` dates are taken literally; a bare year or
    year-month is rejected; anything else ("tomorrow", "June 12 2025") is
    handed to ``dateparser`` relative to *today*.
    """
    if text is None:
        raise DayParseError("A date is required")
    if not isinstance(text, str):
        return to_day(text)
    raw = text.strip()
    if not raw:
        raise DayParseError("A date is required")
    if _FULL_ISO_DAY.fullmatch(raw):
        return to_day(raw)
    if _PARTIAL_ISO_DAY.fullmatch(raw):
        raise DayParseError(f"Incomplete date {text!r}; use YYYY-MM-DD")
    settings = {
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": datetime.combine(today, datetime.min.time()),
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    result = dateparser.parse(raw, settings=settings)
    if result is None:
        raise DayParseError(f"Could not understand the date {text!r}")
    return result.date()


def _ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_day(day: DayLike) -> str:
    """Long human form used in messages, e.g. ``June 12th, 2025``."""
    value = to_day(day)
    return f"{value.strftime('%B')} {_ordinal(value.day)}, {value.year}"


def to_wire(day: DayLike) -> str:
    """Encode a day the way the store expects it (``YYYY-MM-DD``)."""
    return to_day(day).isoformat()

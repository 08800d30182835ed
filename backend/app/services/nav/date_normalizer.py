"""Canonical calendar-date keys for NAV data.

Every path that turns a feed or stored date into a ``YYYY-MM-DD`` key goes
through :func:`normalize_nav_date`. Unresolvable input yields ``None``; the
caller decides to drop the record. There is no fallback to today.
"""

import re
from datetime import date, datetime

from dateutil import parser as date_parser

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Native AMFI format, e.g. "29-Oct-2025"
FEED_DATE_PATTERN = re.compile(r"^(\d{2})-([A-Za-z]{3})-(\d{4})$")

MONTH_ABBREVIATIONS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 2, 2))


def to_calendar_date(raw: str | date | datetime | None) -> date | None:
    """Resolve ``raw`` to a ``date``, or ``None`` when nothing matches."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    value = str(raw).strip()
    if not value:
        return None

    if ISO_DATE_PATTERN.match(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None

    match = FEED_DATE_PATTERN.match(value)
    if match:
        day, month_abbr, year = match.groups()
        month = MONTH_ABBREVIATIONS.get(month_abbr.lower())
        if month is None:
            return None
        try:
            return date(int(year), month, int(day))
        except ValueError:
            return None

    # dateutil fills missing components from its default; parse against two
    # different defaults and reject input that leaned on either of them
    try:
        first = date_parser.parse(value, default=_PARSE_DEFAULTS[0])
        second = date_parser.parse(value, default=_PARSE_DEFAULTS[1])
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first.date()


def normalize_nav_date(raw: str | date | datetime | None) -> str | None:
    """Normalize a NAV date to its ``YYYY-MM-DD`` key.

    Examples:
        >>> normalize_nav_date("29-Oct-2025")
        '2025-10-29'
        >>> normalize_nav_date("2025-10-29")
        '2025-10-29'
        >>> normalize_nav_date("not-a-date") is None
        True
    """
    resolved = to_calendar_date(raw)
    return resolved.isoformat() if resolved else None


def is_feed_date_header(line: str) -> bool:
    """True for a bare ``DD-MMM-YYYY`` line that opens a feed section."""
    return FEED_DATE_PATTERN.match(line) is not None

"""Date normalization for identifier date tokens.

ISO timestamps are truncated to their date part; anything else is handed
to dateparser ("Jan 7, 2025", "07/01/2025 10:00"). Relative phrases such as
"yesterday" are read against a fixed base date, never the wall clock.
"""

import re
from datetime import date, datetime

import dateparser

_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|[T\s])")

DEFAULT_RELATIVE_BASE = datetime(2000, 1, 1)


def normalize_session_date(
    raw: str | date | datetime | None,
    relative_base: datetime = DEFAULT_RELATIVE_BASE,
) -> str | None:
    """Convert a recording start time to YYYY-MM-DD.

    Args:
        raw: ISO timestamp, free-form date string, or date/datetime
        relative_base: Reference point for relative phrases ("yesterday")

    Returns:
        Date string, or None if raw is empty or cannot be parsed

    Examples:
        >>> normalize_session_date("2025-01-07T10:00:00Z")
        '2025-01-07'
        >>> normalize_session_date("not a date") is None
        True
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()

    text = str(raw).strip()
    if not text:
        return None

    match = _ISO_PREFIX.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return None

    settings: dict = {
        "RELATIVE_BASE": relative_base,
        "RETURN_AS_TIMEZONE_AWARE": False,
        "PREFER_DAY_OF_MONTH": "first",
    }

    try:
        parsed = dateparser.parse(text, settings=settings)
        if parsed is None:
            return None
        return parsed.date().isoformat()
    except Exception:
        # dateparser can raise various exceptions on malformed input
        return None

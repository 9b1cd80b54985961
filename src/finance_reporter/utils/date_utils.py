"""Date parsing and UTC day-boundary utilities.

All instants handled by the reporter are timezone-aware datetimes in UTC.
Day boundaries are UTC midnight (00:00:00.000) and UTC end of day
(23:59:59.999).
"""

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone

# Earliest and latest instants an open-ended range can reach
EARLIEST_INSTANT = datetime.min.replace(tzinfo=timezone.utc)
LATEST_INSTANT = datetime.max.replace(microsecond=999000, tzinfo=timezone.utc)

END_OF_DAY = time(23, 59, 59, 999000)

# Date format patterns accepted in ledger files
#
# Slash-separated dates (e.g., "03/04/2024") are always interpreted as US format (MM/DD/YYYY).
# For European dates (DD/MM/YYYY), use period-separated format (03.04.2024) or ISO format.
#
DATE_PATTERNS = [
    # ISO format (most common, try first)
    (r"^(\d{4})-(\d{1,2})-(\d{1,2})$", "%Y-%m-%d"),
    # US formats (MM/DD/YYYY)
    (r"^(\d{1,2})/(\d{1,2})/(\d{4})$", "%m/%d/%Y"),
    # European formats (DD.MM.YYYY)
    (r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", "%d.%m.%Y"),
    # Text month formats
    (r"^(\d{1,2})-(\w{3})-(\d{4})$", "%d-%b-%Y"),
    (r"^(\w{3})\s+(\d{1,2}),?\s+(\d{4})$", "%b %d, %Y"),
    (r"^(\w+)\s+(\d{1,2}),?\s+(\d{4})$", "%B %d, %Y"),
    # Compact format
    (r"^(\d{4})(\d{2})(\d{2})$", "%Y%m%d"),
]

COMPILED_PATTERNS = [(re.compile(pattern), fmt) for pattern, fmt in DATE_PATTERNS]


def parse_date(raw_date: str) -> date:
    """Parse a raw date string into a date object.

    Handles ISO (2024-01-15), US (01/15/2024), European (15.01.2024),
    text (15-Jan-2024, Jan 15, 2024) and compact (20240115) forms.

    Args:
        raw_date: The raw date string to parse.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    if not raw_date:
        raise ValueError("Empty date string")

    date_str = raw_date.strip()
    if not date_str:
        raise ValueError("Empty date string after stripping whitespace")

    for pattern, fmt in COMPILED_PATTERNS:
        if pattern.match(date_str):
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                # Pattern matched but format didn't work, try next
                continue

    raise ValueError(f"Cannot parse date: '{raw_date}'")


def parse_instant(value: object) -> datetime:
    """Coerce a ledger value into a UTC instant.

    Accepts datetimes (naive values are taken as UTC), dates (UTC midnight)
    and strings, either full ISO-8601 timestamps or anything parse_date
    understands.

    Raises:
        ValueError: If the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return start_of_day(value)
    if isinstance(value, str):
        text = value.strip()
        if "T" in text or ":" in text:
            try:
                return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
            except ValueError:
                pass
        return start_of_day(parse_date(text))
    raise ValueError(f"Cannot interpret {value!r} as a date")


def ensure_utc(moment: datetime) -> datetime:
    """Return the instant in UTC, treating naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def start_of_day(d: date) -> datetime:
    """UTC midnight of the given calendar day."""
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def end_of_day(d: date) -> datetime:
    """Last millisecond (23:59:59.999) of the given calendar day in UTC."""
    return datetime.combine(d, END_OF_DAY, tzinfo=timezone.utc)


def days_in_month(year: int, month: int) -> int:
    """Number of calendar days in the month."""
    return calendar.monthrange(year, month)[1]


def last_day_of_month(d: date) -> date:
    """The last calendar day of the month containing d."""
    return d.replace(day=days_in_month(d.year, d.month))


def week_start_offset(d: date, week_start: str = "mon") -> int:
    """Days between d and the most recent configured week start (0-6).

    Args:
        d: Day to measure from.
        week_start: "sun" for Sunday-based weeks, anything else for Monday.
    """
    if week_start == "sun":
        # isoweekday: Mon=1..Sun=7
        return d.isoweekday() % 7
    return d.weekday()


def epoch_day(d: date) -> int:
    """Integer day number used as a locale-independent sort key."""
    return d.toordinal()


def add_days(d: date, days: int) -> date:
    """Shift a date by a number of days."""
    return d + timedelta(days=days)


def format_date(d: date, fmt: str = "%Y-%m-%d") -> str:
    """Format a date object as a string.

    Args:
        d: Date to format.
        fmt: Format string (default ISO format).

    Returns:
        Formatted date string.
    """
    return d.strftime(fmt)


def to_iso(moment: datetime | None) -> str | None:
    """ISO-8601 text for an instant with millisecond precision, or None."""
    if moment is None:
        return None
    return ensure_utc(moment).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_in_window(
    moment: datetime,
    start: datetime | None = None,
    end: datetime | None = None,
) -> bool:
    """Check if an instant falls within an inclusive window.

    Args:
        moment: Instant to check.
        start: Start of range (inclusive). None means no lower bound.
        end: End of range (inclusive). None means no upper bound.

    Returns:
        True if the instant is within range.
    """
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True

"""Resolution of report query parameters into a time window.

Explicit inputs always win over presets:

1. ``date`` (a single day) when present; ``from``/``to`` are then ignored.
2. ``from`` and/or ``to`` when either is present; a missing side is open
   ended (earliest or latest representable instant).
3. Otherwise the named ``filter`` preset (``today``, ``weekly``, ``monthly``).
4. Otherwise "all time" (both bounds None).

All day boundaries are UTC.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone

from finance_reporter.models.report import AppliedFilters, TimeWindow
from finance_reporter.utils.date_utils import (
    EARLIEST_INSTANT,
    LATEST_INSTANT,
    add_days,
    end_of_day,
    last_day_of_month,
    start_of_day,
    week_start_offset,
)
from finance_reporter.utils.logging_config import get_logger

logger = get_logger(__name__)

# Strict YYYY-MM-DD shape; anything else is rejected before parsing
YMD_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PRESET_FILTERS = ("today", "weekly", "monthly")
WEEK_STARTS = ("sun", "mon")


class InvalidDateFormat(ValueError):
    """Raised when a date-shaped query input is not a strict YYYY-MM-DD day."""

    def __init__(self, field: str, value: object):
        """Initialize InvalidDateFormat.

        Args:
            field: Name of the offending input (``date``, ``from`` or ``to``).
            value: The rejected value.
        """
        self.field = field
        self.value = value
        super().__init__(f"Invalid `{field}` format. Use YYYY-MM-DD.")


@dataclass(frozen=True)
class WindowRequest:
    """Raw query-style inputs for window resolution."""

    filter: str | None = None
    date: str | None = None
    from_date: str | None = None
    to_date: str | None = None
    week_start: str = "mon"

    @classmethod
    def from_query(cls, params: dict[str, object]) -> "WindowRequest":
        """Build a request from query parameters using their wire names.

        Empty strings are treated as absent.
        """
        def _get(key: str) -> str | None:
            value = params.get(key)
            if value is None or value == "":
                return None
            return str(value)

        return cls(
            filter=_get("filter"),
            date=_get("date"),
            from_date=_get("from"),
            to_date=_get("to"),
            week_start=_get("weekStart") or "mon",
        )

    @property
    def has_explicit_range(self) -> bool:
        """True when any of date/from/to was supplied."""
        return any(v is not None for v in (self.date, self.from_date, self.to_date))

    def applied(self) -> AppliedFilters:
        """Echo of the inputs for the report metadata."""
        return AppliedFilters(
            filter=self.filter,
            date=self.date,
            from_date=self.from_date,
            to_date=self.to_date,
            week_start=self.week_start,
        )


def parse_ymd(field: str, value: str) -> date:
    """Validate and parse a strict YYYY-MM-DD value.

    Raises:
        InvalidDateFormat: If the value has the wrong shape or is not a real day.
    """
    if not isinstance(value, str) or not YMD_PATTERN.match(value):
        raise InvalidDateFormat(field, value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDateFormat(field, value) from None


def resolve_explicit_window(request: WindowRequest) -> TimeWindow:
    """Resolve a window from ``date`` or ``from``/``to``.

    Inverted ``from``/``to`` bounds are swapped so the window is never empty
    by construction.
    """
    if request.date is not None:
        day = parse_ymd("date", request.date)
        logger.debug(f"Resolved single-day window for {day}")
        return TimeWindow(start=start_of_day(day), end=end_of_day(day))

    from_day = parse_ymd("from", request.from_date) if request.from_date is not None else None
    to_day = parse_ymd("to", request.to_date) if request.to_date is not None else None

    if from_day is not None and to_day is not None and from_day > to_day:
        logger.debug(f"Swapping inverted range: from={from_day} to={to_day}")
        from_day, to_day = to_day, from_day

    return TimeWindow(
        start=start_of_day(from_day) if from_day is not None else EARLIEST_INSTANT,
        end=end_of_day(to_day) if to_day is not None else LATEST_INSTANT,
    )


def resolve_preset_window(
    preset: str | None,
    now: datetime,
    week_start: str = "mon",
) -> TimeWindow:
    """Resolve a named preset relative to ``now`` (UTC).

    Args:
        preset: ``today``, ``weekly``, ``monthly``, or None/``none`` for all time.
        now: Reference instant.
        week_start: ``sun`` or ``mon`` (only used by ``weekly``).

    Returns:
        The preset window, or an all-time window for unknown presets.
    """
    today = now.astimezone(timezone.utc).date()

    if preset == "today":
        return TimeWindow(start=start_of_day(today), end=end_of_day(today))

    if preset == "weekly":
        first = add_days(today, -week_start_offset(today, week_start))
        return TimeWindow(start=start_of_day(first), end=end_of_day(add_days(first, 6)))

    if preset == "monthly":
        return TimeWindow(
            start=start_of_day(today.replace(day=1)),
            end=end_of_day(last_day_of_month(today)),
        )

    if preset not in (None, "none"):
        logger.warning(f"Unknown filter preset {preset!r}; using all-time window")
    return TimeWindow()


def resolve_window(request: WindowRequest, now: datetime | None = None) -> TimeWindow:
    """Resolve query inputs into a time window.

    Args:
        request: Raw inputs.
        now: Reference instant for presets (defaults to the current UTC time).

    Returns:
        The resolved TimeWindow.

    Raises:
        InvalidDateFormat: If date/from/to is malformed.
    """
    if request.has_explicit_range:
        if request.filter is not None:
            logger.debug(f"Ignoring filter={request.filter!r}: explicit range supplied")
        return resolve_explicit_window(request)

    if now is None:
        now = datetime.now(timezone.utc)
    return resolve_preset_window(request.filter, now, request.week_start)

# File: utils/dt_utils.py
"""Date and time utilities for Numu.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - set_default_timezone / get_default_timezone: Configure local timezone
    - dt_now_utc / dt_now_local / dt_today_local: Current time helpers
    - as_utc / as_local / start_of_local_day: Timezone conversion
    - dt_parse / to_local_date: Normalize ISO strings, dates and datetimes
    - week_start / week_end / week_range: Week boundaries with configurable first day
    - is_future: Strictly-after-today check
    - iter_days / weeks_in_month: Date window math
"""

from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta
import logging
from typing import NamedTuple
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Python weekday numbering (Monday=0 ... Sunday=6)
WEEKDAY_MONDAY = 0
WEEKDAY_SUNDAY = 6
DAYS_PER_WEEK = 7


class WeekRange(NamedTuple):
    """Inclusive calendar week window."""

    start: date
    end: date

    def __contains__(self, day: object) -> bool:
        """Return True when `day` falls inside the week."""
        if isinstance(day, datetime):
            day = day.date()
        if not isinstance(day, date):
            return False
        return self.start <= day <= self.end


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware).

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    return datetime.now(tz or DEFAULT_TIME_ZONE)


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2025, 11, 12)
    """
    return dt_now_local(tz).date()


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are interpreted in the default (local) timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Naive datetimes are interpreted as UTC.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def start_of_local_day(
    dt_input: str | date | datetime | None, tz: ZoneInfo | None = None
) -> datetime | None:
    """Get the start of day (00:00:00) in local timezone.

    DST-safe: the local date is resolved first and then combined with midnight
    in the target timezone.

    Returns:
        Timezone-aware datetime at local midnight, or None if the input
        could not be parsed.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    local_date = to_local_date(dt_input, tz_info)
    if local_date is None:
        return None
    return datetime.combine(local_date, datetime.min.time(), tzinfo=tz_info)


# ==============================================================================
# Parsing
# ==============================================================================


def dt_parse(
    dt_input: str | date | datetime | None, tz: ZoneInfo | None = None
) -> datetime | None:
    """Normalize an ISO string, date or datetime to an aware datetime.

    Never raises on malformed input: the engine treats unparseable values
    as absent.

    Args:
        dt_input: ISO 8601 string, date, datetime, or None
        tz: Timezone applied to naive input (defaults to DEFAULT_TIME_ZONE)

    Returns:
        Timezone-aware datetime, or None.

    Example:
        >>> dt_parse("2025-11-12")
        datetime.datetime(2025, 11, 12, 0, 0, tzinfo=ZoneInfo('UTC'))
    """
    if not dt_input:
        return None

    tz_info = tz or DEFAULT_TIME_ZONE
    result: datetime

    if isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())
    elif isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input.strip())
        except ValueError:
            _LOGGER.debug("Unparseable datetime value skipped: %s", dt_input)
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)
    return result


def to_local_date(
    dt_input: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Truncate any supported input to its local calendar date.

    Plain `date` objects are returned unchanged; datetimes and ISO strings
    are converted to the local timezone before truncation.
    """
    if isinstance(dt_input, date) and not isinstance(dt_input, datetime):
        return dt_input
    parsed = dt_parse(dt_input, tz)
    if parsed is None:
        return None
    return as_local(parsed, tz).date()


# ==============================================================================
# Week Boundaries
# ==============================================================================


def _normalize_first_weekday(first_weekday: int | None) -> int:
    """Clamp a first-day-of-week setting to Python's 0-6 range."""
    if first_weekday is None or not WEEKDAY_MONDAY <= first_weekday <= WEEKDAY_SUNDAY:
        return WEEKDAY_MONDAY
    return first_weekday


def week_start(day: date | datetime, first_weekday: int = WEEKDAY_MONDAY) -> date:
    """Return the first day of the week containing `day`.

    Args:
        day: Any date (datetimes are truncated as-is, without tz conversion)
        first_weekday: 0=Monday ... 6=Sunday

    Example:
        >>> week_start(date(2025, 11, 12))  # Wednesday
        datetime.date(2025, 11, 10)
        >>> week_start(date(2025, 11, 12), first_weekday=6)
        datetime.date(2025, 11, 9)
    """
    if isinstance(day, datetime):
        day = day.date()
    first = _normalize_first_weekday(first_weekday)
    offset = (day.weekday() - first) % DAYS_PER_WEEK
    return day - timedelta(days=offset)


def week_end(day: date | datetime, first_weekday: int = WEEKDAY_MONDAY) -> date:
    """Return the last day (inclusive) of the week containing `day`."""
    return week_start(day, first_weekday) + timedelta(days=DAYS_PER_WEEK - 1)


def week_range(day: date | datetime, first_weekday: int = WEEKDAY_MONDAY) -> WeekRange:
    """Return the inclusive week window containing `day`."""
    start = week_start(day, first_weekday)
    return WeekRange(start, start + timedelta(days=DAYS_PER_WEEK - 1))


def is_future(day: date | datetime, today: date | None = None) -> bool:
    """Return True when `day` is strictly after today."""
    if isinstance(day, datetime):
        day = day.date()
    return day > (today or dt_today_local())


# ==============================================================================
# Date Window Helpers
# ==============================================================================


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from `start` to `end` inclusive (nothing if end < start)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def weeks_in_month(
    year: int, month: int, first_weekday: int = WEEKDAY_MONDAY
) -> list[date]:
    """Return the start dates of every week row touching the given month.

    The first row may begin in the previous month and the last row may end
    in the next one, as in a wall calendar.
    """
    first_of_month = date(year, month, 1)
    last_of_month = first_of_month + relativedelta(
        day=monthrange(year, month)[1]
    )
    weeks: list[date] = []
    current = week_start(first_of_month, first_weekday)
    while current <= last_of_month:
        weeks.append(current)
        current += timedelta(days=DAYS_PER_WEEK)
    return weeks

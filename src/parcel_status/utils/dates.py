# src/parcel_status/utils/dates.py
from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone, tzinfo
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("parcel_status.utils.dates")

Instant = Union[str, datetime]

# en-US names; strftime's %a/%b follow the process locale, these do not.
_WEEKDAYS_SHORT = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_WEEKDAYS_LONG = ("Monday", "Tuesday", "Wednesday",
                  "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS_SHORT = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                 "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_MONTHS_LONG = ("January", "February", "March", "April", "May", "June", "July",
                "August", "September", "October", "November", "December")

# Days elapsed before the first of each month in a common year.
_DAYS_BEFORE_MONTH = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)

_RELATIVE_LABELS = {0: "today", -1: "yesterday", 1: "tomorrow"}


# --- Parsing -----------------------------------------------------------------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_now(now: Optional[datetime]) -> datetime:
    """Return `now` as an aware datetime; None reads the clock, naive means UTC."""
    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def parse_instant(value: Optional[Instant]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    - trailing 'Z' is accepted on every supported interpreter
    - values without an offset (including bare dates) are taken as UTC
    - anything unparseable returns None instead of raising
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def anchor_calendar_date(value: Optional[str]) -> Optional[datetime]:
    """
    Pin a calendar date to noon UTC so that it lands on the same calendar day in
    every zone within +/-12h. Full timestamps are returned as parsed.
    """
    if not isinstance(value, str):
        return None
    try:
        day = date.fromisoformat(value.strip())
    except ValueError:
        return parse_instant(value)
    return datetime.combine(day, time(12, 0), tzinfo=timezone.utc)


@lru_cache(maxsize=64)
def resolve_zone(name: Optional[str]) -> tzinfo:
    if not name or name.upper() in ("UTC", "Z", "ETC/UTC"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: the name points at a tzdata directory such as "America"
        logger.warning("Unknown time zone %r; falling back to UTC", name)
        return timezone.utc


# --- Calendar arithmetic -----------------------------------------------------

def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def day_number(year: int, month: int, day: int) -> int:
    """Days since 0001-01-01 in the proleptic Gregorian calendar (0-based)."""
    prior = year - 1
    days = prior * 365 + prior // 4 - prior // 100 + prior // 400
    days += _DAYS_BEFORE_MONTH[month - 1] + day - 1
    if month > 2 and is_leap_year(year):
        days += 1
    return days


def calendar_day_difference(target: datetime, reference: datetime, tz: tzinfo) -> int:
    """Whole calendar days from `reference` to `target`, both read as wall dates in `tz`."""
    a = target.astimezone(tz)
    b = reference.astimezone(tz)
    return day_number(a.year, a.month, a.day) - day_number(b.year, b.month, b.day)


# --- Formatting --------------------------------------------------------------

def _in_zone(instant: datetime, tz: tzinfo) -> Optional[datetime]:
    # instants at the edge of the datetime range cannot be shifted
    try:
        return instant.astimezone(tz)
    except OverflowError:
        return None


def _clock(dt: datetime, *, pad_hour: bool) -> str:
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    hh = f"{hour:02d}" if pad_hour else str(hour)
    return f"{hh}:{dt.minute:02d} {meridiem}"


def format_medium(dt: datetime) -> str:
    """'Jan 10, 2023, 6:00 AM' (en-US medium date, short time)."""
    return f"{_MONTHS_SHORT[dt.month - 1]} {dt.day}, {dt.year}, {_clock(dt, pad_hour=False)}"


def format_time(value: Optional[Instant], time_zone: Optional[str]) -> str:
    """Zone-local time of day as 'hh:mm AM'; empty string when unparseable."""
    instant = parse_instant(value)
    if instant is None:
        return ""
    local = _in_zone(instant, resolve_zone(time_zone))
    return _clock(local, pad_hour=True) if local is not None else ""


def _local_day(value: Optional[str], time_zone: Optional[str]) -> Optional[date]:
    # Bare calendar dates are already zone-local; timestamps are converted.
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        pass
    instant = parse_instant(value)
    if instant is None:
        return None
    local = _in_zone(instant, resolve_zone(time_zone))
    return local.date() if local is not None else None


def format_short_date(value: Optional[str], time_zone: Optional[str] = None) -> str:
    """'Sat, Jan 7, 2023'; empty string when the value is missing or unparseable."""
    day = _local_day(value, time_zone)
    if day is None:
        return ""
    return f"{_WEEKDAYS_SHORT[day.weekday()]}, {_MONTHS_SHORT[day.month - 1]} {day.day}, {day.year}"


def format_long_date(value: Optional[str], time_zone: Optional[str] = None) -> str:
    """'Wednesday, January 25, 2023'."""
    day = _local_day(value, time_zone)
    if day is None:
        return ""
    return f"{_WEEKDAYS_LONG[day.weekday()]}, {_MONTHS_LONG[day.month - 1]} {day.day}, {day.year}"


# --- Relative labels ---------------------------------------------------------

def relative_day_label(
    value: Optional[Instant],
    time_zone: Optional[str],
    now: Optional[datetime] = None,
) -> str:
    """
    Label an instant relative to `now` by calendar day in `time_zone`.

    Returns "today", "yesterday" or "tomorrow" when the zone-local dates are 0, -1
    or +1 days apart; otherwise a medium date+time rendered in the zone. The time of
    day never matters, only the wall-clock date. Unparseable input yields "".
    """
    instant = parse_instant(value)
    if instant is None:
        return ""
    tz = resolve_zone(time_zone)
    local = _in_zone(instant, tz)
    if local is None:
        return ""
    diff = calendar_day_difference(local, coerce_now(now), tz)
    label = _RELATIVE_LABELS.get(diff)
    if label is not None:
        return label
    return format_medium(local)


def calendar_day_label(
    value: Optional[str],
    time_zone: Optional[str],
    now: Optional[datetime] = None,
) -> str:
    """relative_day_label for a 'YYYY-MM-DD' delivery date (anchored at noon UTC)."""
    anchored = anchor_calendar_date(value)
    if anchored is None:
        return ""
    return relative_day_label(anchored, time_zone, now)


__all__ = [
    "anchor_calendar_date",
    "calendar_day_difference",
    "calendar_day_label",
    "coerce_now",
    "day_number",
    "format_long_date",
    "format_medium",
    "format_short_date",
    "format_time",
    "is_leap_year",
    "parse_instant",
    "relative_day_label",
    "resolve_zone",
    "utc_now",
]

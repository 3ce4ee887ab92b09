"""
Date and time helpers for the publication calendar.
"""

import datetime
import re
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

TIME_REGEX = re.compile(
    r"^\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::\d{2}(?:\.\d+)?)?\s*(?P<ampm>[AaPp]\.?[Mm]\.?)?\s*$"
)
US_DATE_REGEX = re.compile(r"^\s*(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4})\s*$")

DateLike = Union[str, datetime.date]


def parse_date(value: DateLike) -> datetime.date:
    """
    Parse a calendar date.

    Args:
        value: date, datetime, "YYYY-MM-DD" or "MM/DD/YYYY"

    Returns:
        Date value
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value

    text = str(value).strip()
    match = US_DATE_REGEX.match(text)
    if match:
        return datetime.date(int(match.group("year")), int(match.group("month")), int(match.group("day")))
    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}")


def parse_time(value: Optional[str]) -> Optional[str]:
    """
    Normalize a wall-clock time to 24-hour HH:MM.

    Args:
        value: "14:30", "2:30 PM", "14:30:00" ...

    Returns:
        "HH:MM" or None when the value is empty or unparseable
    """
    if not value:
        return None
    match = TIME_REGEX.match(str(value))
    if not match:
        return None

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    ampm = match.group("ampm")
    if ampm:
        if not 1 <= hour <= 12:
            return None
        is_pm = ampm[0].lower() == "p"
        hour = hour % 12 + (12 if is_pm else 0)
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def split_moment(value: Optional[str], tz: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a stored date or datetime into local (date, time) strings.

    Full timestamps are converted into the publication timezone; naive
    timestamps are taken as already local. Date-only values yield no time.

    Args:
        value: Raw stored value
        tz: IANA timezone name of the publication

    Returns:
        ("YYYY-MM-DD" or None, "HH:MM" or None)
    """
    if not value:
        return None, None

    text = str(value).strip()
    if "T" not in text and " " not in text.strip():
        try:
            return parse_date(text).isoformat(), None
        except ValueError:
            return None, None

    iso = text.replace(" ", "T", 1)
    if iso.endswith("Z"):
        iso = iso[:-1] + "+00:00"
    try:
        moment = datetime.datetime.fromisoformat(iso)
    except ValueError:
        return None, None

    if moment.tzinfo is not None:
        moment = moment.astimezone(ZoneInfo(tz))
    return moment.date().isoformat(), moment.strftime("%H:%M")


def local_day_bounds(day: datetime.date, tz: str) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Return the UTC instants bounding a local calendar day.

    Args:
        day: Local calendar date
        tz: IANA timezone name

    Returns:
        (start, end) as aware UTC datetimes, end exclusive
    """
    zone = ZoneInfo(tz)
    start = datetime.datetime.combine(day, datetime.time.min, tzinfo=zone)
    end = datetime.datetime.combine(day + datetime.timedelta(days=1), datetime.time.min, tzinfo=zone)
    return start.astimezone(datetime.timezone.utc), end.astimezone(datetime.timezone.utc)


def local_today(tz: str, now: Optional[datetime.datetime] = None) -> datetime.date:
    """Return today's date in the publication timezone."""
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.timezone.utc)
    return now.astimezone(ZoneInfo(tz)).date()


def format_moment(date: Optional[str], time: Optional[str] = None) -> Optional[str]:
    """
    Format a stored moment as "MM/DD/YYYY HH:MM", or "MM/DD/YYYY" without a time.
    """
    if not date:
        return None
    day = parse_date(date)
    text = f"{day.month:02d}/{day.day:02d}/{day.year}"
    if time:
        text += f" {time}"
    return text


def weekday_name(day: DateLike) -> str:
    """Return the English weekday name of a date."""
    return parse_date(day).strftime("%A")


def format_short_date(day: DateLike) -> str:
    """Format a date as "Dec 19, 2023"."""
    day = parse_date(day)
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def format_long_date(day: DateLike) -> str:
    """Format a date as "December 19, 2023"."""
    day = parse_date(day)
    return f"{day.strftime('%B')} {day.day}, {day.year}"

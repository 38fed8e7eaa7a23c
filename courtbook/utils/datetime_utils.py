"""
Datetime helpers shared by the session, recurrence and reminder code.

Session dates and start/end times are stored as naive wall-clock values
(``date`` / ``time`` columns) in the configured ``settings.timezone``.
"""

from datetime import date, datetime, time
from typing import Union
import pytz

from courtbook.config import settings


def utcnow() -> datetime:
    return datetime.now(pytz.UTC)


def local_now() -> datetime:
    """Current time in the zone sessions are scheduled in."""
    return utcnow().astimezone(pytz.timezone(settings.timezone))


def local_today() -> date:
    return local_now().date()


def to_local(moment: datetime) -> datetime:
    """Convert an aware datetime to the session zone; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = pytz.UTC.localize(moment)
    return moment.astimezone(pytz.timezone(settings.timezone))


def parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_time(value: Union[str, time]) -> time:
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def format_hhmm(value: Union[str, time]) -> str:
    """Format a time column as HH:MM, e.g. "18:30:00" -> "18:30"."""
    return parse_time(value).strftime("%H:%M")


def weekday_index(day: date) -> int:
    """Day of week with 0=Sunday..6=Saturday (PostgreSQL DOW numbering)."""
    return (day.weekday() + 1) % 7


def add_years(day: date, years: int) -> date:
    """Shift a date by whole years; Feb 29 lands on Feb 28 in non-leap years."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)

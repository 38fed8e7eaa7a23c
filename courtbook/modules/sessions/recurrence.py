"""
Recurring session expansion.

A parent session plus a rule (daily / weekly / custom weekdays, end date)
expands into the dates of its instances: every matching calendar day from
the day after the parent's date up to and including the end date.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from courtbook.utils.datetime_utils import add_years, weekday_index

GENERATED_TYPES = ("daily", "weekly", "custom")


class RecurrenceError(ValueError):
    """Rule rejected before anything was written."""


def validate_recurrence(
    parent_date: date,
    recurrence_type: str,
    recurrence_days: Optional[Iterable[int]],
    end_date: date,
    max_years: int = 2,
) -> None:
    if recurrence_type not in GENERATED_TYPES:
        raise RecurrenceError("Invalid recurrence type")
    if recurrence_type == "custom":
        days = list(recurrence_days or [])
        if not days:
            raise RecurrenceError("Custom recurrence requires at least one weekday")
        if any(d < 0 or d > 6 for d in days):
            raise RecurrenceError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
    if end_date <= parent_date:
        raise RecurrenceError("End date must be after session date")
    if end_date > add_years(parent_date, max_years):
        raise RecurrenceError(f"Recurrence period too long (maximum {max_years} years)")


def expand_recurrence(
    parent_date: date,
    recurrence_type: str,
    recurrence_days: Optional[Iterable[int]],
    end_date: date,
    max_instances: int = 365,
) -> Tuple[List[date], bool]:
    """
    Dates of the instances for a rule, and whether max_instances cut the
    expansion short. Assumes the rule already passed validate_recurrence.
    """
    parent_weekday = weekday_index(parent_date)
    wanted_days = set(recurrence_days or [])
    dates: List[date] = []
    current = parent_date + timedelta(days=1)
    while current <= end_date:
        dow = weekday_index(current)
        if (
            recurrence_type == "daily"
            or (recurrence_type == "weekly" and dow == parent_weekday)
            or (recurrence_type == "custom" and dow in wanted_days)
        ):
            if len(dates) >= max_instances:
                return dates, True
            dates.append(current)
        current += timedelta(days=1)
    return dates, False

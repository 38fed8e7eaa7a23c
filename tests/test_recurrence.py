from datetime import date, timedelta

import pytest

from courtbook.modules.sessions.recurrence import (
    RecurrenceError, expand_recurrence, validate_recurrence
)
from courtbook.utils.datetime_utils import add_years, weekday_index


def test_weekday_index_counts_from_sunday():
    assert weekday_index(date(2026, 1, 4)) == 0  # Sunday
    assert weekday_index(date(2026, 1, 5)) == 1  # Monday
    assert weekday_index(date(2026, 1, 10)) == 6  # Saturday


def test_custom_days_monday_wednesday():
    dates, capped = expand_recurrence(date(2026, 1, 5), "custom", [1, 3], date(2026, 1, 19))
    assert dates == [
        date(2026, 1, 7),
        date(2026, 1, 12),
        date(2026, 1, 14),
        date(2026, 1, 19),
    ]
    assert capped is False


def test_weekly_keeps_parent_weekday_and_range():
    parent = date(2026, 3, 4)
    end = date(2026, 6, 30)
    dates, _ = expand_recurrence(parent, "weekly", None, end)
    assert dates
    assert all(weekday_index(d) == weekday_index(parent) for d in dates)
    assert min(dates) >= parent + timedelta(days=1)
    assert max(dates) <= end
    assert dates[0] == date(2026, 3, 11)


def test_daily_starts_the_day_after_parent():
    dates, _ = expand_recurrence(date(2026, 1, 5), "daily", None, date(2026, 1, 8))
    assert dates == [date(2026, 1, 6), date(2026, 1, 7), date(2026, 1, 8)]


def test_daily_stops_at_instance_cap():
    parent = date(2026, 1, 1)
    dates, capped = expand_recurrence(parent, "daily", None, add_years(parent, 2), max_instances=365)
    assert len(dates) == 365
    assert capped is True
    assert dates[-1] == parent + timedelta(days=365)


def test_exactly_reaching_cap_is_not_reported_as_capped():
    dates, capped = expand_recurrence(date(2026, 1, 1), "daily", None, date(2026, 1, 4), max_instances=3)
    assert len(dates) == 3
    assert capped is False


@pytest.mark.parametrize("recurrence_type, days, end, message", [
    ("monthly", None, date(2026, 2, 1), "Invalid recurrence type"),
    ("custom", [], date(2026, 2, 1), "at least one weekday"),
    ("custom", [1, 7], date(2026, 2, 1), "between 0"),
    ("weekly", None, date(2026, 1, 5), "after session date"),
    ("weekly", None, date(2028, 1, 6), "too long"),
])
def test_invalid_rules_are_rejected(recurrence_type, days, end, message):
    with pytest.raises(RecurrenceError, match=message):
        validate_recurrence(date(2026, 1, 5), recurrence_type, days, end)


def test_two_years_exactly_is_allowed():
    validate_recurrence(date(2026, 1, 5), "weekly", None, date(2028, 1, 5))


def test_leap_day_parent_clamps_to_february_28():
    assert add_years(date(2028, 2, 29), 2) == date(2030, 2, 28)
    validate_recurrence(date(2028, 2, 29), "daily", None, date(2030, 2, 28))
    with pytest.raises(RecurrenceError):
        validate_recurrence(date(2028, 2, 29), "daily", None, date(2030, 3, 1))

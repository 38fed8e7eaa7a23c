from datetime import date, datetime, time, timezone

import pytest

from courtbook.config import settings
from courtbook.modules.reminders.service import ReminderService, reminder_window


def _session(fake_db, organizer_id, **fields):
    row = {
        "title": "Morning tennis",
        "sport_type": "tennis",
        "location": "Club A",
        "session_date": "2026-03-10",
        "start_time": "09:00:00",
        "end_time": "10:00:00",
        "created_by": organizer_id,
    }
    row.update(fields)
    return fake_db.insert_rows("sessions", row)[0]


def _book(fake_db, session_id, user_id):
    return fake_db.insert_rows("bookings", {"session_id": session_id, "user_id": user_id})[0]


NOW = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)


def test_sends_one_reminder_per_booking(fake_db, alice_id, bob_id):
    session = _session(fake_db, alice_id)
    _book(fake_db, session["id"], alice_id)
    _book(fake_db, session["id"], bob_id)

    result = ReminderService(fake_db).dispatch(now=NOW)

    assert result.reminders_sent == 2
    assert result.sessions_checked == 1
    reminders = fake_db.rows("notifications", type="session_reminder")
    assert sorted(r["user_id"] for r in reminders) == sorted([alice_id, bob_id])
    assert reminders[0]["message"] == 'Reminder: your session "Morning tennis" starts in 1 hour at 09:00 - Club A'
    assert all(b["reminder_sent"] for b in fake_db.rows("bookings"))


def test_second_run_in_same_window_sends_nothing(fake_db, bob_id, alice_id):
    session = _session(fake_db, alice_id)
    _book(fake_db, session["id"], bob_id)
    service = ReminderService(fake_db)

    service.dispatch(now=NOW)
    second = service.dispatch(now=NOW.replace(minute=5))

    assert second.reminders_sent == 0
    assert len(fake_db.rows("notifications", type="session_reminder")) == 1


def test_sessions_outside_window_and_cancelled_are_ignored(fake_db, alice_id, bob_id):
    too_soon = _session(fake_db, alice_id, start_time="08:30:00")
    too_late = _session(fake_db, alice_id, start_time="09:30:00")
    cancelled = _session(fake_db, alice_id, start_time="09:00:00", is_cancelled=True)
    for s in (too_soon, too_late, cancelled):
        _book(fake_db, s["id"], bob_id)

    result = ReminderService(fake_db).dispatch(now=NOW)

    assert result.sessions_checked == 0
    assert fake_db.rows("notifications") == []


def test_window_crossing_midnight_checks_both_days(fake_db, alice_id, bob_id):
    session = _session(fake_db, alice_id, session_date="2026-03-11", start_time="00:02:00")
    _book(fake_db, session["id"], bob_id)

    result = ReminderService(fake_db).dispatch(now=datetime(2026, 3, 10, 23, 0, tzinfo=timezone.utc))

    assert result.reminders_sent == 1


def test_reminder_window_splits_at_midnight():
    ranges = reminder_window(datetime(2026, 3, 10, 23, 0), 55, 65)
    assert [r[0].isoformat() for r in ranges] == ["2026-03-10", "2026-03-11"]


def test_failing_session_does_not_stop_others(fake_db, alice_id, bob_id, monkeypatch):
    first = _session(fake_db, alice_id)
    second = _session(fake_db, alice_id, title="Second", start_time="09:01:00")
    _book(fake_db, first["id"], bob_id)
    _book(fake_db, second["id"], bob_id)
    service = ReminderService(fake_db)
    original = service.remind_session

    def flaky(session):
        if session["id"] == first["id"]:
            raise RuntimeError("boom")
        return original(session)

    monkeypatch.setattr(service, "remind_session", flaky)
    result = service.dispatch(now=NOW)

    assert result.reminders_sent == 1
    assert result.sessions_checked == 2


def test_dispatch_endpoint_open_without_secret(client, fake_db):
    response = client.post("/api/v1/reminders/dispatch")
    assert response.status_code == 200
    assert set(response.json()) == {"reminders_sent", "sessions_checked"}


def test_dispatch_endpoint_checks_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")
    assert client.post("/api/v1/reminders/dispatch").status_code == 401
    assert client.post(
        "/api/v1/reminders/dispatch", headers={"Authorization": "Bearer wrong"}
    ).status_code == 401
    assert client.post(
        "/api/v1/reminders/dispatch", headers={"Authorization": "Bearer s3cret"}
    ).status_code == 200


def test_dispatch_endpoint_reports_top_level_failure(client, fake_db):
    fake_db.failing_tables.add("sessions")
    response = client.post("/api/v1/reminders/dispatch")
    assert response.status_code == 500
    assert "error" in response.json()


def test_reminder_window_across_dst_change(monkeypatch):
    monkeypatch.setattr(settings, "timezone", "Europe/Paris")
    # 00:30 UTC on the spring-forward night is 01:30 CET; an hour later clocks read 03:30 CEST
    now = datetime(2026, 3, 29, 0, 30, tzinfo=timezone.utc)

    ranges = reminder_window(now, 55, 65)

    assert ranges == [(date(2026, 3, 29), time(3, 25), time(3, 35))]

from datetime import timedelta

from courtbook.utils.datetime_utils import local_today
from tests.conftest import auth_headers


def _create_session(client, user_id, session_payload, **overrides):
    response = client.post("/api/v1/sessions", json=session_payload(**overrides), headers=auth_headers(user_id))
    assert response.status_code == 201
    return response.json()["id"]


def test_booking_lifecycle_notifies_organizer_and_participant(
    client, fake_db, admin_id, bob_id, session_payload
):
    tomorrow = (local_today() + timedelta(days=1)).isoformat()
    session_id = _create_session(client, admin_id, session_payload, session_date=tomorrow)

    booked = client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    assert booked.status_code == 201
    inbox = client.get("/api/v1/notifications", headers=auth_headers(admin_id)).json()
    assert [n["message"] for n in inbox] == ['Bob booked your session "Friday padel"']
    assert inbox[0]["type"] == "booking_created"
    assert inbox[0]["actor_id"] == bob_id

    cancelled = client.delete(f"/api/v1/sessions/{session_id}/bookings/me", headers=auth_headers(bob_id))
    assert cancelled.status_code == 204
    inbox = client.get("/api/v1/notifications", headers=auth_headers(admin_id)).json()
    assert inbox[0]["message"] == 'Bob cancelled their booking for "Friday padel"'
    assert inbox[0]["type"] == "booking_cancelled"

    client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    edited = client.patch(
        f"/api/v1/sessions/{session_id}", json={"location": "Court 7"}, headers=auth_headers(admin_id)
    )
    assert edited.status_code == 200
    bob_inbox = client.get("/api/v1/notifications", headers=auth_headers(bob_id)).json()
    assert [n["message"] for n in bob_inbox] == ['"Friday padel" was modified by its organizer']


def test_untracked_field_change_does_not_notify(client, fake_db, alice_id, bob_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload)
    client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    client.patch(f"/api/v1/sessions/{session_id}", json={"description": "Bring balls"}, headers=auth_headers(alice_id))
    assert fake_db.rows("notifications", user_id=bob_id) == []


def test_organizer_booking_own_session_is_silent(client, fake_db, alice_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload)
    response = client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(alice_id))
    assert response.status_code == 201
    assert fake_db.rows("notifications") == []


def test_duplicate_booking_is_a_conflict(client, alice_id, bob_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload)
    assert client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id)).status_code == 201
    again = client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    assert again.status_code == 409
    assert again.json()["error"] == "You already booked this session"


def test_full_session_rejects_booking(client, fake_db, alice_id, bob_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload, max_participants=1)
    assert client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id)).status_code == 201
    carol_id = fake_db.create_user("carol@example.com", "Carol")
    full = client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(carol_id))
    assert full.status_code == 409
    assert full.json()["error"] == "Session is full"


def test_cancelled_session_cannot_be_booked(client, alice_id, bob_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload)
    client.post(f"/api/v1/sessions/{session_id}/cancel", headers=auth_headers(alice_id))
    response = client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    assert response.status_code == 400


def test_booking_unknown_session_is_404(client, bob_id):
    response = client.post("/api/v1/sessions/does-not-exist/bookings", headers=auth_headers(bob_id))
    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}


def test_cancelling_missing_booking_is_404(client, alice_id, bob_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload)
    response = client.delete(f"/api/v1/sessions/{session_id}/bookings/me", headers=auth_headers(bob_id))
    assert response.status_code == 404


def test_session_bookings_list_names_participants(client, alice_id, bob_id, session_payload):
    session_id = _create_session(client, alice_id, session_payload)
    client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    response = client.get(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(alice_id))
    assert response.status_code == 200
    assert [(b["user_id"], b["full_name"]) for b in response.json()] == [(bob_id, "Bob")]

    mine = client.get("/api/v1/bookings/me", headers=auth_headers(bob_id))
    assert [b["session_id"] for b in mine.json()] == [session_id]

from tests.conftest import auth_headers


def test_failed_recipient_does_not_block_others(client, fake_db, alice_id, bob_id, session_payload):
    carol_id = fake_db.create_user("carol@example.com", "Carol")
    session_id = client.post(
        "/api/v1/sessions", json=session_payload(), headers=auth_headers(alice_id)
    ).json()["id"]
    for user_id in (bob_id, carol_id):
        client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(user_id))

    # the batch insert fails, then carol's single-row retry fails too
    fake_db.insert_failures.append(
        lambda table, payload: table == "notifications"
        and (isinstance(payload, list) or payload["user_id"] == carol_id)
    )
    response = client.delete(f"/api/v1/sessions/{session_id}", headers=auth_headers(alice_id))

    assert response.status_code == 204
    assert len(fake_db.rows("notifications", type="session_cancelled", user_id=bob_id)) == 1
    assert fake_db.rows("notifications", type="session_cancelled", user_id=carol_id) == []
    assert fake_db.rows("sessions", id=session_id) == []


def test_notification_outage_does_not_fail_booking(client, fake_db, alice_id, bob_id, session_payload):
    session_id = client.post(
        "/api/v1/sessions", json=session_payload(), headers=auth_headers(alice_id)
    ).json()["id"]
    fake_db.failing_tables.add("notifications")

    booked = client.post(f"/api/v1/sessions/{session_id}/bookings", headers=auth_headers(bob_id))
    assert booked.status_code == 201
    assert len(fake_db.rows("bookings", session_id=session_id)) == 1

    updated = client.patch(
        f"/api/v1/sessions/{session_id}", json={"location": "Court 9"}, headers=auth_headers(alice_id)
    )
    assert updated.status_code == 200
    assert fake_db.tables["notifications"] == []

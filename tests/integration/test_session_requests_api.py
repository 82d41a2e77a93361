from app.schemas.notification import NotificationKind


def _trainer_with_tuesday_hours(client, start: str = "09:00", end: str = "17:00") -> int:
    trainer_id = client.post("/trainers", json={"display_name": "Sam Rivera"}).json()["id"]
    response = client.put(f"/trainers/{trainer_id}/availability/days/2/slots", json={"start": start, "end": end})
    assert response.status_code == 200
    return trainer_id


def _submit(client, trainer_id: int, start: str, end: str, on: str = "2024-01-02", client_id: int = 7, name: str = "Jordan"):
    response = client.post(
        f"/trainers/{trainer_id}/requests",
        json={
            "client_id": client_id,
            "client_name": name,
            "category": "Strength",
            "requested_date": on,
            "requested_start": start,
            "requested_end": end,
            "message": "First session",
        },
    )
    assert response.status_code == 201
    return response.json()


def test_submitted_request_is_pending(client):
    trainer_id = _trainer_with_tuesday_hours(client)

    request = _submit(client, trainer_id, "10:00", "11:00")

    assert request["status"] == "pending"
    assert request["resolved_at"] is None


def test_approve_creates_confirmed_session_and_notifies_client(client, notifier):
    trainer_id = _trainer_with_tuesday_hours(client)
    request = _submit(client, trainer_id, "10:00", "11:00")

    response = client.patch(f"/trainers/{trainer_id}/requests/{request['id']}/approve")

    assert response.status_code == 200
    session = response.json()
    assert session["status"] == "confirmed"
    assert session["request_id"] == request["id"]
    assert (session["date"], session["start_time"], session["end_time"]) == ("2024-01-02", "10:00", "11:00")
    assert session["notes"] == "First session"

    approved = client.get(f"/trainers/{trainer_id}/requests", params={"status": "approved"}).json()
    assert [item["id"] for item in approved] == [request["id"]]

    assert len(notifier.events) == 1
    event = notifier.events[0]
    assert event.kind == NotificationKind.APPROVED
    assert event.client_id == 7
    assert event.session_id == session["id"]
    assert "Tue, Jan 02 at 10:00" in event.message


def test_approved_session_blocks_the_slot(client):
    trainer_id = _trainer_with_tuesday_hours(client)
    request = _submit(client, trainer_id, "10:00", "11:00")
    client.patch(f"/trainers/{trainer_id}/requests/{request['id']}/approve")

    verdict = client.post(
        f"/trainers/{trainer_id}/validate",
        json={"date": "2024-01-02", "start": "10:30", "end": "11:30"},
    ).json()

    assert verdict["is_valid"] is False
    assert "Conflicts with existing session: Jordan at 10:00-11:00" in verdict["errors"]


def test_conflicting_approval_is_rejected_and_request_stays_pending(client, notifier):
    trainer_id = _trainer_with_tuesday_hours(client)
    first = _submit(client, trainer_id, "10:00", "11:00")
    second = _submit(client, trainer_id, "10:30", "11:30", client_id=8, name="Alex")
    client.patch(f"/trainers/{trainer_id}/requests/{first['id']}/approve")

    response = client.patch(f"/trainers/{trainer_id}/requests/{second['id']}/approve")

    assert response.status_code == 409
    body = response.json()
    assert body["error"]["message"] == "Session request cannot be approved"
    assert body["detail"]["is_valid"] is False
    assert "Conflicts with existing session: Jordan at 10:00-11:00" in body["detail"]["errors"]

    pending = client.get(f"/trainers/{trainer_id}/requests", params={"status": "pending"}).json()
    sessions = client.get(f"/trainers/{trainer_id}/sessions").json()
    assert [item["id"] for item in pending] == [second["id"]]
    assert len(sessions) == 1
    assert [event.kind for event in notifier.events] == [NotificationKind.APPROVED]


def test_request_outside_template_cannot_be_approved(client):
    trainer_id = _trainer_with_tuesday_hours(client)
    wednesday = _submit(client, trainer_id, "10:00", "11:00", on="2024-01-03")
    late = _submit(client, trainer_id, "16:30", "17:30")

    wednesday_response = client.patch(f"/trainers/{trainer_id}/requests/{wednesday['id']}/approve")
    late_response = client.patch(f"/trainers/{trainer_id}/requests/{late['id']}/approve")

    assert wednesday_response.json()["detail"]["errors"] == ["Trainer is not available on this day of the week"]
    assert late_response.json()["detail"]["errors"] == [
        "Requested time is outside available hours or already booked"
    ]


def test_past_request_cannot_be_approved(client):
    trainer_id = _trainer_with_tuesday_hours(client)
    request = _submit(client, trainer_id, "10:00", "11:00", on="2023-12-26")

    response = client.patch(f"/trainers/{trainer_id}/requests/{request['id']}/approve")

    assert response.status_code == 409
    assert response.json()["detail"]["errors"] == ["Cannot schedule sessions in the past"]


def test_warnings_do_not_block_approval_and_reach_the_client(client, notifier):
    trainer_id = _trainer_with_tuesday_hours(client, start="05:00", end="09:00")
    request = _submit(client, trainer_id, "05:00", "06:00")

    response = client.patch(f"/trainers/{trainer_id}/requests/{request['id']}/approve")

    assert response.status_code == 200
    assert "Note: Session is outside normal business hours (06:00-22:00)" in notifier.events[0].message


def test_decline_resolves_request_and_notifies_client(client, notifier):
    trainer_id = _trainer_with_tuesday_hours(client)
    request = _submit(client, trainer_id, "10:00", "11:00")

    response = client.patch(f"/trainers/{trainer_id}/requests/{request['id']}/decline")

    assert response.status_code == 200
    assert response.json()["status"] == "declined"
    assert response.json()["resolved_at"] is not None
    assert notifier.events[0].kind == NotificationKind.DECLINED
    assert notifier.events[0].session_id is None
    assert client.get(f"/trainers/{trainer_id}/sessions").json() == []


def test_resolved_request_cannot_be_resolved_again(client):
    trainer_id = _trainer_with_tuesday_hours(client)
    approved = _submit(client, trainer_id, "10:00", "11:00")
    declined = _submit(client, trainer_id, "12:00", "13:00")
    client.patch(f"/trainers/{trainer_id}/requests/{approved['id']}/approve")
    client.patch(f"/trainers/{trainer_id}/requests/{declined['id']}/decline")

    again = client.patch(f"/trainers/{trainer_id}/requests/{approved['id']}/approve")
    decline_approved = client.patch(f"/trainers/{trainer_id}/requests/{approved['id']}/decline")
    approve_declined = client.patch(f"/trainers/{trainer_id}/requests/{declined['id']}/approve")

    for response in (again, decline_approved, approve_declined):
        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Session request already resolved"


def test_request_of_another_trainer_is_not_found(client):
    trainer_id = _trainer_with_tuesday_hours(client)
    other_id = client.post("/trainers", json={"display_name": "Other Coach"}).json()["id"]
    request = _submit(client, trainer_id, "10:00", "11:00")

    response = client.patch(f"/trainers/{other_id}/requests/{request['id']}/approve")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Session request not found"


def test_request_with_end_before_start_is_rejected(client):
    trainer_id = _trainer_with_tuesday_hours(client)

    response = client.post(
        f"/trainers/{trainer_id}/requests",
        json={
            "client_id": 7,
            "client_name": "Jordan",
            "requested_date": "2024-01-02",
            "requested_start": "11:00",
            "requested_end": "10:00",
        },
    )

    assert response.status_code == 422

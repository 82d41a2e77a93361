def _create_trainer(client, name: str = "Sam Rivera") -> int:
    response = client.post("/trainers", json={"display_name": name})
    assert response.status_code == 201
    return response.json()["id"]


def _put_slot(client, trainer_id: int, day: int, start: str, end: str, replace_index: int | None = None):
    payload = {"start": start, "end": end}
    if replace_index is not None:
        payload["replace_index"] = replace_index
    return client.put(f"/trainers/{trainer_id}/availability/days/{day}/slots", json=payload)


def test_template_slots_are_added_and_listed_in_start_order(client):
    trainer_id = _create_trainer(client)

    assert _put_slot(client, trainer_id, 2, "13:00", "17:00").status_code == 200
    assert _put_slot(client, trainer_id, 2, "09:00", "12:00").status_code == 200
    assert _put_slot(client, trainer_id, 4, "07:00", "08:00").status_code == 200

    template = client.get(f"/trainers/{trainer_id}/availability/template").json()

    assert [(slot["day_of_week"], slot["start_time"]) for slot in template] == [
        (2, "09:00"),
        (2, "13:00"),
        (4, "07:00"),
    ]


def test_overlapping_template_slot_is_rejected(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "17:00")

    response = _put_slot(client, trainer_id, 2, "12:00", "18:00")

    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Time slot overlaps with existing slot"


def test_adjacent_template_slots_are_allowed(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "12:00")

    assert _put_slot(client, trainer_id, 2, "12:00", "15:00").status_code == 200


def test_replace_slot_by_index(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "12:00")
    _put_slot(client, trainer_id, 2, "13:00", "15:00")

    response = _put_slot(client, trainer_id, 2, "11:00", "12:30", replace_index=0)
    missing = _put_slot(client, trainer_id, 2, "16:00", "17:00", replace_index=5)

    assert response.status_code == 200
    assert response.json()["start_time"] == "11:00"
    assert missing.status_code == 404
    weekly = client.get(f"/trainers/{trainer_id}/availability/weekly").json()
    assert weekly[2]["time_slots"] == [
        {"start": "11:00", "end": "12:30"},
        {"start": "13:00", "end": "15:00"},
    ]


def test_invalid_intervals_are_rejected(client):
    trainer_id = _create_trainer(client)

    backwards = _put_slot(client, trainer_id, 2, "17:00", "09:00")
    malformed = _put_slot(client, trainer_id, 2, "9am", "10:00")
    bad_day = _put_slot(client, trainer_id, 7, "09:00", "10:00")

    assert backwards.status_code == 422
    assert malformed.status_code == 422
    assert bad_day.status_code == 422
    assert backwards.json()["error"]["code"] == "validation_error"


def test_toggle_flips_every_slot_of_the_day(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "12:00")
    _put_slot(client, trainer_id, 2, "13:00", "17:00")

    toggled = client.post(f"/trainers/{trainer_id}/availability/days/2/toggle")
    added_while_off = _put_slot(client, trainer_id, 2, "18:00", "19:00")
    weekly = client.get(f"/trainers/{trainer_id}/availability/weekly").json()

    assert toggled.status_code == 200
    assert [slot["is_available"] for slot in toggled.json()] == [False, False]
    assert added_while_off.json()["is_available"] is False
    assert weekly[2]["day"] == "Tuesday"
    assert weekly[2]["is_available"] is False
    assert len(weekly[2]["time_slots"]) == 3

    toggled_back = client.post(f"/trainers/{trainer_id}/availability/days/2/toggle")
    assert all(slot["is_available"] for slot in toggled_back.json())


def test_toggle_day_without_slots_is_a_noop(client):
    trainer_id = _create_trainer(client)

    response = client.post(f"/trainers/{trainer_id}/availability/days/0/toggle")

    assert response.status_code == 200
    assert response.json() == []


def test_remove_slot_by_index(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "12:00")
    _put_slot(client, trainer_id, 2, "13:00", "17:00")

    removed = client.delete(f"/trainers/{trainer_id}/availability/days/2/slots/0")
    missing = client.delete(f"/trainers/{trainer_id}/availability/days/2/slots/3")
    template = client.get(f"/trainers/{trainer_id}/availability/template").json()

    assert removed.status_code == 204
    assert missing.status_code == 404
    assert [slot["start_time"] for slot in template] == ["13:00"]


def test_reconciled_day_splits_around_booked_session(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "17:00")
    session = client.post(
        f"/trainers/{trainer_id}/sessions",
        json={
            "client_id": 7,
            "client_name": "Jordan",
            "date": "2024-01-02",
            "start_time": "10:00",
            "end_time": "11:00",
        },
    ).json()

    slots = client.get(f"/trainers/{trainer_id}/availability/days/2").json()

    assert [(s["start"], s["end"], s["is_booked"]) for s in slots] == [
        ("09:00", "10:00", False),
        ("10:00", "11:00", True),
        ("11:00", "17:00", False),
    ]
    assert slots[1]["session_id"] == session["id"]
    assert len({s["key"] for s in slots}) == 3


def test_reconciled_day_can_be_scoped_to_one_date(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 2, "09:00", "17:00")
    client.post(
        f"/trainers/{trainer_id}/sessions",
        json={
            "client_id": 7,
            "client_name": "Jordan",
            "date": "2024-01-02",
            "start_time": "10:00",
            "end_time": "11:00",
        },
    )

    next_week = client.get(f"/trainers/{trainer_id}/availability/days/2", params={"date": "2024-01-09"})
    wrong_day = client.get(f"/trainers/{trainer_id}/availability/days/2", params={"date": "2024-01-03"})

    assert [(s["start"], s["end"], s["is_booked"]) for s in next_week.json()] == [("09:00", "17:00", False)]
    assert wrong_day.status_code == 422


def test_unavailable_slots_pass_through_reconciliation(client):
    trainer_id = _create_trainer(client)
    _put_slot(client, trainer_id, 3, "09:00", "12:00")
    client.post(f"/trainers/{trainer_id}/availability/days/3/toggle")

    slots = client.get(f"/trainers/{trainer_id}/availability/days/3").json()

    assert slots == [
        {
            "key": slots[0]["key"],
            "template_id": slots[0]["template_id"],
            "day_of_week": 3,
            "start": "09:00",
            "end": "12:00",
            "is_available": False,
            "is_booked": False,
            "session_id": None,
        }
    ]


def test_unknown_trainer_returns_404(client):
    response = client.get("/trainers/999/availability/weekly")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Trainer not found"

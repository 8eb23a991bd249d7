def _default_calendar(client):
    calendars = client.get("/api/calendars").json()["calendars"]
    return calendars[0]


def _event(client, calendar_id, title, start, end, **extra):
    payload = {"title": title, "start_time": start, "end_time": end, "calendar_id": calendar_id, **extra}
    response = client.post("/api/calendar/events", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["event"]


def test_default_calendar_is_created_once(client):
    first = client.get("/api/calendars").json()["calendars"]
    second = client.get("/api/calendars").json()["calendars"]
    assert len(first) == len(second) == 1
    assert first[0]["name"] == "My Calendar"
    assert first[0]["is_default"] is True
    assert first[0]["id"] == second[0]["id"]


def test_create_calendar(client):
    response = client.post("/api/calendars", json={"name": "Gym", "color": "#10B981"})
    assert response.status_code == 201
    assert response.json()["calendar"]["name"] == "Gym"
    assert client.post("/api/calendars", json={"name": " "}).status_code == 400


def test_calendar_color_must_be_hex(client):
    for color in ("red';position:fixed", "#12345", "#GGGGGG"):
        response = client.post("/api/calendars", json={"name": "Gym", "color": color})
        assert response.status_code == 400
        assert response.json()["detail"] == "Calendar color must be a hex color like #3B82F6"
    assert client.post("/api/calendars", json={"name": "Gym", "color": "#fa0"}).status_code == 201


def test_event_is_stored_in_utc_with_calendar(client):
    calendar = _default_calendar(client)
    event = _event(
        client,
        calendar["id"],
        "Standup",
        "2024-05-01T09:00:00+02:00",
        "2024-05-01T09:15:00+02:00",
        location="Room 4",
    )
    assert event["start_time"] == "2024-05-01T07:00:00+00:00"
    assert event["end_time"] == "2024-05-01T07:15:00+00:00"
    assert event["calendar"] == {"id": calendar["id"], "name": "My Calendar", "color": "#007AFF"}
    assert event["is_all_day"] is False


def test_event_validation(client, current_user):
    calendar = _default_calendar(client)
    response = client.post("/api/calendar/events", json={"title": "x", "calendar_id": calendar["id"]})
    assert response.status_code == 400
    assert response.json()["detail"] == "Title, start time, end time, and calendar are required"

    response = client.post(
        "/api/calendar/events",
        json={
            "title": "Backwards",
            "start_time": "2024-05-01T10:00:00Z",
            "end_time": "2024-05-01T09:00:00Z",
            "calendar_id": calendar["id"],
        },
    )
    assert response.json()["detail"] == "End time must be after start time"

    current_user.become("user-2")
    response = client.post(
        "/api/calendar/events",
        json={
            "title": "Intruder",
            "start_time": "2024-05-01T09:00:00Z",
            "end_time": "2024-05-01T10:00:00Z",
            "calendar_id": calendar["id"],
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Calendar not found"


def test_listing_keeps_events_overlapping_the_window(client):
    calendar = _default_calendar(client)
    trip = _event(client, calendar["id"], "Trip", "2024-04-28T08:00:00Z", "2024-05-02T18:00:00Z")
    inside = _event(client, calendar["id"], "Lunch", "2024-05-03T12:00:00Z", "2024-05-03T13:00:00Z")
    _event(client, calendar["id"], "Later", "2024-06-10T12:00:00Z", "2024-06-10T13:00:00Z")

    events = client.get(
        "/api/calendar/events",
        params={"start": "2024-05-01T00:00:00Z", "end": "2024-05-07T23:59:59Z"},
    ).json()["events"]
    assert [event["id"] for event in events] == [trip["id"], inside["id"]]


def test_listing_filters_by_calendar(client):
    default = _default_calendar(client)
    gym = client.post("/api/calendars", json={"name": "Gym"}).json()["calendar"]
    _event(client, default["id"], "Standup", "2024-05-01T09:00:00Z", "2024-05-01T09:15:00Z")
    workout = _event(client, gym["id"], "Workout", "2024-05-01T18:00:00Z", "2024-05-01T19:00:00Z")

    events = client.get("/api/calendar/events", params={"calendar_id": gym["id"]}).json()["events"]
    assert [event["id"] for event in events] == [workout["id"]]
    both = client.get("/api/calendar/events", params={"calendar_id": f"{gym['id']},{default['id']}"}).json()
    assert len(both["events"]) == 2


def test_update_and_delete_event(client, current_user):
    calendar = _default_calendar(client)
    event = _event(client, calendar["id"], "Standup", "2024-05-01T09:00:00Z", "2024-05-01T09:15:00Z")
    response = client.put(
        f"/api/calendar/events/{event['id']}",
        json={
            "title": "Retro",
            "start_time": "2024-05-01T15:00:00Z",
            "end_time": "2024-05-01T16:00:00Z",
            "calendar_id": calendar["id"],
            "is_all_day": False,
        },
    )
    assert response.status_code == 200
    assert response.json()["event"]["title"] == "Retro"
    assert response.json()["event"]["start_time"] == "2024-05-01T15:00:00+00:00"

    current_user.become("user-2")
    assert client.get(f"/api/calendar/events/{event['id']}").status_code == 404
    current_user.become("user-1")

    assert client.delete(f"/api/calendar/events/{event['id']}").json() == {"message": "Event deleted successfully"}
    assert client.get(f"/api/calendar/events/{event['id']}").status_code == 404
    assert client.delete(f"/api/calendar/events/{event['id']}").status_code == 404

from datetime import datetime, timezone


def _today_utc():
    return datetime.now(timezone.utc).date().isoformat()


def test_saving_twice_for_a_date_updates_the_same_entry(client):
    first = client.post("/api/mood", json={"date": "2024-05-01", "mood_score": 6})
    assert first.status_code == 201
    entry = first.json()["entry"]
    assert entry["mood_label"] == "Good"

    second = client.post("/api/mood", json={"date": "2024-05-01", "mood_score": 3, "notes": "rough day"})
    assert second.status_code == 200
    updated = second.json()["entry"]
    assert updated["id"] == entry["id"]
    assert updated["mood_score"] == 3
    assert updated["notes"] == "rough day"

    listed = client.get("/api/mood", params={"start_date": "2024-05-01", "end_date": "2024-05-01"}).json()
    assert len(listed["entries"]) == 1


def test_label_is_derived_from_score(client):
    entry = client.post("/api/mood", json={"date": "2024-05-02", "mood_score": 4}).json()["entry"]
    assert entry["mood_label"] == "Not Great"
    entry = client.post("/api/mood", json={"date": "2024-05-03", "mood_score": 9, "mood_label": "Custom"}).json()["entry"]
    assert entry["mood_label"] == "Custom"


def test_score_must_be_in_range(client):
    for score in (0, 11):
        response = client.post("/api/mood", json={"mood_score": score})
        assert response.status_code == 400
        assert response.json()["detail"] == "Mood score must be between 1 and 10"
    assert client.post("/api/mood", json={}).status_code == 400


def test_date_defaults_to_today_in_zone(client):
    entry = client.post("/api/mood", params={"timezone": "UTC"}, json={"mood_score": 7}).json()["entry"]
    assert entry["date"] == _today_utc()


def test_days_window_listing(client):
    client.post("/api/mood", json={"mood_score": 7})
    client.post("/api/mood", json={"date": "2001-01-01", "mood_score": 2})
    payload = client.get("/api/mood", params={"days": 7, "timezone": "UTC"}).json()
    assert [entry["date"] for entry in payload["entries"]] == [_today_utc()]
    assert payload["window"]["end_date"] == _today_utc()
    assert payload["window"]["timezone"] == "UTC"


def test_bad_window_parameters(client):
    response = client.get("/api/mood", params={"days": 7, "timezone": "Not/AZone"})
    assert response.status_code == 400
    assert client.get("/api/mood", params={"days": 0}).status_code == 400


def test_moving_entry_onto_taken_date_is_rejected(client):
    client.post("/api/mood", json={"date": "2024-05-01", "mood_score": 5})
    other = client.post("/api/mood", json={"date": "2024-05-02", "mood_score": 5}).json()["entry"]
    response = client.put(f"/api/mood/{other['id']}", json={"date": "2024-05-01"})
    assert response.status_code == 400


def test_update_get_delete(client, current_user):
    entry = client.post("/api/mood", json={"date": "2024-05-01", "mood_score": 5}).json()["entry"]
    response = client.put(f"/api/mood/{entry['id']}", json={"mood_score": 8})
    assert response.status_code == 200
    assert response.json()["entry"]["mood_score"] == 8
    assert client.put(f"/api/mood/{entry['id']}", json={"mood_score": 12}).status_code == 400

    current_user.become("user-2")
    assert client.get(f"/api/mood/{entry['id']}").status_code == 404
    current_user.become("user-1")

    assert client.delete(f"/api/mood/{entry['id']}").status_code == 200
    assert client.get(f"/api/mood/{entry['id']}").status_code == 404


def test_null_date_or_score_leaves_entry_alone(client):
    entry = client.post("/api/mood", json={"date": "2024-05-01", "mood_score": 5}).json()["entry"]
    response = client.put(f"/api/mood/{entry['id']}", json={"date": None})
    assert response.status_code == 400
    assert response.json()["detail"] == "Date is required"
    assert client.put(f"/api/mood/{entry['id']}", json={"mood_score": None}).status_code == 400

    stored = client.get(f"/api/mood/{entry['id']}").json()["entry"]
    assert stored["date"] == "2024-05-01"
    assert stored["mood_score"] == 5

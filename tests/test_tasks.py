def _create(client, **overrides):
    payload = {"title": "Write report", "priority": "high", "tags": ["work"]}
    payload.update(overrides)
    response = client.post("/api/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["task"]


def test_create_and_list_tasks(client):
    task = _create(client, due_date="2024-06-01")
    assert task["title"] == "Write report"
    assert task["status"] == "pending"
    assert task["priority"] == "high"
    assert task["tags"] == ["work"]
    assert task["due_date"] == "2024-06-01"

    response = client.get("/api/tasks")
    assert response.status_code == 200
    assert [item["id"] for item in response.json()["tasks"]] == [task["id"]]


def test_title_is_required(client):
    response = client.post("/api/tasks", json={"title": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Title is required"


def test_invalid_status_and_priority(client):
    assert client.post("/api/tasks", json={"title": "x", "status": "later"}).status_code == 400
    assert client.post("/api/tasks", json={"title": "x", "priority": "extreme"}).status_code == 400


def test_filter_by_status(client):
    done = _create(client, title="Done", status="completed")
    _create(client, title="Open")
    response = client.get("/api/tasks", params={"status": "completed"})
    assert [item["id"] for item in response.json()["tasks"]] == [done["id"]]


def test_update_and_delete(client):
    task = _create(client)
    response = client.put(f"/api/tasks/{task['id']}", json={"status": "in_progress", "title": "Renamed"})
    assert response.status_code == 200
    updated = response.json()["task"]
    assert updated["status"] == "in_progress"
    assert updated["title"] == "Renamed"
    assert updated["priority"] == "high"

    response = client.delete(f"/api/tasks/{task['id']}")
    assert response.json() == {"message": "Task deleted successfully"}
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404


def test_tasks_are_scoped_to_their_owner(client, current_user):
    task = _create(client)
    current_user.become("user-2")
    assert client.get("/api/tasks").json()["tasks"] == []
    assert client.get(f"/api/tasks/{task['id']}").status_code == 404
    assert client.put(f"/api/tasks/{task['id']}", json={"title": "Mine now"}).status_code == 404
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


def test_invalid_body_maps_to_bad_request(client):
    response = client.post("/api/tasks", json={"title": "x", "due_date": "not-a-date"})
    assert response.status_code == 400


def test_null_status_or_priority_leaves_task_alone(client):
    task = _create(client)
    response = client.put(f"/api/tasks/{task['id']}", json={"status": None})
    assert response.status_code == 400
    assert response.json()["detail"] == "Status must be pending, in_progress, completed, or cancelled"
    response = client.put(f"/api/tasks/{task['id']}", json={"priority": None})
    assert response.status_code == 400
    assert response.json()["detail"] == "Priority must be low, medium, high, or urgent"

    stored = client.get(f"/api/tasks/{task['id']}").json()["task"]
    assert stored["status"] == "pending"
    assert stored["priority"] == "high"

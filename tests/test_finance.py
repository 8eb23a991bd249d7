from datetime import datetime, timezone


def _add(client, **overrides):
    payload = {"type": "expense", "amount": 12.5, "category": "Food"}
    payload.update(overrides)
    response = client.post("/api/finance", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["entry"]


def test_create_requires_type_and_amount(client):
    response = client.post("/api/finance", json={"type": "expense"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Type and amount are required"
    response = client.post("/api/finance", json={"type": "gift", "amount": 3})
    assert response.json()["detail"] == "Type must be income, expense, or transfer"


def test_entry_defaults_to_today(client):
    entry = _add(client, tags=["groceries"])
    assert entry["date"] == datetime.now(timezone.utc).date().isoformat()
    assert entry["amount"] == 12.5
    assert entry["tags"] == ["groceries"]


def test_listing_window_and_filters(client):
    _add(client)
    _add(client, type="income", amount=1000, category="Salary")
    _add(client, date="2000-01-01")

    payload = client.get("/api/finance", params={"days": 30, "timezone": "UTC"}).json()
    assert len(payload["entries"]) == 2
    assert payload["window"]["timezone"] == "UTC"

    income = client.get("/api/finance", params={"type": "income"}).json()["entries"]
    assert [entry["category"] for entry in income] == ["Salary"]

    food = client.get("/api/finance", params={"category": "Food", "start_date": "1999-01-01", "end_date": "2100-01-01"}).json()
    assert len(food["entries"]) == 2
    assert "window" not in food


def test_update_and_delete(client, current_user):
    entry = _add(client)
    response = client.put(f"/api/finance/{entry['id']}", json={"amount": 20, "type": "transfer"})
    assert response.status_code == 200
    assert response.json()["entry"]["type"] == "transfer"
    assert client.put(f"/api/finance/{entry['id']}", json={"type": "loan"}).status_code == 400

    current_user.become("user-2")
    assert client.delete(f"/api/finance/{entry['id']}").status_code == 404
    current_user.become("user-1")

    response = client.delete(f"/api/finance/{entry['id']}")
    assert response.json() == {"message": "Finance entry deleted successfully"}
    assert client.get(f"/api/finance/{entry['id']}").status_code == 404


def test_null_required_fields_leave_entry_alone(client):
    entry = _add(client, date="2024-04-01")
    for field, message in (("date", "Date is required"), ("currency", "Currency is required")):
        response = client.put(f"/api/finance/{entry['id']}", json={field: None})
        assert response.status_code == 400
        assert response.json()["detail"] == message
    assert client.put(f"/api/finance/{entry['id']}", json={"amount": None}).status_code == 400

    stored = client.get(f"/api/finance/{entry['id']}").json()["entry"]
    assert stored["date"] == "2024-04-01"
    assert stored["currency"] == "USD"
    assert stored["amount"] == 12.5

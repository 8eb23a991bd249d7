from backend import settings


def _add(client, widget_type_id="weather", **extra):
    payload = {"widget_type_id": widget_type_id, "title": extra.pop("title", "My widget"), **extra}
    return client.post("/api/widgets", json=payload)


def test_catalog_is_grouped_by_category(client):
    catalog = client.get("/api/widget-types").json()["widgetTypes"]
    assert set(catalog) == {"productivity", "health", "finance", "utility"}
    assert {item["id"] for item in catalog["productivity"]} == {"task_manager", "notes", "calendar"}
    weather = catalog["utility"][0]
    assert weather["display_name"] == "Weather"
    assert weather["default_config"]["location"] == "London"


def test_create_widget_uses_type_defaults(client):
    response = _add(client, position_x=1, width=2)
    assert response.status_code == 201, response.text
    payload = response.json()
    assert payload["message"] == "Weather widget added successfully"
    widget = payload["widget"]
    assert widget["config"]["unit"] == "celsius"
    assert widget["width"] == 2
    assert widget["widget_types"]["display_name"] == "Weather"
    assert [item["id"] for item in client.get("/api/widgets").json()["widgets"]] == [widget["id"]]


def test_duplicate_widget_type_conflicts(client):
    first = _add(client).json()["widget"]
    response = _add(client, title="Second")
    assert response.status_code == 409
    assert response.json()["detail"] == "You already have a Weather widget"
    assert response.json()["existingWidget"] == {"id": first["id"], "title": "My widget"}


def test_invalid_widget_requests(client):
    response = client.post("/api/widgets", json={"title": "x"})
    assert response.json()["detail"] == "Widget type ID is required"
    response = _add(client, widget_type_id="habit_tracker")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid widget type"
    response = _add(client, width=5)
    assert response.status_code == 400
    assert response.json()["detail"] == "Widget width must be between 1 and 4"
    response = _add(client, position_y=-1)
    assert response.json()["detail"] == "Widget position Y must be non-negative"
    response = _add(client, title="  ")
    assert response.json()["detail"] == "Widget title is required and must not be empty"
    response = _add(client, config=["not", "a", "dict"])
    assert response.json()["detail"] == "Widget config must be a valid JSON object"


def test_widget_cap(client, monkeypatch):
    monkeypatch.setenv("MAX_WIDGETS_PER_USER", "2")
    settings._settings = None
    assert _add(client, "weather").status_code == 201
    assert _add(client, "notes").status_code == 201
    response = _add(client, "calendar")
    assert response.status_code == 400
    assert response.json()["detail"] == (
        "Maximum number of widgets (2) reached. Please remove some widgets before adding new ones."
    )


def test_update_widget(client, current_user):
    widget = _add(client).json()["widget"]
    response = client.put(
        f"/api/widgets/{widget['id']}",
        json={"title": " Forecast ", "config": {"location": "Paris"}, "position_y": 2},
    )
    assert response.status_code == 200
    updated = response.json()["widget"]
    assert updated["title"] == "Forecast"
    assert updated["config"] == {"location": "Paris"}
    assert updated["position_y"] == 2
    assert client.put(f"/api/widgets/{widget['id']}", json={"height": 0}).status_code == 400

    current_user.become("user-2")
    response = client.put(f"/api/widgets/{widget['id']}", json={"title": "Stolen"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Widget not found or access denied"


def test_hidden_widget_still_holds_its_type(client):
    widget = _add(client).json()["widget"]
    client.put(f"/api/widgets/{widget['id']}", json={"is_visible": False})
    assert client.get("/api/widgets").json()["widgets"] == []
    response = _add(client, title="Again")
    assert response.status_code == 409
    assert response.json()["detail"] == "You already have a Weather widget"
    assert response.json()["existingWidget"]["id"] == widget["id"]


def test_delete_widget(client, current_user):
    widget = _add(client).json()["widget"]
    current_user.become("user-2")
    assert client.delete(f"/api/widgets/{widget['id']}").status_code == 404
    current_user.become("user-1")

    response = client.delete(f"/api/widgets/{widget['id']}")
    assert response.status_code == 200
    assert response.json() == {
        "message": "Weather widget removed successfully",
        "deletedWidget": {"id": widget["id"], "widgetTypeId": "weather", "displayName": "Weather"},
    }
    assert client.get("/api/widgets").json()["widgets"] == []


def test_null_layout_fields_are_rejected(client):
    widget = _add(client).json()["widget"]
    response = client.put(f"/api/widgets/{widget['id']}", json={"width": None, "position_x": None})
    assert response.status_code == 400
    assert response.json()["detail"] == "Widget width must be between 1 and 4"
    response = client.put(f"/api/widgets/{widget['id']}", json={"position_y": None})
    assert response.json()["detail"] == "Widget position Y must be non-negative"
    response = client.put(f"/api/widgets/{widget['id']}", json={"is_visible": None})
    assert response.status_code == 400
    assert response.json()["detail"] == "Widget visibility must be true or false"

    stored = client.get("/api/widgets").json()["widgets"][0]
    assert (stored["width"], stored["height"], stored["position_x"], stored["position_y"]) == (1, 1, 0, 0)
    assert stored["is_visible"] is True

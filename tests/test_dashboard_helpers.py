from datetime import date, timedelta

import pytest

from dashboard import metrics, widgets
from dashboard.auth import AuthError, session_from_token_response
from dashboard.data import api_client
from dashboard.tabs.weather_tab import refresh_interval, weather_settings
from dashboard.timezone_sync import resolve_profile_timezone


def test_optimal_position_fills_rows_left_to_right():
    assert widgets.calculate_optimal_position([]) == (0, 0)
    placed = [{"position_x": 0, "position_y": 0}, {"position_x": 1, "position_y": 0}]
    assert widgets.calculate_optimal_position(placed) == (2, 0)
    placed.append({"position_x": 3, "position_y": 0})
    assert widgets.calculate_optimal_position(placed) == (0, 1)


def test_unique_titles_and_rows():
    assert widgets.generate_unique_title("Weather", ["Tasks"]) == "Weather"
    assert widgets.generate_unique_title("Weather", ["Weather", "Weather 1"]) == "Weather 2"
    rows = widgets.grid_rows(
        [
            {"id": "c", "position_x": 0, "position_y": 1},
            {"id": "b", "position_x": 2, "position_y": 0},
            {"id": "a", "position_x": 0, "position_y": 0},
        ]
    )
    assert [[item["id"] for item in row] for row in rows] == [["a", "b"], ["c"]]
    assert widgets.widget_icon("Cloud") == "🌤️"
    assert widgets.widget_icon("Unknown") == "📦"
    assert widgets.is_widget_type_added([{"widget_type_id": "notes"}], "notes")


def test_widget_validation_messages():
    assert widgets.validate_widget_data({"widget_type_id": "notes", "title": "Notes"}) == []
    errors = widgets.validate_widget_data({"widget_type_id": "", "title": "x" * 101, "width": 5, "config": []})
    assert errors == [
        "Widget type ID is required",
        "Widget title must be 100 characters or less",
        "Widget width must be between 1 and 4",
        "Widget config must be an object or null",
    ]


def test_task_and_mood_stats():
    tasks = [{"status": "completed"}, {"status": "pending"}, {"status": "completed"}]
    assert metrics.task_stats(tasks) == {"total": 3, "completed": 2, "percent": 66.7}
    assert metrics.task_stats([]) == {"total": 0, "completed": 0, "percent": 0}

    today = date(2024, 5, 10)
    entries = [
        {"date": "2024-05-10", "mood_score": 8},
        {"date": "2024-05-09", "mood_score": 5},
        {"date": "2024-05-07", "mood_score": 6},
    ]
    assert metrics.mood_stats(entries) == {"count": 3, "average": 6.3}
    assert metrics.mood_streak(entries, today) == 2
    assert metrics.mood_streak(entries, today + timedelta(days=1)) == 0
    frame = metrics.mood_frame(entries)
    assert list(frame["date"]) == [date(2024, 5, 7), date(2024, 5, 9), date(2024, 5, 10)]


def test_finance_summaries():
    entries = [
        {"type": "income", "amount": 1000, "category": "Salary"},
        {"type": "expense", "amount": 12.5, "category": "Food"},
        {"type": "expense", "amount": 40, "category": "Transport"},
        {"type": "expense", "amount": 7.5, "category": None},
        {"type": "transfer", "amount": 200, "category": "Savings"},
    ]
    totals = metrics.finance_totals(entries)
    assert totals == {"income": 1000.0, "expense": 60.0, "balance": 940.0, "transfers": 1, "count": 5}

    breakdown = metrics.expense_by_category(entries)
    assert list(breakdown["category"]) == ["Transport", "Food", "Uncategorized"]
    assert list(breakdown["amount"]) == [40.0, 12.5, 7.5]
    assert metrics.expense_by_category([]).empty


def test_profile_timezone_resolution():
    assert resolve_profile_timezone({"timezone": "Asia/Tokyo"}, "UTC") == ("Asia/Tokyo", False)
    assert resolve_profile_timezone({"timezone": None}, "Europe/Paris") == ("Europe/Paris", True)
    assert resolve_profile_timezone(None, "UTC") == ("UTC", True)


def test_weather_settings_and_refresh():
    settings = weather_settings({"location": "Paris", "unknown": 1})
    assert settings["location"] == "Paris"
    assert settings["unit"] == "celsius"
    assert "unknown" not in settings
    assert refresh_interval(settings) == timedelta(minutes=30)
    assert refresh_interval({"autoRefresh": True, "refreshInterval": 0}) == timedelta(minutes=1)
    assert refresh_interval({"autoRefresh": False, "refreshInterval": 5}) is None


def test_session_from_token_response():
    session = session_from_token_response(
        {
            "access_token": "abc",
            "refresh_token": "def",
            "expires_in": 600,
            "user": {"id": "user-1", "email": "a@example.com", "user_metadata": {"full_name": "Ada"}},
        },
        now=1000,
    )
    assert session == {
        "access_token": "abc",
        "refresh_token": "def",
        "expires_at": 1600,
        "user_id": "user-1",
        "email": "a@example.com",
        "metadata": {"full_name": "Ada"},
    }
    with pytest.raises(AuthError):
        session_from_token_response({"error": "invalid_grant"})


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.ok = status_code < 400
        self.text = str(body)

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.response


@pytest.fixture
def configured_api(monkeypatch):
    secrets = {("app", "API_BASE_URL"): "http://api.test/"}
    api_client.configure(lambda path, default=None: secrets.get(path, default), lambda: "token-1")
    yield monkeypatch
    api_client.configure(None, None)


def test_api_request_sends_bearer_token(configured_api):
    fake = FakeSession(FakeResponse(200, {"tasks": []}))
    configured_api.setattr(api_client, "_SESSION", fake)
    assert api_client.request("GET", "/api/tasks", params={"status": "pending"}) == {"tasks": []}
    method, url, kwargs = fake.calls[0]
    assert (method, url) == ("GET", "http://api.test/api/tasks")
    assert kwargs["headers"] == {"Authorization": "Bearer token-1"}
    assert kwargs["params"] == {"status": "pending"}


def test_api_request_raises_api_error(configured_api):
    configured_api.setattr(api_client, "_SESSION", FakeSession(FakeResponse(409, {"detail": "Duplicate"})))
    with pytest.raises(api_client.ApiError) as info:
        api_client.request("POST", "/api/widgets", json={})
    assert info.value.status_code == 409
    assert info.value.message == "Duplicate"


def test_api_request_needs_token(monkeypatch):
    api_client.configure(lambda path, default=None: "http://api.test", lambda: None)
    try:
        with pytest.raises(api_client.ApiError) as info:
            api_client.request("GET", "/api/tasks")
        assert info.value.status_code == 401
    finally:
        api_client.configure(None, None)

from datetime import date

from backend.routes.profile import validate_profile_patch


def test_valid_patch_has_no_errors():
    patch = {
        "full_name": "Ada Lovelace",
        "website": "https://example.com/ada",
        "phone": "+14155550100",
        "date_of_birth": "1990-12-10",
        "timezone": "Europe/London",
    }
    assert validate_profile_patch(patch, today=date(2024, 5, 1)) == []


def test_field_errors_are_collected():
    errors = validate_profile_patch(
        {
            "full_name": "x" * 101,
            "bio": "y" * 501,
            "website": "ftp://files.example.com",
            "phone": "call me",
            "date_of_birth": "1990-13-45",
            "timezone": "Mars/Olympus_Mons",
        },
        today=date(2024, 5, 1),
    )
    assert errors == [
        "Full name must be a string and less than 100 characters",
        "Bio must be a string and less than 500 characters",
        "Website must be a valid URL",
        "Phone must be a valid phone number",
        "Date of birth must be a valid date",
        "Timezone must be a valid IANA timezone",
    ]


def test_minimum_age_on_leap_day():
    today = date(2024, 2, 29)
    assert validate_profile_patch({"date_of_birth": "2011-02-28"}, today=today) == []
    assert validate_profile_patch({"date_of_birth": "2011-03-01"}, today=today) == [
        "You must be at least 13 years old"
    ]


def test_empty_values_are_not_validated():
    assert validate_profile_patch({"website": "", "phone": None, "date_of_birth": ""}) == []


def test_profile_is_created_on_first_read(client):
    response = client.get("/api/profile")
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["id"] == "user-1"
    assert profile["email"] == "one@example.com"
    assert profile["preferences"] == {}
    assert client.get("/api/profile").json()["profile"]["created_at"] == profile["created_at"]


def test_update_profile(client):
    response = client.put(
        "/api/profile",
        json={
            "full_name": "  Ada  ",
            "bio": "",
            "timezone": "Asia/Tokyo",
            "preferences": {"theme": "light"},
            "date_of_birth": "1990-12-10",
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Profile updated successfully"
    profile = payload["profile"]
    assert profile["full_name"] == "Ada"
    assert profile["bio"] is None
    assert profile["timezone"] == "Asia/Tokyo"
    assert profile["preferences"] == {"theme": "light"}
    assert profile["date_of_birth"] == "1990-12-10"


def test_update_profile_rejects_invalid_fields(client):
    response = client.put("/api/profile", json={"phone": "nope", "timezone": "Nowhere/Land"})
    assert response.status_code == 400
    assert response.json() == {
        "detail": "Validation failed",
        "details": ["Phone must be a valid phone number", "Timezone must be a valid IANA timezone"],
    }


def test_delete_account_removes_user_data(client, current_user):
    client.get("/api/profile")
    client.post("/api/tasks", json={"title": "Mine"})
    client.post("/api/mood", json={"date": "2024-05-01", "mood_score": 5})
    current_user.become("user-2")
    client.post("/api/tasks", json={"title": "Theirs"})
    current_user.become("user-1")

    response = client.delete("/api/profile")
    assert response.json() == {"message": "Account deleted successfully"}
    assert client.get("/api/tasks").json()["tasks"] == []
    assert client.get("/api/mood", params={"start_date": "2024-01-01", "end_date": "2024-12-31"}).json()["entries"] == []

    current_user.become("user-2")
    assert len(client.get("/api/tasks").json()["tasks"]) == 1

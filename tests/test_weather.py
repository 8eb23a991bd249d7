import asyncio

import httpx
import pytest

from backend import settings
from backend.services import weather_service
from backend.services.weather_service import WeatherServiceError, normalize_weather

RAW = {
    "location": {"name": "London", "region": "City of London", "country": "UK", "localtime": "2024-05-01 12:00"},
    "current": {
        "temp_c": 15.0,
        "temp_f": 59.0,
        "feelslike_c": 14.0,
        "feelslike_f": 57.2,
        "condition": {"text": "Partly cloudy"},
        "humidity": 70,
        "last_updated": "2024-05-01 11:45",
    },
    "forecast": {
        "forecastday": [
            {
                "date": "2024-05-01",
                "day": {"maxtemp_c": 17.0, "maxtemp_f": 62.6, "mintemp_c": 9.0, "mintemp_f": 48.2},
                "hour": [{"time": "2024-05-01 00:00", "temp_c": 10.0, "temp_f": 50.0}],
            },
            {
                "date": "2024-05-02",
                "day": {"maxtemp_c": 18.0, "maxtemp_f": 64.4, "mintemp_c": 10.0, "mintemp_f": 50.0},
                "hour": [],
            },
        ]
    },
}


def test_normalize_picks_requested_unit():
    data = normalize_weather(RAW, unit="fahrenheit", show_forecast=True, show_hourly=False)
    assert data["current"]["temperature"] == 59.0
    assert data["current"]["feels_like"] == 57.2
    assert data["unit"] == "fahrenheit"
    assert data["lastUpdated"] == "2024-05-01 11:45"
    assert len(data["forecast"]) == 2
    assert data["forecast"][0]["day"]["max_temperature"] == 62.6
    assert data["forecast"][0]["hour"] == []


def test_normalize_hourly_and_single_day():
    data = normalize_weather(RAW, unit="celsius", show_forecast=False, show_hourly=True)
    assert [day["date"] for day in data["forecast"]] == ["2024-05-01"]
    assert data["forecast"][0]["hour"][0]["temperature"] == 10.0


def test_service_requires_api_key():
    with pytest.raises(WeatherServiceError):
        asyncio.run(weather_service.get_weather("London"))


def test_service_calls_forecast_endpoint(monkeypatch):
    monkeypatch.setenv("WEATHER_API_KEY", "weather-key")
    settings._settings = None
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=RAW)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await weather_service.get_weather("Paris", unit="kelvin", show_forecast=False, client=client)

    data = asyncio.run(run())
    assert seen["path"].endswith("/forecast.json")
    assert seen["params"]["q"] == "Paris"
    assert seen["params"]["key"] == "weather-key"
    assert seen["params"]["days"] == "1"
    assert data["unit"] == "celsius"


def test_service_surfaces_provider_errors(monkeypatch):
    monkeypatch.setenv("WEATHER_API_KEY", "weather-key")
    settings._settings = None

    async def run():
        transport = httpx.MockTransport(
            lambda request: httpx.Response(400, json={"error": {"message": "No matching location found."}})
        )
        async with httpx.AsyncClient(transport=transport) as client:
            return await weather_service.get_weather("Atlantis", client=client)

    with pytest.raises(WeatherServiceError, match="No matching location found"):
        asyncio.run(run())


def test_route_requires_location(client):
    response = client.get("/api/weather")
    assert response.status_code == 400
    assert response.json()["detail"] == "Location parameter is required"


def test_route_returns_weather_with_settings(client, monkeypatch):
    calls = []

    async def fake_get_weather(location, unit="celsius", show_forecast=True, show_hourly=False):
        calls.append((location, unit, show_forecast, show_hourly))
        return normalize_weather(RAW, unit=unit, show_forecast=show_forecast, show_hourly=show_hourly)

    monkeypatch.setattr(weather_service, "get_weather", fake_get_weather)
    response = client.get(
        "/api/weather",
        params={"location": " London ", "unit": "fahrenheit", "showForecast": "true", "refreshInterval": 15},
    )
    assert response.status_code == 200
    payload = response.json()
    assert calls == [("London", "fahrenheit", True, False)]
    assert payload["location"]["name"] == "London"
    assert payload["settings"] == {"autoRefresh": False, "refreshInterval": 15}


def test_route_reports_provider_failure(client):
    response = client.get("/api/weather", params={"location": "London"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch weather data"

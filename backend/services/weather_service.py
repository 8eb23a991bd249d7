from __future__ import annotations

import logging
from datetime import datetime

import httpx

from backend.settings import get_settings

logger = logging.getLogger(__name__)

VALID_UNITS = {"celsius", "fahrenheit"}
FORECAST_DAYS = 3


class WeatherServiceError(RuntimeError):
    pass


def _temp(block: dict, prefix: str, unit: str):
    suffix = "f" if unit == "fahrenheit" else "c"
    return block.get(f"{prefix}_{suffix}")


def _normalize_hour(hour: dict, unit: str) -> dict:
    return {
        "time": hour.get("time"),
        "temp_c": hour.get("temp_c"),
        "temp_f": hour.get("temp_f"),
        "temperature": _temp(hour, "temp", unit),
        "is_day": hour.get("is_day"),
        "condition": hour.get("condition") or {},
        "chance_of_rain": hour.get("chance_of_rain"),
    }


def _normalize_forecast_day(day: dict, unit: str, show_hourly: bool) -> dict:
    summary = day.get("day") or {}
    payload = {
        "date": day.get("date"),
        "day": {
            "maxtemp_c": summary.get("maxtemp_c"),
            "maxtemp_f": summary.get("maxtemp_f"),
            "mintemp_c": summary.get("mintemp_c"),
            "mintemp_f": summary.get("mintemp_f"),
            "max_temperature": _temp(summary, "maxtemp", unit),
            "min_temperature": _temp(summary, "mintemp", unit),
            "condition": summary.get("condition") or {},
            "daily_chance_of_rain": summary.get("daily_chance_of_rain"),
        },
        "astro": day.get("astro") or {},
        "hour": [],
    }
    if show_hourly:
        payload["hour"] = [_normalize_hour(hour, unit) for hour in day.get("hour") or []]
    return payload


def normalize_weather(raw: dict, unit: str = "celsius", show_forecast: bool = True, show_hourly: bool = False) -> dict:
    location = raw.get("location") or {}
    current = raw.get("current") or {}
    forecast_days = (raw.get("forecast") or {}).get("forecastday") or []
    if not show_forecast:
        forecast_days = forecast_days[:1]
    return {
        "location": {
            "name": location.get("name"),
            "region": location.get("region"),
            "country": location.get("country"),
            "localtime": location.get("localtime"),
        },
        "current": {
            "temp_c": current.get("temp_c"),
            "temp_f": current.get("temp_f"),
            "temperature": _temp(current, "temp", unit),
            "feels_like": _temp(current, "feelslike", unit),
            "condition": current.get("condition") or {},
            "is_day": current.get("is_day"),
            "humidity": current.get("humidity"),
            "wind_kph": current.get("wind_kph"),
            "wind_mph": current.get("wind_mph"),
            "uv": current.get("uv"),
        },
        "forecast": [_normalize_forecast_day(day, unit, show_hourly) for day in forecast_days],
        "unit": unit,
        "lastUpdated": current.get("last_updated") or datetime.utcnow().isoformat(),
    }


async def get_weather(
    location: str,
    unit: str = "celsius",
    show_forecast: bool = True,
    show_hourly: bool = False,
    client: httpx.AsyncClient | None = None,
) -> dict:
    settings = get_settings()
    if not settings.weather_api_key:
        raise WeatherServiceError("WEATHER_API_KEY is not configured")
    if unit not in VALID_UNITS:
        unit = "celsius"
    endpoint = settings.weather_api_url.rstrip("/") + "/forecast.json"
    params = {
        "key": settings.weather_api_key,
        "q": location,
        "days": FORECAST_DAYS if show_forecast else 1,
        "aqi": "no",
        "alerts": "no",
    }
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.weather_timeout_seconds) as own_client:
                response = await own_client.get(endpoint, params=params)
        else:
            response = await client.get(endpoint, params=params)
    except httpx.HTTPError as exc:
        raise WeatherServiceError(f"Weather API unreachable: {exc}") from exc
    if response.status_code >= 400:
        try:
            message = response.json().get("error", {}).get("message") or response.text
        except ValueError:
            message = response.text
        raise WeatherServiceError(f"Weather API error ({response.status_code}): {message}")
    return normalize_weather(response.json(), unit=unit, show_forecast=show_forecast, show_hourly=show_hourly)

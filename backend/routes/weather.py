from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from backend.services import weather_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/weather")
async def get_weather(
    location: str | None = Query(None),
    unit: str = Query("celsius"),
    showForecast: bool = Query(False),
    showHourly: bool = Query(False),
    autoRefresh: bool = Query(False),
    refreshInterval: int = Query(10),
):
    if not str(location or "").strip():
        raise HTTPException(status_code=400, detail="Location parameter is required")
    try:
        data = await weather_service.get_weather(
            location.strip(),
            unit=unit if unit in weather_service.VALID_UNITS else "celsius",
            show_forecast=showForecast,
            show_hourly=showHourly,
        )
    except weather_service.WeatherServiceError as exc:
        logger.warning("Weather lookup failed for %r: %s", location, exc)
        raise HTTPException(status_code=500, detail="Failed to fetch weather data")
    data["settings"] = {"autoRefresh": autoRefresh, "refreshInterval": refreshInterval}
    return data

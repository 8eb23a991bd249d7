from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")

    # Hosted auth provider; bearer tokens are checked against its user endpoint.
    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_anon_key: str = Field(..., alias="SUPABASE_ANON_KEY")
    auth_timeout_seconds: float = Field(5.0, alias="AUTH_TIMEOUT_SECONDS")

    weather_api_key: str | None = Field(None, alias="WEATHER_API_KEY")
    weather_api_url: str = Field("https://api.weatherapi.com/v1", alias="WEATHER_API_URL")
    weather_timeout_seconds: float = Field(10.0, alias="WEATHER_TIMEOUT_SECONDS")

    default_timezone: str = Field("UTC", alias="DEFAULT_TIMEZONE")
    max_widgets_per_user: int = Field(20, alias="MAX_WIDGETS_PER_USER")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def auth_user_endpoint(self) -> str:
        return self.supabase_url.rstrip("/") + "/auth/v1/user"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

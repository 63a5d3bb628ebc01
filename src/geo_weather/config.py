"""Typed settings loader for the geo-weather viewer."""

from __future__ import annotations

from datetime import UTC, tzinfo
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


def _resolve_zone(name: str) -> tzinfo:
    if name.strip().upper() == "UTC":
        return UTC
    return ZoneInfo(name.strip())


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    openweather_api_key: str = Field(alias="OPENWEATHER_API_KEY", repr=False)
    openweather_base_url: AnyUrl = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
    )
    openweather_current_endpoint: str = Field(
        default="/weather",
        alias="OPENWEATHER_CURRENT_ENDPOINT",
    )
    openweather_forecast_endpoint: str = Field(
        default="/forecast",
        alias="OPENWEATHER_FORECAST_ENDPOINT",
    )
    openweather_historical_endpoint: str = Field(
        default="/timemachine",
        alias="OPENWEATHER_HISTORICAL_ENDPOINT",
    )
    weather_timeout_seconds: float = Field(default=15.0, alias="WEATHER_TIMEOUT_SECONDS")
    weather_units: Literal["metric"] = Field(default="metric", alias="WEATHER_UNITS")
    weather_user_agent: str = Field(
        default="geo-weather/0.1",
        alias="WEATHER_USER_AGENT",
    )

    forecast_max_days: int = Field(default=5, alias="FORECAST_MAX_DAYS")
    forecast_timezone: str = Field(default="UTC", alias="FORECAST_TIMEZONE")

    location_source: Literal["ip", "static", "none"] = Field(
        default="ip",
        alias="LOCATION_SOURCE",
    )
    location_default_lat: float | None = Field(default=None, alias="LOCATION_DEFAULT_LAT")
    location_default_lon: float | None = Field(default=None, alias="LOCATION_DEFAULT_LON")
    ip_geolocation_url: AnyUrl = Field(
        default="https://ipapi.co/json/",
        alias="IP_GEOLOCATION_URL",
    )
    location_timeout_seconds: float = Field(default=10.0, alias="LOCATION_TIMEOUT_SECONDS")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
    )

    @field_validator("location_default_lat", "location_default_lon", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset optional coordinates."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_settings(self) -> Settings:
        """Validate cross-field invariants."""
        if not self.openweather_api_key.strip():
            raise ValueError("OPENWEATHER_API_KEY must not be empty.")
        for alias, endpoint in (
            ("OPENWEATHER_CURRENT_ENDPOINT", self.openweather_current_endpoint),
            ("OPENWEATHER_FORECAST_ENDPOINT", self.openweather_forecast_endpoint),
            ("OPENWEATHER_HISTORICAL_ENDPOINT", self.openweather_historical_endpoint),
        ):
            if not endpoint.startswith("/"):
                raise ValueError(f"{alias} must start with '/'.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.location_timeout_seconds <= 0:
            raise ValueError("LOCATION_TIMEOUT_SECONDS must be > 0.")
        if not (1 <= self.forecast_max_days <= 5):
            raise ValueError("FORECAST_MAX_DAYS must be between 1 and 5.")
        try:
            _resolve_zone(self.forecast_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(
                f"FORECAST_TIMEZONE is not a known time zone: {self.forecast_timezone!r}"
            ) from exc

        has_default_lat = self.location_default_lat is not None
        has_default_lon = self.location_default_lon is not None
        if has_default_lat != has_default_lon:
            raise ValueError("LOCATION_DEFAULT_LAT and LOCATION_DEFAULT_LON must be set together.")
        if has_default_lat and not (-90 <= self.location_default_lat <= 90):
            raise ValueError("LOCATION_DEFAULT_LAT must be between -90 and 90.")
        if has_default_lon and not (-180 <= self.location_default_lon <= 180):
            raise ValueError("LOCATION_DEFAULT_LON must be between -180 and 180.")
        if self.location_source == "static" and not has_default_lat:
            raise ValueError(
                "LOCATION_DEFAULT_LAT/LON are required when LOCATION_SOURCE='static'."
            )
        return self

    @property
    def forecast_zone(self) -> tzinfo:
        return _resolve_zone(self.forecast_timezone)

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "base_url": str(self.openweather_base_url),
            "current_endpoint": self.openweather_current_endpoint,
            "forecast_endpoint": self.openweather_forecast_endpoint,
            "historical_endpoint": self.openweather_historical_endpoint,
            "units": self.weather_units,
            "timeout_seconds": self.weather_timeout_seconds,
            "forecast_max_days": self.forecast_max_days,
            "forecast_timezone": self.forecast_timezone,
            "location_source": self.location_source,
            "has_default_location": self.location_default_lat is not None,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

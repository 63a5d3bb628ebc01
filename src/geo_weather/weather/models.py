"""Typed models for normalized weather data."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """A resolved (latitude, longitude) pair for one fetch cycle."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class CurrentWeatherSnapshot(BaseModel):
    """Current (or historical) conditions at one point, in metric units."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(description="Air temperature in °C")
    feels_like: float | None = Field(default=None, description="Apparent temperature in °C")
    humidity: float | None = Field(default=None, description="Relative humidity in %")
    condition_description: str = ""
    condition_main: str = ""
    icon: str = ""
    location_name: str | None = None
    observed_at: datetime | None = None


class ForecastEntry(BaseModel):
    """One three-hour forecast step."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    temperature: float
    temperature_min: float
    temperature_max: float
    condition_description: str = ""
    icon: str = ""

"""Weather provider integrations."""

from .base import WeatherProvider
from .models import Coordinates, CurrentWeatherSnapshot, ForecastEntry
from .openweather import OpenWeatherProvider, parse_current_weather, parse_forecast_entries

__all__ = [
    "Coordinates",
    "CurrentWeatherSnapshot",
    "ForecastEntry",
    "OpenWeatherProvider",
    "WeatherProvider",
    "parse_current_weather",
    "parse_forecast_entries",
]

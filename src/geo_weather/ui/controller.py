"""Sequences location lookup, weather fetches and forecast selection into view state."""

from __future__ import annotations

import logging
from datetime import UTC, tzinfo

from ..exceptions import InvalidDateError, LocationError, WeatherProviderError
from ..forecast import FORECAST_DAYS, date_to_unix_seconds, normalize_forecast
from ..location.resolver import LocationResolver
from ..weather.base import WeatherProvider
from ..weather.openweather import parse_current_weather, parse_forecast_entries
from . import state as transitions
from .state import UIState

WEATHER_FALLBACK_MESSAGE = "Failed to fetch weather data"
HISTORICAL_FALLBACK_MESSAGE = "Failed to fetch historical weather"

_EXPECTED_ERRORS = (LocationError, WeatherProviderError, InvalidDateError)


def _derive_message(exc: BaseException, fallback: str) -> str:
    message = str(exc).strip()
    return message or fallback


class WeatherViewController:
    """Owns the current ``UIState`` and runs fetch cycles against it.

    Each awaited call (location lookup and each HTTP fetch) is a suspension
    point. A failure at any of them ends the cycle in the ``failed`` status with
    a user-facing message; nothing propagates past this class. Overlapping
    calls are not prevented or cancelled; the disabled-trigger policy in
    ``can_fetch_historical`` is the only guard.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        resolver: LocationResolver,
        logger: logging.Logger,
        *,
        forecast_days: int = FORECAST_DAYS,
        forecast_tz: tzinfo = UTC,
    ) -> None:
        self.provider = provider
        self.resolver = resolver
        self.logger = logger
        self.forecast_days = forecast_days
        self.forecast_tz = forecast_tz
        self.state = UIState()

    @property
    def can_fetch_historical(self) -> bool:
        return transitions.can_fetch_historical(self.state)

    async def mount(self) -> UIState:
        """Enter the loading state and run the first fetch cycle."""
        self.state = transitions.initial_state()
        return await self.fetch_weather_data()

    async def fetch_weather_data(self) -> UIState:
        self.state = transitions.begin_loading(self.state)
        try:
            coords = await self.resolver.resolve_location()
            self.logger.debug(
                "Fetching weather for lat=%.4f lon=%.4f", coords.latitude, coords.longitude
            )
            current_payload = await self.provider.fetch_current(coords.latitude, coords.longitude)
            forecast_payload = await self.provider.fetch_forecast(
                coords.latitude, coords.longitude
            )

            current = parse_current_weather(current_payload)
            entries = parse_forecast_entries(forecast_payload, self.logger)
            if entries is None:
                self.logger.warning("Forecast payload has no 'list'; showing no forecast")
                forecast = []
            else:
                forecast = normalize_forecast(
                    entries, max_days=self.forecast_days, tz=self.forecast_tz
                )

            self.state = transitions.weather_loaded(self.state, current, forecast)
            self.logger.info(
                "Weather loaded: location=%s forecast_days=%d",
                current.location_name or "unknown",
                len(forecast),
            )
        except _EXPECTED_ERRORS as exc:
            self.logger.error("Weather fetch failed: %s", exc)
            self.state = transitions.fetch_failed(
                self.state, _derive_message(exc, WEATHER_FALLBACK_MESSAGE)
            )
        except Exception as exc:
            self.logger.exception("Unexpected weather fetch failure: %s", exc)
            self.state = transitions.fetch_failed(
                self.state, _derive_message(exc, WEATHER_FALLBACK_MESSAGE)
            )
        finally:
            self.state = transitions.loading_released(self.state)
        return self.state

    def select_date(self, value: str) -> UIState:
        self.state = transitions.select_date(self.state, value)
        return self.state

    async def fetch_historical_weather(self) -> UIState:
        """Replace the current reading with weather for ``selected_date``."""
        selected_date = self.state.selected_date
        if not selected_date:
            self.state = transitions.date_missing(self.state)
            return self.state

        self.state = transitions.begin_loading(self.state)
        try:
            coords = await self.resolver.resolve_location()
            timestamp = date_to_unix_seconds(selected_date)
            payload = await self.provider.fetch_historical(
                coords.latitude, coords.longitude, timestamp
            )
            historical = parse_current_weather(payload)
            self.state = transitions.historical_loaded(self.state, historical)
            self.logger.info(
                "Historical weather loaded for %s (dt=%d)", selected_date, timestamp
            )
        except _EXPECTED_ERRORS as exc:
            self.logger.error("Historical weather fetch failed: %s", exc)
            self.state = transitions.fetch_failed(
                self.state, _derive_message(exc, HISTORICAL_FALLBACK_MESSAGE)
            )
        except Exception as exc:
            self.logger.exception("Unexpected historical weather failure: %s", exc)
            self.state = transitions.fetch_failed(
                self.state, _derive_message(exc, HISTORICAL_FALLBACK_MESSAGE)
            )
        finally:
            self.state = transitions.loading_released(self.state)
        return self.state

"""Tests for fetch-cycle orchestration and view state transitions."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from geo_weather.exceptions import PositionUnavailableError, WeatherProviderError
from geo_weather.location import GeolocationBackend, LocationResolver, Position
from geo_weather.ui.controller import WeatherViewController
from geo_weather.ui.state import UIState
from geo_weather.weather.base import WeatherProvider


def _forecast_payload(days: int, start: datetime | None = None) -> dict[str, Any]:
    start = start or datetime(2024, 1, 1, 3, tzinfo=UTC)
    items = []
    for i in range(days * 8):
        ts = start + timedelta(hours=3 * i)
        items.append(
            {
                "dt": int(ts.timestamp()),
                "dt_txt": ts.strftime("%Y-%m-%d %H:%M:%S"),
                "main": {"temp": float(i), "temp_min": i - 1.0, "temp_max": i + 1.0},
                "weather": [{"description": f"step {i}", "icon": "01d"}],
            }
        )
    return {"cod": "200", "cnt": len(items), "list": items}


def _current_payload(temp: float = 11.5, name: str = "London") -> dict[str, Any]:
    return {
        "main": {"temp": temp, "feels_like": temp - 1, "humidity": 80},
        "weather": [{"main": "Clouds", "description": "broken clouds", "icon": "04d"}],
        "name": name,
    }


class FakeProvider(WeatherProvider):
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.current: dict[str, Any] | Exception = _current_payload()
        self.forecast: dict[str, Any] | Exception = _forecast_payload(days=6)
        self.historical: dict[str, Any] | Exception = _current_payload(temp=2.0, name="")

    @staticmethod
    def _answer(value: dict[str, Any] | Exception) -> dict[str, Any]:
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_current(self, lat: float, lon: float) -> dict[str, Any]:
        self.calls.append(("current", lat, lon))
        return self._answer(self.current)

    async def fetch_forecast(self, lat: float, lon: float) -> dict[str, Any]:
        self.calls.append(("forecast", lat, lon))
        return self._answer(self.forecast)

    async def fetch_historical(
        self, lat: float, lon: float, unix_timestamp: int
    ) -> dict[str, Any]:
        self.calls.append(("historical", lat, lon, unix_timestamp))
        return self._answer(self.historical)

    async def aclose(self) -> None:
        return None


class SwitchableBackend(GeolocationBackend):
    def __init__(self) -> None:
        self.position = Position(51.5, -0.12)
        self.error: Exception | None = None
        self.calls = 0

    async def get_current_position(self) -> Position:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.position


def _make_controller() -> tuple[WeatherViewController, FakeProvider, SwitchableBackend]:
    provider = FakeProvider()
    backend = SwitchableBackend()
    controller = WeatherViewController(
        provider,
        LocationResolver(backend),
        logging.getLogger("test_view_controller"),
    )
    return controller, provider, backend


def test_mount_success_populates_state() -> None:
    controller, provider, _ = _make_controller()

    state = asyncio.run(controller.mount())

    assert state is controller.state
    assert state.status == "ready"
    assert state.loading is False
    assert state.error is None
    assert state.current_weather is not None
    assert state.current_weather.location_name == "London"
    assert len(state.forecast) == 5
    assert [e.timestamp.day for e in state.forecast] == [1, 2, 3, 4, 5]
    assert [c[0] for c in provider.calls] == ["current", "forecast"]
    assert provider.calls[0][1:] == (51.5, -0.12)


def test_forecast_without_list_stores_empty_forecast() -> None:
    controller, provider, _ = _make_controller()
    provider.forecast = {"cod": "200", "message": "no list today"}

    state = asyncio.run(controller.mount())

    assert state.status == "ready"
    assert state.forecast == ()
    assert state.current_weather is not None


def test_location_denied_keeps_previous_weather() -> None:
    controller, provider, backend = _make_controller()
    previous = asyncio.run(controller.mount()).current_weather
    provider.calls.clear()
    backend.error = PositionUnavailableError("denied")

    state = asyncio.run(controller.fetch_weather_data())

    assert state.error == "Location access denied"
    assert state.loading is False
    assert state.status == "failed"
    assert state.current_weather == previous
    assert provider.calls == []


def test_provider_failure_sets_error_and_releases_loading() -> None:
    controller, provider, _ = _make_controller()
    provider.forecast = WeatherProviderError("OpenWeather forecast failed with status 500: boom")

    state = asyncio.run(controller.mount())

    assert state.status == "failed"
    assert state.loading is False
    assert state.error == "OpenWeather forecast failed with status 500: boom"
    assert state.current_weather is None
    assert state.forecast == ()


def test_failure_without_message_uses_fallback() -> None:
    controller, provider, _ = _make_controller()
    provider.current = WeatherProviderError("")

    state = asyncio.run(controller.mount())

    assert state.error == "Failed to fetch weather data"


def test_unexpected_exception_is_contained() -> None:
    controller, provider, _ = _make_controller()
    provider.current = RuntimeError("kaboom")

    state = asyncio.run(controller.mount())

    assert state.error == "kaboom"
    assert state.loading is False


def test_historical_without_date_never_calls_provider() -> None:
    controller, provider, backend = _make_controller()
    controller.state = UIState(loading=True, status="loading")

    state = asyncio.run(controller.fetch_historical_weather())

    assert state.error == "Please select a date"
    assert state.loading is True
    assert provider.calls == []
    assert backend.calls == 0


def test_historical_success_replaces_current_and_keeps_forecast() -> None:
    controller, provider, backend = _make_controller()
    asyncio.run(controller.mount())
    forecast_before = controller.state.forecast
    controller.select_date("2024-03-15")
    provider.calls.clear()

    state = asyncio.run(controller.fetch_historical_weather())

    assert provider.calls == [("historical", 51.5, -0.12, 1710460800)]
    assert backend.calls == 2
    assert state.status == "ready"
    assert state.error is None
    assert state.loading is False
    assert state.current_weather is not None
    assert state.current_weather.temperature == 2.0
    assert state.forecast == forecast_before
    assert state.selected_date == "2024-03-15"


def test_historical_invalid_date_fails_without_provider_call() -> None:
    controller, provider, _ = _make_controller()
    controller.select_date("15/03/2024")

    state = asyncio.run(controller.fetch_historical_weather())

    assert state.error == "Invalid date: 15/03/2024"
    assert state.loading is False
    assert provider.calls == []


def test_historical_failure_without_message_uses_fallback() -> None:
    controller, provider, _ = _make_controller()
    provider.historical = WeatherProviderError("")
    controller.select_date("2024-03-15")

    state = asyncio.run(controller.fetch_historical_weather())

    assert state.error == "Failed to fetch historical weather"
    assert state.status == "failed"
    assert state.loading is False


def test_historical_location_failure() -> None:
    controller, provider, backend = _make_controller()
    backend.position = Position(0.0, 0.0)
    controller.select_date("2024-03-15")

    state = asyncio.run(controller.fetch_historical_weather())

    assert state.error == "Unable to retrieve precise location"
    assert provider.calls == []


def test_successful_fetch_clears_earlier_error() -> None:
    controller, _, backend = _make_controller()
    backend.error = PositionUnavailableError("denied")
    assert asyncio.run(controller.mount()).error == "Location access denied"

    backend.error = None
    state = asyncio.run(controller.fetch_weather_data())
    assert state.error is None
    assert state.status == "ready"


@pytest.mark.parametrize(
    ("selected", "loading", "expected"),
    [("", False, False), ("2024-03-15", True, False), ("2024-03-15", False, True)],
)
def test_historical_trigger_policy(selected: str, loading: bool, expected: bool) -> None:
    controller, _, _ = _make_controller()
    controller.state = UIState(selected_date=selected, loading=loading)
    assert controller.can_fetch_historical is expected

"""Tests for location resolution and geolocation backends."""

from __future__ import annotations

import asyncio
import logging
import math
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from geo_weather.exceptions import (
    LocationPermissionError,
    LocationPrecisionError,
    LocationUnsupportedError,
    PositionUnavailableError,
)
from geo_weather.location import (
    GeolocationBackend,
    IPGeolocation,
    LocationResolver,
    Position,
    StaticGeolocation,
    build_location_resolver,
)
from geo_weather.weather.models import Coordinates


class CountingBackend(GeolocationBackend):
    def __init__(self, position: Position | None = None, error: Exception | None = None) -> None:
        self.position = position
        self.error = error
        self.calls = 0

    async def get_current_position(self) -> Position:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.position is not None
        return self.position


def _make_settings(**overrides: Any) -> Any:
    defaults = {
        "location_source": "none",
        "location_default_lat": None,
        "location_default_lon": None,
        "ip_geolocation_url": "https://ipapi.co/json/",
        "location_timeout_seconds": 5.0,
        "weather_user_agent": "geo-weather-tests/0.1",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def test_missing_capability_is_unsupported() -> None:
    resolver = LocationResolver(None)
    with pytest.raises(LocationUnsupportedError, match="not supported"):
        asyncio.run(resolver.resolve_location())


def test_backend_failure_reads_as_access_denied() -> None:
    backend = CountingBackend(error=PositionUnavailableError("user said no"))
    resolver = LocationResolver(backend)

    with pytest.raises(LocationPermissionError) as excinfo:
        asyncio.run(resolver.resolve_location())
    assert str(excinfo.value) == "Location access denied"


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (None, 13.4),
        (52.5, None),
        (0.0, 13.4),
        (52.5, 0.0),
        (math.nan, 13.4),
        (52.5, math.inf),
    ],
)
def test_unusable_coordinates_are_rejected(lat: float | None, lon: float | None) -> None:
    resolver = LocationResolver(CountingBackend(position=Position(lat, lon)))
    with pytest.raises(LocationPrecisionError, match="Unable to retrieve precise location"):
        asyncio.run(resolver.resolve_location())


def test_success_returns_coordinates_and_queries_backend_every_call() -> None:
    backend = CountingBackend(position=Position(52.52, 13.405))
    resolver = LocationResolver(backend)

    first = asyncio.run(resolver.resolve_location())
    second = asyncio.run(resolver.resolve_location())

    assert first == Coordinates(latitude=52.52, longitude=13.405)
    assert second == first
    assert backend.calls == 2


def test_static_backend_reports_given_coordinates() -> None:
    position = asyncio.run(StaticGeolocation(-33.87, 151.21).get_current_position())
    assert position == Position(-33.87, 151.21, source="static")


def _ip_backend(handler: Any) -> IPGeolocation:
    return IPGeolocation(
        _make_settings(),
        logging.getLogger("test_ip_geolocation"),
        transport=httpx.MockTransport(handler),
    )


def _lookup(backend: IPGeolocation) -> Position:
    async def _go() -> Position:
        try:
            return await backend.get_current_position()
        finally:
            await backend.aclose()

    return asyncio.run(_go())


def test_ip_backend_parses_coordinates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://ipapi.co/json/"
        return httpx.Response(
            200,
            json={"city": "Berlin", "country_name": "Germany", "latitude": 52.52, "longitude": "13.405"},
        )

    position = _lookup(_ip_backend(handler))
    assert position == Position(52.52, 13.405, source="ip")


def test_ip_backend_error_payload_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": True, "reason": "RateLimited"})

    with pytest.raises(PositionUnavailableError, match="RateLimited"):
        _lookup(_ip_backend(handler))


def test_ip_backend_http_failure_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": True})

    with pytest.raises(PositionUnavailableError, match="status 429"):
        _lookup(_ip_backend(handler))


def test_ip_backend_failure_surfaces_as_access_denied() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    resolver = LocationResolver(_ip_backend(handler))

    async def _go() -> Coordinates:
        try:
            return await resolver.resolve_location()
        finally:
            await resolver.aclose()

    with pytest.raises(LocationPermissionError, match="Location access denied"):
        asyncio.run(_go())


def test_builder_prefers_explicit_coordinates() -> None:
    resolver = build_location_resolver(
        _make_settings(location_source="ip"),
        logging.getLogger("test"),
        lat=48.85,
        lon=2.35,
    )
    assert isinstance(resolver.backend, StaticGeolocation)
    assert asyncio.run(resolver.resolve_location()) == Coordinates(latitude=48.85, longitude=2.35)


def test_builder_uses_static_settings() -> None:
    settings = _make_settings(
        location_source="static", location_default_lat=40.71, location_default_lon=-74.0
    )
    resolver = build_location_resolver(settings, logging.getLogger("test"))
    assert isinstance(resolver.backend, StaticGeolocation)
    assert resolver.backend.latitude == 40.71


def test_builder_ip_and_none_sources() -> None:
    ip_resolver = build_location_resolver(
        _make_settings(location_source="ip"), logging.getLogger("test")
    )
    assert isinstance(ip_resolver.backend, IPGeolocation)
    asyncio.run(ip_resolver.aclose())

    none_resolver = build_location_resolver(
        _make_settings(location_source="none"), logging.getLogger("test")
    )
    assert none_resolver.backend is None

"""Turns one backend position lookup into validated coordinates."""

from __future__ import annotations

import logging
import math

import httpx

from ..config import Settings
from ..exceptions import (
    LocationPermissionError,
    LocationPrecisionError,
    LocationUnsupportedError,
    PositionUnavailableError,
)
from ..weather.models import Coordinates
from .backends import IPGeolocation, StaticGeolocation
from .base import GeolocationBackend

UNSUPPORTED_MESSAGE = "Geolocation is not supported on this device"
DENIED_MESSAGE = "Location access denied"
PRECISION_MESSAGE = "Unable to retrieve precise location"


def _usable(value: float | None) -> bool:
    # Zero is rejected along with None; see DESIGN.md (Open Questions).
    return bool(value) and math.isfinite(value)


class LocationResolver:
    """Resolve the current position once per call, without caching."""

    def __init__(
        self,
        backend: GeolocationBackend | None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.backend = backend
        self.logger = logger or logging.getLogger(__name__)

    async def resolve_location(self) -> Coordinates:
        if self.backend is None:
            raise LocationUnsupportedError(UNSUPPORTED_MESSAGE)

        try:
            position = await self.backend.get_current_position()
        except PositionUnavailableError as exc:
            self.logger.warning("Geolocation lookup failed: %s", exc)
            raise LocationPermissionError(DENIED_MESSAGE) from exc

        if not (_usable(position.latitude) and _usable(position.longitude)):
            self.logger.warning(
                "Geolocation (%s) returned unusable coordinates lat=%s lon=%s",
                position.source,
                position.latitude,
                position.longitude,
            )
            raise LocationPrecisionError(PRECISION_MESSAGE)

        return Coordinates(latitude=position.latitude, longitude=position.longitude)

    async def aclose(self) -> None:
        if self.backend is not None:
            await self.backend.aclose()


def build_location_resolver(
    settings: Settings,
    logger: logging.Logger,
    *,
    lat: float | None = None,
    lon: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LocationResolver:
    """Pick a backend: explicit coordinates, then the configured source."""
    backend: GeolocationBackend | None
    if lat is not None or lon is not None:
        backend = StaticGeolocation(lat, lon)
    elif settings.location_source == "static":
        backend = StaticGeolocation(settings.location_default_lat, settings.location_default_lon)
    elif settings.location_source == "ip":
        backend = IPGeolocation(settings, logger, transport=transport)
    else:
        backend = None
    return LocationResolver(backend, logger)

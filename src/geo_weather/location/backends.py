"""Geolocation backends: fixed coordinates and IP-based lookup."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import PositionUnavailableError
from ..redaction import sanitize_text
from .base import GeolocationBackend, Position


class StaticGeolocation(GeolocationBackend):
    """Reports coordinates supplied on the command line or in settings."""

    def __init__(self, latitude: float | None, longitude: float | None) -> None:
        self.latitude = latitude
        self.longitude = longitude

    async def get_current_position(self) -> Position:
        return Position(latitude=self.latitude, longitude=self.longitude, source="static")


class IPGeolocation(GeolocationBackend):
    """Approximates the device position from its public IP address (ipapi.co)."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = str(settings.ip_geolocation_url)
        self.logger = logger
        self._client = httpx.AsyncClient(
            timeout=settings.location_timeout_seconds,
            headers={"Accept": "application/json", "User-Agent": settings.weather_user_agent},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_current_position(self) -> Position:
        try:
            response = await self._client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise PositionUnavailableError(
                f"IP geolocation failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PositionUnavailableError(
                f"IP geolocation request failed: {sanitize_text(str(exc)) or type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise PositionUnavailableError("IP geolocation returned non-JSON response.") from exc

        if not isinstance(payload, dict):
            raise PositionUnavailableError("IP geolocation returned unexpected payload.")
        if payload.get("error"):
            reason = payload.get("reason") or payload.get("message") or "unknown reason"
            raise PositionUnavailableError(f"IP geolocation refused: {reason}")

        self.logger.info(
            "IP geolocation resolved city=%s country=%s",
            payload.get("city"),
            payload.get("country_name") or payload.get("country"),
        )
        return Position(
            latitude=_as_coordinate(payload.get("latitude")),
            longitude=_as_coordinate(payload.get("longitude")),
            source="ip",
        )


def _as_coordinate(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None

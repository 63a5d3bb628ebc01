"""Provider-agnostic weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class WeatherProvider(ABC):
    """Base contract for the read-only weather lookups used by the viewer."""

    @abstractmethod
    async def fetch_current(self, lat: float, lon: float) -> dict[str, Any]:
        """Fetch the raw current-conditions payload."""

    @abstractmethod
    async def fetch_forecast(self, lat: float, lon: float) -> dict[str, Any]:
        """Fetch the raw multi-day forecast payload."""

    @abstractmethod
    async def fetch_historical(
        self, lat: float, lon: float, unix_timestamp: int
    ) -> dict[str, Any]:
        """Fetch the raw payload for a past moment at the given point."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release provider resources."""

"""Device geolocation contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """Raw position reported by a backend; either coordinate may be missing."""

    latitude: float | None
    longitude: float | None
    source: str = "unknown"


class GeolocationBackend(ABC):
    """One-shot position lookup, the equivalent of a device location query."""

    @abstractmethod
    async def get_current_position(self) -> Position:
        """Return one position or raise ``PositionUnavailableError``."""

    async def aclose(self) -> None:
        """Release backend resources."""

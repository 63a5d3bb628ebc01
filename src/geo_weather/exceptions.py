"""Application exception classes."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class WeatherProviderError(Exception):
    """Raised when weather provider requests or payload projection fail."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LocationError(Exception):
    """Base class for location resolution failures."""


class LocationUnsupportedError(LocationError):
    """Raised when no geolocation capability is available."""


class LocationPermissionError(LocationError):
    """Raised when the location lookup is refused or fails."""


class LocationPrecisionError(LocationError):
    """Raised when a position is returned without usable coordinates."""


class PositionUnavailableError(Exception):
    """Raised by geolocation backends when a position cannot be produced."""


class InvalidDateError(ValueError):
    """Raised when a selected date cannot be converted to a timestamp."""

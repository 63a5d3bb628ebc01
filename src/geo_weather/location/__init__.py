"""Location resolution for fetch cycles."""

from .backends import IPGeolocation, StaticGeolocation
from .base import GeolocationBackend, Position
from .resolver import LocationResolver, build_location_resolver

__all__ = [
    "GeolocationBackend",
    "IPGeolocation",
    "LocationResolver",
    "Position",
    "StaticGeolocation",
    "build_location_resolver",
]

"""Geolocated current weather, 5-day forecast and historical lookup viewer."""

__version__ = "0.1.0"

"""OpenWeather (api.openweathermap.org) weather provider implementation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import WeatherProviderError
from ..redaction import sanitize_text
from .base import WeatherProvider
from .models import CurrentWeatherSnapshot, ForecastEntry


class OpenWeatherProvider(WeatherProvider):
    """Issues the three read-only OpenWeather lookups and returns raw payloads.

    No retries and no caching: a failed request surfaces immediately as
    ``WeatherProviderError``.
    """

    provider_name = "openweather"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._client = httpx.AsyncClient(
            base_url=str(settings.openweather_base_url),
            timeout=settings.weather_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.weather_user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> OpenWeatherProvider:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_current(self, lat: float, lon: float) -> dict[str, Any]:
        return await self._request_json(
            self.settings.openweather_current_endpoint,
            {"lat": lat, "lon": lon},
            context="current weather",
        )

    async def fetch_forecast(self, lat: float, lon: float) -> dict[str, Any]:
        return await self._request_json(
            self.settings.openweather_forecast_endpoint,
            {"lat": lat, "lon": lon},
            context="forecast",
        )

    async def fetch_historical(
        self, lat: float, lon: float, unix_timestamp: int
    ) -> dict[str, Any]:
        return await self._request_json(
            self.settings.openweather_historical_endpoint,
            {"lat": lat, "lon": lon, "dt": unix_timestamp},
            context="historical weather",
        )

    async def _request_json(
        self, endpoint: str, params: dict[str, Any], context: str
    ) -> dict[str, Any]:
        query = {
            **params,
            "units": self.settings.weather_units,
            "appid": self.settings.openweather_api_key,
        }
        self.logger.debug(
            "OpenWeather %s request",
            context,
            extra={"context": {"endpoint": endpoint, "params": query}},
        )
        try:
            response = await self._client.get(endpoint, params=query)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise WeatherProviderError(
                f"OpenWeather {context} failed with status {status}: "
                f"{_error_detail(exc.response)}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise WeatherProviderError(
                f"OpenWeather {context} request failed: "
                f"{sanitize_text(str(exc)) or type(exc).__name__}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise WeatherProviderError(
                f"OpenWeather {context} returned non-JSON response."
            ) from exc

        if not isinstance(payload, dict):
            raise WeatherProviderError(
                f"OpenWeather {context} returned unexpected payload type "
                f"{type(payload).__name__}."
            )
        self.logger.debug("OpenWeather %s request succeeded", context)
        return payload


def _error_detail(response: httpx.Response) -> str:
    # OpenWeather error bodies look like {"cod": 401, "message": "..."}.
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return sanitize_text(body["message"])
    return sanitize_text(response.text[:300]) or response.reason_phrase


def parse_current_weather(payload: dict[str, Any]) -> CurrentWeatherSnapshot:
    """Project a current or time-machine payload onto a snapshot.

    Accepts the ``/weather`` shape (``main`` + ``weather``) as well as the One
    Call time-machine shapes (``data[0]`` or ``current``), where the readings
    sit flat on the block.
    """
    main = payload.get("main")
    if isinstance(main, dict):
        readings = main
        conditions = payload.get("weather")
    else:
        block = _time_machine_block(payload)
        if block is None:
            raise WeatherProviderError(
                "OpenWeather payload has neither 'main' nor time-machine readings."
            )
        readings = block
        conditions = block.get("weather")

    temperature = _as_float(readings.get("temp"))
    if temperature is None:
        raise WeatherProviderError("OpenWeather payload missing numeric temperature.")

    condition = _first_condition(conditions)
    observed_at = _parse_epoch(payload.get("dt"))
    if observed_at is None and readings is not main:
        observed_at = _parse_epoch(readings.get("dt"))

    return CurrentWeatherSnapshot(
        temperature=temperature,
        feels_like=_as_float(readings.get("feels_like")),
        humidity=_as_float(readings.get("humidity")),
        condition_description=_as_str(condition.get("description")) or "",
        condition_main=_as_str(condition.get("main")) or "",
        icon=_as_str(condition.get("icon")) or "",
        location_name=_as_str(payload.get("name")),
        observed_at=observed_at,
    )


def parse_forecast_entries(
    payload: dict[str, Any],
    logger: logging.Logger | None = None,
) -> list[ForecastEntry] | None:
    """Project the forecast ``list`` onto entries, or ``None`` if it is absent."""
    raw_entries = payload.get("list")
    if not isinstance(raw_entries, list):
        return None

    entries: list[ForecastEntry] = []
    skipped = 0
    for item in raw_entries:
        entry = _parse_forecast_item(item) if isinstance(item, dict) else None
        if entry is None:
            skipped += 1
            continue
        entries.append(entry)

    if skipped and logger is not None:
        logger.warning(
            "Skipped %d of %d forecast entries without timestamp or temperature",
            skipped,
            len(raw_entries),
        )
    return entries


def _parse_forecast_item(item: dict[str, Any]) -> ForecastEntry | None:
    timestamp = _parse_datetime(item.get("dt_txt")) or _parse_epoch(item.get("dt"))
    if timestamp is None:
        return None
    main = item.get("main")
    if not isinstance(main, dict):
        return None
    temperature = _as_float(main.get("temp"))
    if temperature is None:
        return None

    temp_min = _as_float(main.get("temp_min"))
    temp_max = _as_float(main.get("temp_max"))
    condition = _first_condition(item.get("weather"))
    return ForecastEntry(
        timestamp=timestamp,
        temperature=temperature,
        temperature_min=temp_min if temp_min is not None else temperature,
        temperature_max=temp_max if temp_max is not None else temperature,
        condition_description=_as_str(condition.get("description")) or "",
        icon=_as_str(condition.get("icon")) or "",
    )


def _time_machine_block(payload: dict[str, Any]) -> dict[str, Any] | None:
    data = payload.get("data")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    current = payload.get("current")
    if isinstance(current, dict):
        return current
    return None


def _first_condition(value: Any) -> dict[str, Any]:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _parse_epoch(value: Any) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO timestamp; values without an offset are taken as UTC."""
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate:
        return None
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)

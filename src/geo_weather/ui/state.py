"""Immutable view state and the pure transitions that drive it."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Literal

from ..weather.models import CurrentWeatherSnapshot, ForecastEntry

ViewStatus = Literal["idle", "loading", "ready", "failed"]

DATE_REQUIRED_MESSAGE = "Please select a date"


@dataclass(frozen=True, slots=True)
class UIState:
    """Everything the view renders; replaced wholesale on every change."""

    current_weather: CurrentWeatherSnapshot | None = None
    forecast: tuple[ForecastEntry, ...] = ()
    selected_date: str = ""
    error: str | None = None
    loading: bool = False
    status: ViewStatus = "idle"


def initial_state() -> UIState:
    """State at mount: loading, before the first fetch cycle starts."""
    return UIState(loading=True, status="loading")


def begin_loading(state: UIState) -> UIState:
    return replace(state, loading=True, error=None, status="loading")


def weather_loaded(
    state: UIState,
    current: CurrentWeatherSnapshot,
    forecast: Iterable[ForecastEntry],
) -> UIState:
    return replace(
        state,
        current_weather=current,
        forecast=tuple(forecast),
        error=None,
        loading=False,
        status="ready",
    )


def historical_loaded(state: UIState, current: CurrentWeatherSnapshot) -> UIState:
    """Swap in a historical reading; the forecast is left as it was."""
    return replace(state, current_weather=current, error=None, loading=False, status="ready")


def fetch_failed(state: UIState, message: str) -> UIState:
    return replace(state, error=message, loading=False, status="failed")


def date_missing(state: UIState) -> UIState:
    """Reject a historical request without a date; ``loading`` is untouched."""
    return replace(state, error=DATE_REQUIRED_MESSAGE, status="failed")


def select_date(state: UIState, value: str) -> UIState:
    return replace(state, selected_date=value)


def loading_released(state: UIState) -> UIState:
    """Clear the loading flag; a cycle interrupted mid-flight falls back to idle."""
    if not state.loading:
        return state
    status: ViewStatus = "idle" if state.status == "loading" else state.status
    return replace(state, loading=False, status=status)


def can_fetch_historical(state: UIState) -> bool:
    """Whether the historical trigger is enabled at the UI boundary."""
    return bool(state.selected_date) and not state.loading

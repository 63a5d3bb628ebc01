"""Rich rendering of the weather view state."""

from __future__ import annotations

from datetime import UTC, tzinfo

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..forecast import calendar_date
from ..weather.models import CurrentWeatherSnapshot, ForecastEntry
from .state import UIState, can_fetch_historical


def _celsius(value: float | None) -> str:
    return f"{value:.1f}°C" if value is not None else "-"


class WeatherView:
    """Renders a ``UIState`` the same way on every call; holds no state of its own."""

    def __init__(self, console: Console, *, tz: tzinfo = UTC) -> None:
        self.console = console
        self.tz = tz

    def render(self, state: UIState) -> None:
        self.console.print(self.build(state))

    def build(self, state: UIState) -> RenderableType:
        parts: list[RenderableType] = []
        if state.error:
            parts.append(Text(state.error, style="bold red"))
        parts.append(self._current_section(state))
        parts.append(self._forecast_section(state))
        parts.append(self._historical_control(state))
        return Panel(Group(*parts), title="Weather", border_style="blue")

    def _current_section(self, state: UIState) -> RenderableType:
        if state.loading:
            return Text("Loading current weather. . .")
        if state.current_weather is None:
            return Text("No weather data available")
        return self._current_weather(state.current_weather)

    @staticmethod
    def _current_weather(current: CurrentWeatherSnapshot) -> RenderableType:
        heading = (
            f"Weather in {current.location_name}" if current.location_name else "Current Weather"
        )
        lines = [
            Text(heading, style="bold"),
            Text(f"Temperature: {_celsius(current.temperature)}"),
            Text(f"Feels Like: {_celsius(current.feels_like)}"),
            Text(f"Condition: {current.condition_description or current.condition_main or '-'}"),
        ]
        if current.humidity is not None:
            lines.append(Text(f"Humidity: {current.humidity:g}%"))
        return Group(*lines)

    def _forecast_section(self, state: UIState) -> RenderableType:
        if state.loading:
            return Text("Loading forecast...")
        if not state.forecast:
            return Text("No forecast available")
        return self._forecast_table(state.forecast)

    def _forecast_table(self, forecast: tuple[ForecastEntry, ...]) -> Table:
        table = Table(title="5-Day Weather")
        table.add_column("Date")
        table.add_column("Temp", justify="right")
        table.add_column("Min/Max", justify="right")
        table.add_column("Condition", overflow="fold")
        for day in forecast:
            table.add_row(
                calendar_date(day, self.tz).isoformat(),
                _celsius(day.temperature),
                f"{day.temperature_min:.1f}/{day.temperature_max:.1f}",
                day.condition_description or "-",
            )
        return table

    @staticmethod
    def _historical_control(state: UIState) -> RenderableType:
        selected = state.selected_date or "(none)"
        trigger = "enabled" if can_fetch_historical(state) else "disabled"
        return Text(f"Date: {selected} | Historical Weather: {trigger}", style="dim")

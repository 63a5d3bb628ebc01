"""View state, orchestration and terminal rendering."""

from .controller import WeatherViewController
from .render import WeatherView
from .state import UIState, ViewStatus, can_fetch_historical

__all__ = ["UIState", "ViewStatus", "WeatherView", "WeatherViewController", "can_fetch_historical"]

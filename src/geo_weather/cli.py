"""Command-line entry point: show local weather, forecast and historical lookups."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.prompt import Prompt

from .config import Settings, load_settings
from .exceptions import ConfigError, InvalidDateError
from .forecast import date_to_unix_seconds
from .location.resolver import build_location_resolver
from .log_setup import setup_logger
from .ui.controller import WeatherViewController
from .ui.render import WeatherView
from .ui.state import UIState
from .weather.openweather import OpenWeatherProvider

_PROMPT = "Date (YYYY-MM-DD), h = historical, r = refresh, q = quit"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse viewer CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Show current weather and a 5-day forecast for your location."
    )
    parser.add_argument("--lat", type=float, default=None, help="Fixed latitude to use.")
    parser.add_argument("--lon", type=float, default=None, help="Fixed longitude to use.")
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Also fetch historical weather for this date (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Keep prompting for dates and refreshes after the first fetch.",
    )
    return parser.parse_args(argv)


def _validate_cli_input(args: argparse.Namespace) -> None:
    if (args.lat is None) != (args.lon is None):
        raise ConfigError("Use --lat and --lon together.")
    if args.lat is not None and not (-90 <= args.lat <= 90):
        raise ConfigError(f"Invalid latitude {args.lat}; expected between -90 and 90.")
    if args.lon is not None and not (-180 <= args.lon <= 180):
        raise ConfigError(f"Invalid longitude {args.lon}; expected between -180 and 180.")


async def _interactive_loop(
    controller: WeatherViewController, view: WeatherView, console: Console
) -> None:
    while True:
        try:
            answer = await asyncio.to_thread(Prompt.ask, _PROMPT, console=console, default="q")
        except (EOFError, KeyboardInterrupt):
            # Closed stdin or Ctrl-C ends the session like "q".
            console.print()
            return
        command = answer.strip()
        if command.lower() in {"q", "quit"}:
            return
        if command.lower() in {"r", "refresh"}:
            view.render(await controller.fetch_weather_data())
            continue
        if command.lower() not in {"h", "historical"}:
            try:
                date_to_unix_seconds(command)
            except InvalidDateError:
                console.print(
                    f"Not a date: {command!r}. Expected YYYY-MM-DD, h, r or q.",
                    markup=False,
                )
                continue
            controller.select_date(command)
        if not controller.can_fetch_historical:
            console.print("Historical Weather is disabled until a date is selected.")
            continue
        view.render(await controller.fetch_historical_weather())


async def _run(
    args: argparse.Namespace,
    settings: Settings,
    console: Console,
    logger: logging.Logger,
) -> UIState:
    view = WeatherView(console, tz=settings.forecast_zone)
    resolver = build_location_resolver(settings, logger, lat=args.lat, lon=args.lon)
    try:
        async with OpenWeatherProvider(settings=settings, logger=logger) as provider:
            controller = WeatherViewController(
                provider,
                resolver,
                logger,
                forecast_days=settings.forecast_max_days,
                forecast_tz=settings.forecast_zone,
            )
            view.render(await controller.mount())
            if args.date:
                controller.select_date(args.date)
                view.render(await controller.fetch_historical_weather())
            if args.interactive:
                await _interactive_loop(controller, view, console)
            return controller.state
    finally:
        await resolver.aclose()


def main(argv: list[str] | None = None) -> int:
    """Run one viewer session and map the final state to an exit code."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        _validate_cli_input(args)
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    logger.setLevel(settings.log_level)
    logger.info("Startup config", extra={"context": settings.safe_summary()})

    try:
        state = asyncio.run(_run(args, settings, console, logger))
    except Exception as exc:  # pragma: no cover - defensive catch for CLI runtime
        logger.exception("Unexpected viewer failure: %s", exc)
        return 99

    if state.status == "failed":
        return 4
    return 0


if __name__ == "__main__":
    sys.exit(main())

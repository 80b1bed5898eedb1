# ABOUTME: Orchestrates one widget update: mode lookup, cache check, fetch or load, render.
# ABOUTME: Converts every failure into a well-formed degraded Waybar payload.

import logging
import time
import traceback
from collections.abc import Callable
from datetime import date

import httpx

from waybar_weather.deps import WidgetDeps
from waybar_weather.forecast import MalformedResponseError, normalize_forecast
from waybar_weather.icons import IconMap
from waybar_weather.models import ForecastData, Location, Units
from waybar_weather.render import build_context, build_output, escape
from waybar_weather.settings import Settings
from waybar_weather.weather_service import get_forecast, resolve_location

logger = logging.getLogger(__name__)

NETWORK_BACKOFF_SECONDS = 2
TRACE_LINES = 5
NETWORK_PLACEHOLDER = "…"
ERROR_PLACEHOLDER = ""
ERROR_CLASSES = ["weather", "error"]


def load_forecast(
    deps: WidgetDeps,
    settings: Settings,
    force_refresh: bool = False,
    now: float | None = None,
) -> tuple[Location, ForecastData, Units]:
    """Reuse the cached fetch when fresh and made with the same settings, else fetch live."""
    snapshot = None if force_refresh else deps.cache_store.load()
    if (
        snapshot is not None
        and snapshot.is_fresh(settings.refresh_interval, now)
        and snapshot.matches(settings.fingerprint())
    ):
        logger.debug("Using cached forecast from %s", snapshot.timestamp)
        return snapshot.location, snapshot.weather, snapshot.units

    location = resolve_location(deps.http_client, settings)
    payload = get_forecast(deps.http_client, location, settings)
    weather = normalize_forecast(payload, location.name)
    units = settings.units
    deps.cache_store.save(location, weather, units, settings, now=now)
    return location, weather, units


def run_update(
    deps: WidgetDeps,
    settings: Settings,
    icons: IconMap,
    force_refresh: bool = False,
    today: date | None = None,
    now: float | None = None,
) -> dict:
    mode = deps.mode_store.get()
    _, weather, units = load_forecast(deps, settings, force_refresh=force_refresh, now=now)
    month = (today or date.today()).month
    ctx = build_context(settings, units, month, icons)
    return build_output(mode, weather, ctx)


def _trace_excerpt(exc: BaseException) -> str:
    frames = traceback.format_tb(exc.__traceback__)[-TRACE_LINES:]
    return "".join(frames).rstrip()


def network_error_output(exc: Exception) -> dict:
    return {
        "text": NETWORK_PLACEHOLDER,
        "tooltip": escape(f"network error: {exc}"),
        "class": ERROR_CLASSES,
    }


def parse_error_output(exc: Exception) -> dict:
    return {
        "text": ERROR_PLACEHOLDER,
        "tooltip": escape(f"parse error: {exc}\n{_trace_excerpt(exc)}"),
        "class": ERROR_CLASSES,
    }


def unexpected_error_output(exc: Exception) -> dict:
    return {
        "text": ERROR_PLACEHOLDER,
        "tooltip": escape(f"unexpected error: {exc}\n{_trace_excerpt(exc)}"),
        "class": ERROR_CLASSES,
    }


def safe_run(update: Callable[[], dict], sleep: Callable[[float], None] = time.sleep) -> dict:
    """Run an update, degrading any failure into an error payload.

    Network failures back off once before reporting so a short Waybar poll
    interval does not hammer a failing endpoint.
    """
    try:
        return update()
    except httpx.HTTPError as e:
        logger.warning("Network error: %s", e)
        sleep(NETWORK_BACKOFF_SECONDS)
        return network_error_output(e)
    except MalformedResponseError as e:
        logger.exception("Malformed API response")
        return parse_error_output(e)
    except Exception as e:
        logger.exception("Unexpected error during update")
        return unexpected_error_output(e)

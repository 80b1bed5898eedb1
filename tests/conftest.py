# ABOUTME: Shared test fixtures for the weather widget test suite.
# ABOUTME: Builds Open-Meteo shaped payloads and render contexts without touching the network.

from datetime import datetime, timedelta

import pytest

from waybar_weather.icons import builtin_icons
from waybar_weather.models import Units
from waybar_weather.render import build_context
from waybar_weather.settings import Settings

START = datetime(2025, 7, 14, 0, 0)
NOW = datetime(2025, 7, 14, 10, 0)

CONDITION_CYCLE = [0, 2, 61, 3]


def _iso(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M")


def build_payload(
    start: datetime = START,
    now: datetime = NOW,
    days: int = 10,
    temperature: float = 15.0,
    feels_like: float = 13.0,
    code: int = 61,
    is_day: int = 1,
    pop: int | None = None,
) -> dict:
    """Open-Meteo forecast response with hourly data at 1-hour resolution for `days` days."""
    hours = [start + timedelta(hours=i) for i in range(days * 24)]
    dates = [(start + timedelta(days=k)).date() for k in range(days)]
    return {
        "latitude": 52.52,
        "longitude": 13.41,
        "timezone": "Europe/Berlin",
        "current": {
            "time": _iso(now),
            "interval": 900,
            "temperature_2m": temperature,
            "apparent_temperature": feels_like,
            "is_day": is_day,
            "precipitation": 0.4,
            "weather_code": code,
        },
        "hourly": {
            "time": [_iso(h) for h in hours],
            "temperature_2m": [10.0 + (i % 10) for i in range(len(hours))],
            "precipitation_probability": [pop if pop is not None else (i * 7) % 101 for i in range(len(hours))],
            "precipitation": [round(0.1 * (i % 5), 1) for i in range(len(hours))],
            "weather_code": [CONDITION_CYCLE[i % 4] for i in range(len(hours))],
            "is_day": [1 if 6 <= h.hour < 20 else 0 for h in hours],
        },
        "daily": {
            "time": [d.isoformat() for d in dates],
            "weather_code": [CONDITION_CYCLE[k % 4] for k in range(days)],
            "temperature_2m_max": [20.0 + k for k in range(days)],
            "temperature_2m_min": [10.0 + k for k in range(days)],
            "precipitation_sum": [0.5 * k for k in range(days)],
            "precipitation_probability_max": [10 * k for k in range(days)],
            "sunrise": [f"{d.isoformat()}T05:{10 + k:02d}" for k, d in enumerate(dates)],
            "sunset": [f"{d.isoformat()}T21:{30 - k:02d}" for k, d in enumerate(dates)],
        },
    }


@pytest.fixture
def payload() -> dict:
    return build_payload()


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def settings() -> Settings:
    return Settings(latitude=52.52, longitude=13.41, seasonal_bias=True, debug=False)


@pytest.fixture
def ctx(settings):
    """Celsius render context for July with the built-in Nerd Font icons."""
    return build_context(settings, Units(temperature="°C", precipitation="mm"), 7, builtin_icons("nerd"))

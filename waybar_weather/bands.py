# ABOUTME: Threshold tables mapping temperatures and precipitation probabilities to glyphs and colors.
# ABOUTME: Band tables are a pure function of unit, month, seasonal-bias flag, and palette.

import math
from typing import NamedTuple

from waybar_weather.settings import ColorPalette

THERMO_COLD = ""
THERMO_NEUTRAL = ""
THERMO_WARM = ""
THERMO_HOT = ""

POP_ALERT_THRESHOLD = 60
POP_ICON_HIGH = ""
POP_ICON_LOW = ""

NEUTRAL_LIMIT_C = 20
WARM_LIMIT_C = 28
NEUTRAL_LIMIT_F = 68
WARM_LIMIT_F = 82
FIXED_COLD_LIMIT_C = 5
FIXED_COLD_LIMIT_F = 41


class Band(NamedTuple):
    """A value range ending (exclusively) at limit."""

    limit: float
    glyph: str
    color: str
    name: str


def seasonal_cold_limit_c(month: int) -> int:
    if 5 <= month <= 9:
        return 10
    if month in (3, 4, 10):
        return 8
    return 5


def seasonal_cold_limit_f(month: int) -> int:
    return round(seasonal_cold_limit_c(month) * 9 / 5 + 32)


def temperature_bands(celsius: bool, month: int, seasonal_bias: bool, palette: ColorPalette) -> list[Band]:
    """Build the cold/neutral/warm/hot table for a unit system.

    The cold limit follows the calendar month when seasonal bias is on. Fahrenheit
    limits are converted from the Celsius ones so both unit systems agree.
    """
    if celsius:
        cold = seasonal_cold_limit_c(month) if seasonal_bias else FIXED_COLD_LIMIT_C
        neutral, warm = NEUTRAL_LIMIT_C, WARM_LIMIT_C
    else:
        cold = seasonal_cold_limit_f(month) if seasonal_bias else FIXED_COLD_LIMIT_F
        neutral, warm = NEUTRAL_LIMIT_F, WARM_LIMIT_F
    return [
        Band(cold, THERMO_COLD, palette.cold, "cold"),
        Band(neutral, THERMO_NEUTRAL, palette.neutral, "neutral"),
        Band(warm, THERMO_WARM, palette.warm, "warm"),
        Band(math.inf, THERMO_HOT, palette.hot, "hot"),
    ]


def classify(value: float, bands: list[Band]) -> Band | None:
    """Return the first band whose limit exceeds value, or None for an empty table."""
    for band in bands:
        if value < band.limit:
            return band
    return None


def clamp_pop(pop) -> int:
    try:
        pop = int(pop)
    except (TypeError, ValueError):
        pop = 0
    return max(0, min(pop, 100))


def pop_severity(pop) -> str:
    pop = clamp_pop(pop)
    if pop < 30:
        return "low"
    if pop < 60:
        return "medium"
    if pop < 80:
        return "high"
    return "very-high"


def pop_color(pop, palette: ColorPalette) -> str:
    """Color for a precipitation probability, banded at 30/60/80 percent."""
    return {
        "low": palette.pop_low,
        "medium": palette.pop_med,
        "high": palette.pop_high,
        "very-high": palette.pop_vhigh,
    }[pop_severity(pop)]


def pop_icon(pop) -> str:
    return POP_ICON_HIGH if clamp_pop(pop) >= POP_ALERT_THRESHOLD else POP_ICON_LOW

# ABOUTME: Normalizes Open-Meteo column-oriented payloads into row-oriented forecast models.
# ABOUTME: Also selects the hourly, daily, 3-hour, and sunrise/sunset windows the tooltip shows.

import logging
import math
import re
from datetime import date, datetime

from waybar_weather.models import CurrentConditions, DailyEntry, ForecastData, HourlyEntry, ThreeHourRow

logger = logging.getLogger(__name__)

WMO_CODE_DESCRIPTIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

CURRENT_INDEX = 0
DETAIL_DAYS = 3
DETAIL_HOUR_STEP = 3

_NUMERIC = re.compile(r"-?\d+(\.\d*)?")


class MalformedResponseError(Exception):
    """An API response is not shaped like the data we asked for."""


def parse_float(value, default: float = 0.0) -> float:
    """Value as a float, or default when it is missing or not cleanly numeric."""
    if value is None or value == "":
        return default
    if not isinstance(value, (int, float)) and not (isinstance(value, str) and _NUMERIC.fullmatch(value.strip())):
        return default
    try:
        parsed = float(value)
    except (OverflowError, ValueError):
        return default
    return parsed if math.isfinite(parsed) else default


def parse_int(value, default: int = 0) -> int:
    """Value truncated to an int, or default when it is missing or not cleanly numeric."""
    parsed = parse_float(value, None)
    return default if parsed is None else int(parsed)


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 local timestamp; aware values lose their offset."""
    try:
        parsed = datetime.fromisoformat(str(value))
    except (TypeError, ValueError):
        return None
    return parsed.replace(tzinfo=None)


def describe_condition(code) -> str:
    return WMO_CODE_DESCRIPTIONS.get(parse_int(code, -1), "Unknown")


def _get_at(data: dict, key: str, index: int):
    """Safely get value at index from a column array, returning None if missing."""
    col = data.get(key)
    if not isinstance(col, list) or index >= len(col):
        return None
    return col[index]


def _scalar(data: dict, key: str):
    value = data.get(key)
    if isinstance(value, list):
        return value[CURRENT_INDEX] if len(value) > CURRENT_INDEX else None
    return value


def extract_current(payload: dict, location_name: str | None = None) -> CurrentConditions:
    """Build current conditions from the payload's "current" block."""
    cur = payload.get("current")
    if not isinstance(cur, dict):
        raise MalformedResponseError("response has no 'current' block")
    now_local = parse_timestamp(_scalar(cur, "time"))
    if now_local is None:
        raise MalformedResponseError(f"unparseable current time: {cur.get('time')!r}")

    code = _scalar(cur, "weather_code")
    return CurrentConditions(
        time=now_local,
        timezone=payload.get("timezone"),
        location_name=location_name,
        condition=describe_condition(code),
        code=parse_int(code),
        temperature=parse_float(_scalar(cur, "temperature_2m")),
        feels_like=parse_float(_scalar(cur, "apparent_temperature")),
        precipitation=parse_float(_scalar(cur, "precipitation")),
        is_day=parse_int(_scalar(cur, "is_day"), 1),
    )


def parse_hourly(raw: dict) -> list[HourlyEntry]:
    """Zip Open-Meteo hourly columns into HourlyEntry rows, in source order."""
    times = raw.get("time")
    if not isinstance(times, list):
        return []

    result = []
    for i, t in enumerate(times):
        ts = parse_timestamp(t)
        if ts is None:
            logger.debug("Skipping hourly row %d with bad time %r", i, t)
            continue
        code = _get_at(raw, "weather_code", i)
        result.append(
            HourlyEntry(
                time=ts,
                temperature=parse_float(_get_at(raw, "temperature_2m", i)),
                pop=parse_int(_get_at(raw, "precipitation_probability", i)),
                precipitation=parse_float(_get_at(raw, "precipitation", i)),
                condition=describe_condition(code),
                code=parse_int(code),
                is_day=parse_int(_get_at(raw, "is_day", i), 1),
            )
        )
    return result


def parse_daily(raw: dict) -> list[DailyEntry]:
    """Zip Open-Meteo daily columns into DailyEntry rows, in source order."""
    dates = raw.get("time")
    if not isinstance(dates, list):
        return []

    result = []
    for i, d in enumerate(dates):
        try:
            day = date.fromisoformat(str(d))
        except ValueError:
            logger.debug("Skipping daily row %d with bad date %r", i, d)
            continue
        code = _get_at(raw, "weather_code", i)
        result.append(
            DailyEntry(
                date=day,
                temperature_max=parse_float(_get_at(raw, "temperature_2m_max", i)),
                temperature_min=parse_float(_get_at(raw, "temperature_2m_min", i)),
                condition=describe_condition(code),
                code=parse_int(code),
                precipitation_sum=parse_float(_get_at(raw, "precipitation_sum", i)),
                pop_max=parse_int(_get_at(raw, "precipitation_probability_max", i)),
                sunrise=parse_timestamp(_get_at(raw, "sunrise", i)),
                sunset=parse_timestamp(_get_at(raw, "sunset", i)),
            )
        )
    return result


def normalize_forecast(payload, location_name: str | None = None) -> ForecastData:
    """Check the payload's structure and convert it into a ForecastData."""
    if not isinstance(payload, dict):
        raise MalformedResponseError("forecast response is not a JSON object")
    for block in ("hourly", "daily"):
        if not isinstance(payload.get(block), dict):
            raise MalformedResponseError(f"response has no '{block}' block")

    return ForecastData(
        timezone=payload.get("timezone"),
        current=extract_current(payload, location_name),
        hourly=parse_hourly(payload["hourly"]),
        daily=parse_daily(payload["daily"]),
    )


def next_hours(hourly: list[HourlyEntry], now: datetime, limit: int) -> list[HourlyEntry]:
    """The first limit hours at or after now.

    When every hour is in the past (clock or timezone skew) the first limit
    hours are used instead, so a non-empty forecast never renders empty.
    """
    limit = max(0, limit)
    upcoming = [h for h in hourly if h.time >= now][:limit]
    if not upcoming and hourly:
        return hourly[:limit]
    return upcoming


def next_days(daily: list[DailyEntry], limit: int) -> list[DailyEntry]:
    return daily[: max(0, limit)]


def three_hour_rows(hourly: list[HourlyEntry], now: datetime, num_days: int = DETAIL_DAYS) -> list[ThreeHourRow]:
    """Hours on 3-hour boundaries for the next num_days dates after today, in (date, time) order."""
    today = now.date()
    rows = []
    picked_dates = set()

    for h in hourly:
        day = h.time.date()
        if day <= today:
            continue
        if h.time.hour % DETAIL_HOUR_STEP != 0:
            continue
        picked_dates.add(day)
        if len(picked_dates) > num_days:
            break
        rows.append(
            ThreeHourRow(
                date=day,
                time=h.time,
                temperature=h.temperature,
                pop=h.pop,
                precipitation=h.precipitation,
                condition=h.condition,
                code=h.code,
                is_day=h.is_day,
            )
        )

    return sorted(rows, key=lambda r: (r.date, r.time))


def _hhmm(ts: datetime | None) -> str:
    return ts.strftime("%H:%M") if ts else ""


def astro_by_date(daily: list[DailyEntry]) -> dict[date, tuple[str, str]]:
    """Map each day to its (sunrise, sunset) as HH:MM, "" where missing."""
    return {d.date: (_hhmm(d.sunrise), _hhmm(d.sunset)) for d in daily}


def sun_times(daily: list[DailyEntry], now: datetime) -> tuple[str, str]:
    today = now.date()
    for d in daily:
        if d.date == today:
            return _hhmm(d.sunrise), _hhmm(d.sunset)
    return "", ""

# ABOUTME: HTTP layer for IP geolocation and Open-Meteo forecast requests.
# ABOUTME: Returns raw forecast payloads; normalization lives in the forecast module.

import httpx

from waybar_weather.forecast import MalformedResponseError, parse_float
from waybar_weather.models import Location
from waybar_weather.settings import Settings

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
IP_GEOLOCATION_URL = "http://ip-api.com/json/"

IP_GEOLOCATION_FIELDS = "lat,lon,city,regionName,country"

CURRENT_PARAMS = "temperature_2m,apparent_temperature,is_day,precipitation,weather_code"

HOURLY_PARAMS = "temperature_2m,precipitation_probability,precipitation,weather_code,is_day"

DAILY_PARAMS = (
    "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum,"
    "precipitation_probability_max,sunrise,sunset"
)


def _json_object(resp: httpx.Response, source: str) -> dict:
    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedResponseError(f"{source} returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Unexpected response from {source}")
    return data


def fetch_location_from_ip(client: httpx.Client) -> Location:
    """Locate this machine by its public IP using ip-api.com (no API key required)."""
    resp = client.get(IP_GEOLOCATION_URL, params={"fields": IP_GEOLOCATION_FIELDS})
    resp.raise_for_status()
    data = _json_object(resp, "ip-api.com")

    parts = [str(data[k]) for k in ("city", "regionName", "country") if data.get(k)]
    return Location(
        latitude=parse_float(data.get("lat")),
        longitude=parse_float(data.get("lon")),
        name=", ".join(parts) or None,
    )


def resolve_location(client: httpx.Client, settings: Settings) -> Location:
    """Configured coordinates, or an IP lookup when either one is "auto"."""
    if settings.is_auto_location:
        return fetch_location_from_ip(client)
    return Location(latitude=settings.latitude, longitude=settings.longitude)


def build_forecast_params(location: Location, settings: Settings) -> dict:
    celsius = settings.unit == "Celsius"
    return {
        "latitude": location.latitude,
        "longitude": location.longitude,
        "current": CURRENT_PARAMS,
        "hourly": HOURLY_PARAMS,
        "daily": DAILY_PARAMS,
        "temperature_unit": "celsius" if celsius else "fahrenheit",
        "precipitation_unit": "mm" if celsius else "inch",
        "timezone": "auto",
        "forecast_days": settings.days_window,
    }


def get_forecast(client: httpx.Client, location: Location, settings: Settings) -> dict:
    """Fetch the raw Open-Meteo forecast payload for a location."""
    resp = client.get(FORECAST_URL, params=build_forecast_params(location, settings))
    resp.raise_for_status()
    return _json_object(resp, "Open-Meteo")

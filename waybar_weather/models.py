# ABOUTME: Pydantic BaseModels for normalized forecast data and persisted widget state.
# ABOUTME: Defines the row-oriented types built from Open-Meteo's column arrays.

import time
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel


class DisplayMode(str, Enum):
    """Which tooltip layout the widget renders."""

    DEFAULT = "default"
    WEEKVIEW = "weekview"


class Units(BaseModel):
    """Display units resolved from the configured temperature unit."""

    temperature: str = "°C"
    precipitation: str = "mm"

    @property
    def is_celsius(self) -> bool:
        return self.temperature.strip().startswith("°C")


class Location(BaseModel):
    """Resolved coordinates, with a display name only when found by IP lookup."""

    latitude: float
    longitude: float
    name: str | None = None


class CurrentConditions(BaseModel):
    """Current conditions at the location, timestamped in its local time."""

    time: datetime
    timezone: str | None = None
    location_name: str | None = None
    condition: str = "Unknown"
    code: int = 0
    temperature: float = 0.0
    feels_like: float = 0.0
    precipitation: float = 0.0
    is_day: int = 1


class HourlyEntry(BaseModel):
    """One hour of forecast data."""

    time: datetime
    temperature: float = 0.0
    pop: int = 0
    precipitation: float = 0.0
    condition: str = "Unknown"
    code: int = 0
    is_day: int = 1


class DailyEntry(BaseModel):
    """One calendar day of forecast data."""

    date: date
    temperature_max: float = 0.0
    temperature_min: float = 0.0
    condition: str = "Unknown"
    code: int = 0
    precipitation_sum: float = 0.0
    pop_max: int = 0
    sunrise: datetime | None = None
    sunset: datetime | None = None


class ThreeHourRow(BaseModel):
    """A forecast hour on a 3-hour boundary for a day after today."""

    date: date
    time: datetime
    temperature: float = 0.0
    pop: int = 0
    precipitation: float = 0.0
    condition: str = "Unknown"
    code: int = 0
    is_day: int = 1


class ForecastData(BaseModel):
    """Normalized forecast: current conditions plus full hourly and daily lists."""

    timezone: str | None = None
    current: CurrentConditions
    hourly: list[HourlyEntry] = []
    daily: list[DailyEntry] = []


class SettingsFingerprint(BaseModel):
    """Canonical string forms of the settings a cached fetch depends on."""

    latitude: str
    longitude: str
    unit: str
    time_format: str


class CacheSnapshot(BaseModel):
    """The last successful fetch, as persisted between invocations."""

    timestamp: float
    settings: SettingsFingerprint
    location: Location
    weather: ForecastData
    units: Units

    def is_fresh(self, max_age_seconds: float, now: float | None = None) -> bool:
        """Strictly younger than max_age_seconds; an age equal to the limit is stale."""
        if now is None:
            now = time.time()
        return now - self.timestamp < max_age_seconds

    def matches(self, fingerprint: SettingsFingerprint) -> bool:
        return self.settings == fingerprint

# ABOUTME: Widget settings model, JSONC config loading, and per-user file locations.
# ABOUTME: Settings are validated once per run from user overrides layered over field defaults.

import json
import logging
import os
import re
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from waybar_weather.models import SettingsFingerprint, Units

load_dotenv()

logger = logging.getLogger(__name__)

APP_DIR_NAME = "waybar-weather"
SETTINGS_FILE_NAME = "weather_settings.jsonc"
ICONS_FILE_NAME = "weather_icons.json"
MODE_FILE_NAME = "mode"
CACHE_FILE_NAME = "cache.json"

MAX_HOURS_AHEAD = 24
MAX_FORECAST_DAYS = 16

# Strings are matched first so comment markers inside them survive.
_JSONC_TOKENS = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


class SettingsError(Exception):
    """The settings file could not be read or does not describe valid settings."""


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip() == "1"


class ColorPalette(BaseModel):
    """Named colors used by the bar text and tooltip."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    primary: str = "#42A5F5"
    cold: str = "skyblue"
    neutral: str = "#42A5F5"
    warm: str = "khaki"
    hot: str = "indianred"
    pop_low: str = "#EAD7FF"
    pop_med: str = "#CFA7FF"
    pop_high: str = "#BC85FF"
    pop_vhigh: str = "#A855F7"
    divider: str = "#2B3B57"


class Settings(BaseModel):
    """Resolved widget configuration.

    Keys are accepted as written in the JSONC file (``icon-position``,
    ``hours_ahead``) or by field name. Anything not supplied keeps its default.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    unit: Literal["Celsius", "Fahrenheit"] = "Celsius"
    time_format: Literal["24h", "12h"] = Field("24h", alias="time-format")
    icon_style: Literal["nerd", "emoji"] = Field("nerd", alias="icon-style")
    icon_position: Literal["left", "right"] = Field("left", alias="icon-position")
    font_size: int = Field(14, alias="font-size")
    hours_ahead: int = 24
    forecast_days: int = 16
    latitude: float | Literal["auto"] = "auto"
    longitude: float | Literal["auto"] = "auto"
    refresh_interval: int = 600
    colors: ColorPalette = ColorPalette()
    seasonal_bias: bool = Field(default_factory=lambda: _env_flag("SEASONAL_BIAS", "1"))
    debug: bool = Field(default_factory=lambda: _env_flag("WAYBAR_WEATHER_DEBUG", "0"))

    @field_validator("unit", mode="before")
    @classmethod
    def _normalize_unit(cls, value):
        if isinstance(value, str) and value.strip().lower().startswith("f"):
            return "Fahrenheit"
        return "Celsius"

    @field_validator("time_format", mode="before")
    @classmethod
    def _normalize_time_format(cls, value):
        text = str(value).strip().lower()
        return "12h" if text in ("12h", "12") else "24h"

    @field_validator("icon_style", mode="before")
    @classmethod
    def _normalize_icon_style(cls, value):
        return "emoji" if str(value).strip().lower() == "emoji" else "nerd"

    @field_validator("icon_position", mode="before")
    @classmethod
    def _normalize_icon_position(cls, value):
        return "right" if str(value).strip().lower() == "right" else "left"

    @field_validator("font_size", "hours_ahead", "forecast_days", "refresh_interval", mode="before")
    @classmethod
    def _null_means_default(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _normalize_coordinate(cls, value):
        if value is None or (isinstance(value, str) and value.strip().lower() in ("", "auto")):
            return "auto"
        return value

    @property
    def is_auto_location(self) -> bool:
        return self.latitude == "auto" or self.longitude == "auto"

    @property
    def hours_window(self) -> int:
        return max(0, min(self.hours_ahead, MAX_HOURS_AHEAD))

    @property
    def days_window(self) -> int:
        return max(1, min(self.forecast_days, MAX_FORECAST_DAYS))

    @property
    def units(self) -> Units:
        if self.unit == "Celsius":
            return Units(temperature="°C", precipitation="mm")
        return Units(temperature="°F", precipitation="in")

    @property
    def icon_size(self) -> str:
        return str(self.font_size * 1000)

    @property
    def icon_size_large(self) -> str:
        return str((self.font_size + 4) * 1000)

    @property
    def icon_size_small(self) -> str:
        return str(max(1, self.font_size - 2) * 1000)

    def fingerprint(self) -> SettingsFingerprint:
        """Canonical string forms of the settings that decide whether a cached fetch still applies."""
        return SettingsFingerprint(
            latitude=str(self.latitude),
            longitude=str(self.longitude),
            unit=str(self.unit),
            time_format=str(self.time_format),
        )


def config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / APP_DIR_NAME


def state_dir() -> Path:
    base = os.environ.get("XDG_STATE_HOME") or Path.home() / ".local" / "state"
    return Path(base) / APP_DIR_NAME


def strip_jsonc_comments(text: str) -> str:
    """Remove // and /* */ comments that are not inside string literals."""
    return _JSONC_TOKENS.sub(lambda m: m.group(1) or "", text)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a JSONC file; a missing file yields the defaults."""
    path = path or config_dir() / SETTINGS_FILE_NAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No settings file at %s, using defaults", path)
        return Settings()
    except OSError as e:
        raise SettingsError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(strip_jsonc_comments(text))
    except json.JSONDecodeError as e:
        raise SettingsError(f"{path.name} is not valid JSONC: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"{path.name} must be a JSON object")

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {path.name}: {e}") from e

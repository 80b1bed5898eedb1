# ABOUTME: WMO condition code to glyph lookup, with built-in Nerd Font and emoji tables.
# ABOUTME: An optional weather_icons.json overrides built-in entries per code.

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

IconMap = dict[int, tuple[str, str | None]]

# weather-icons range of Nerd Fonts; night glyphs only where they differ
NERD_ICONS: IconMap = {
    0: ("", ""),
    1: ("", ""),
    2: ("", ""),
    3: ("", None),
    45: ("", None),
    48: ("", None),
    51: ("", None),
    53: ("", None),
    55: ("", None),
    56: ("", None),
    57: ("", None),
    61: ("", None),
    63: ("", None),
    65: ("", None),
    66: ("", None),
    67: ("", None),
    71: ("", None),
    73: ("", None),
    75: ("", None),
    77: ("", None),
    80: ("", None),
    81: ("", None),
    82: ("", None),
    85: ("", None),
    86: ("", None),
    95: ("", None),
    96: ("", None),
    99: ("", None),
}

EMOJI_ICONS: IconMap = {
    0: ("☀️", "🌙"),
    1: ("🌤️", "🌙"),
    2: ("⛅", None),
    3: ("☁️", None),
    45: ("🌫️", None),
    48: ("🌫️", None),
    51: ("🌦️", None),
    53: ("🌦️", None),
    55: ("🌦️", None),
    56: ("🌧️", None),
    57: ("🌧️", None),
    61: ("🌧️", None),
    63: ("🌧️", None),
    65: ("🌧️", None),
    66: ("🌧️", None),
    67: ("🌧️", None),
    71: ("🌨️", None),
    73: ("🌨️", None),
    75: ("❄️", None),
    77: ("❄️", None),
    80: ("🌦️", None),
    81: ("🌧️", None),
    82: ("🌧️", None),
    85: ("🌨️", None),
    86: ("❄️", None),
    95: ("⛈️", None),
    96: ("⛈️", None),
    99: ("⛈️", None),
}


def builtin_icons(style: str) -> IconMap:
    return dict(EMOJI_ICONS if style == "emoji" else NERD_ICONS)


def parse_icon_entries(data) -> IconMap:
    """Convert a weather_icons.json array of {code, icon, icon-night} objects."""
    icons: IconMap = {}
    if not isinstance(data, list):
        return icons
    for item in data:
        if not isinstance(item, dict) or not item.get("icon"):
            continue
        try:
            code = int(item["code"])
        except (KeyError, TypeError, ValueError):
            continue
        icons[code] = (str(item["icon"]), item.get("icon-night") or None)
    return icons


def load_icon_map(path: Path | None, style: str = "nerd") -> IconMap:
    """Built-in icons for the style, overridden by entries from path when readable."""
    icons = builtin_icons(style)
    if path is None or not path.exists():
        return icons
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Ignoring icon map %s: %s", path, e)
        return icons
    icons.update(parse_icon_entries(data))
    return icons


def condition_icon(icons: IconMap, code: int, is_day: bool) -> str:
    """Night glyph at night when one exists, otherwise the condition's glyph; "" for unknown codes."""
    entry = icons.get(code)
    if entry is None:
        return ""
    day, night = entry
    if not is_day and night:
        return night
    return day

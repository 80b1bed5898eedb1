# ABOUTME: Persisted two-state display mode (default / weekview) toggled by bar clicks.
# ABOUTME: Unreadable or unknown persisted values read back as the default mode.

import logging
from pathlib import Path
from typing import Literal

from waybar_weather.models import DisplayMode

logger = logging.getLogger(__name__)

MODE_CYCLE = [DisplayMode.DEFAULT, DisplayMode.WEEKVIEW]


def cycle_mode(mode: DisplayMode, direction: Literal["next", "prev"] = "next") -> DisplayMode:
    """Step through MODE_CYCLE with wraparound."""
    i = MODE_CYCLE.index(mode)
    step = -1 if direction == "prev" else 1
    return MODE_CYCLE[(i + step) % len(MODE_CYCLE)]


class ModeStore:
    """Display mode kept as a single line of text in a per-user state file."""

    def __init__(self, path: Path):
        self.path = path

    def get(self) -> DisplayMode:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return DisplayMode.DEFAULT
        try:
            return DisplayMode(value)
        except ValueError:
            return DisplayMode.DEFAULT

    def set(self, mode: str) -> bool:
        """Persist mode if it is a valid mode name; returns whether anything was written."""
        try:
            mode = DisplayMode(mode)
        except ValueError:
            logger.debug("Ignoring unknown display mode %r", mode)
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(mode.value, encoding="utf-8")
        return True

    def cycle(self, direction: Literal["next", "prev"] = "next") -> DisplayMode:
        mode = cycle_mode(self.get(), direction)
        self.set(mode)
        return mode

# ABOUTME: JSON snapshot of the last successful forecast fetch, reused while fresh.
# ABOUTME: Read failures count as a cache miss; write failures are logged at debug level only.

import logging
import time
from pathlib import Path

from pydantic import ValidationError

from waybar_weather.models import CacheSnapshot, ForecastData, Location, Units
from waybar_weather.settings import Settings

logger = logging.getLogger(__name__)


class CacheStore:
    """Single-writer cache file holding one CacheSnapshot."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> CacheSnapshot | None:
        """The stored snapshot, or None when it is absent or cannot be parsed."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        try:
            return CacheSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.debug("Discarding unreadable cache %s: %s", self.path, e)
            return None

    def is_fresh(self, max_age_seconds: float, now: float | None = None) -> bool:
        snapshot = self.load()
        return snapshot is not None and snapshot.is_fresh(max_age_seconds, now)

    def settings_match(self, settings: Settings) -> bool:
        snapshot = self.load()
        return snapshot is not None and snapshot.matches(settings.fingerprint())

    def save(
        self,
        location: Location,
        weather: ForecastData,
        units: Units,
        settings: Settings,
        now: float | None = None,
    ) -> bool:
        """Overwrite the snapshot; returns False (and logs at debug) if it could not be written."""
        snapshot = CacheSnapshot(
            timestamp=time.time() if now is None else now,
            settings=settings.fingerprint(),
            location=location,
            weather=weather,
            units=units,
        )
        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(snapshot.model_dump_json(), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.debug("Cache write to %s failed: %s", self.path, e)
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass
            return False
        return True

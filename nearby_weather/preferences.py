"""Asynchronous preferences manager persisting user settings as JSON."""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

import aiofiles
from dateutil.parser import isoparse

from nearby_weather.const import Config
from nearby_weather.weather_models import SortKey, TemperatureUnit, WindspeedUnit

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "temperature_unit": TemperatureUnit.CELSIUS.value,
    "windspeed_unit": WindspeedUnit.KILOMETRES.value,
    "language": Config.DEFAULT_LANGUAGE,
    "sort_orientation": SortKey.NAME.value,
    "is_initial_launch": True,
    "last_refresh": None,
}


class PreferencesManager:
    """Holds the user's preferences in memory and mirrors them to a JSON file."""

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        self.file_path = Path(file_path or Config.PREFERENCES_FILE)
        self._values: Dict[str, Any] = dict(DEFAULT_PREFERENCES)
        self._lock = asyncio.Lock()

    async def load(self) -> Dict[str, Any]:
        """Load preferences from disk, keeping defaults for anything missing or invalid."""
        async with self._lock:
            try:
                async with aiofiles.open(self.file_path, 'r', encoding='utf-8') as f:
                    content = await f.read()
            except FileNotFoundError:
                logger.info(f"Preferences file {self.file_path} not found, using defaults")
                return dict(self._values)

            if not content.strip():
                return dict(self._values)

            try:
                stored = json.loads(content)
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON in preferences file {self.file_path}: {e}")
                return dict(self._values)

            if not isinstance(stored, dict):
                logger.warning(f"Preferences file {self.file_path} does not hold an object, ignoring it")
                return dict(self._values)

            for key in DEFAULT_PREFERENCES:
                if key in stored:
                    self._values[key] = stored[key]
            return dict(self._values)

    async def save(self) -> None:
        async with self._lock:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.file_path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(self._values, indent=2, ensure_ascii=False))
            logger.debug(f"Preferences saved to {self.file_path}")

    def _enum_value(self, key: str, enum_type):
        try:
            return enum_type(self._values.get(key))
        except ValueError:
            logger.warning(f"Unknown value {self._values.get(key)!r} for {key}, using default")
            return enum_type(DEFAULT_PREFERENCES[key])

    @property
    def temperature_unit(self) -> TemperatureUnit:
        return self._enum_value("temperature_unit", TemperatureUnit)

    @temperature_unit.setter
    def temperature_unit(self, unit: TemperatureUnit) -> None:
        self._values["temperature_unit"] = unit.value

    @property
    def windspeed_unit(self) -> WindspeedUnit:
        return self._enum_value("windspeed_unit", WindspeedUnit)

    @windspeed_unit.setter
    def windspeed_unit(self, unit: WindspeedUnit) -> None:
        self._values["windspeed_unit"] = unit.value

    @property
    def sort_orientation(self) -> SortKey:
        return self._enum_value("sort_orientation", SortKey)

    @sort_orientation.setter
    def sort_orientation(self, key: SortKey) -> None:
        self._values["sort_orientation"] = key.value

    @property
    def language(self) -> str:
        return self._values.get("language") or DEFAULT_PREFERENCES["language"]

    @language.setter
    def language(self, language: str) -> None:
        self._values["language"] = language

    @property
    def is_initial_launch(self) -> bool:
        return bool(self._values.get("is_initial_launch", True))

    def mark_launched(self) -> None:
        self._values["is_initial_launch"] = False

    @property
    def last_refresh(self) -> Optional[datetime]:
        raw = self._values.get("last_refresh")
        if not raw:
            return None
        try:
            return isoparse(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable last refresh timestamp {raw!r}")
            return None

    @last_refresh.setter
    def last_refresh(self, moment: Optional[datetime]) -> None:
        self._values["last_refresh"] = moment.isoformat() if moment else None

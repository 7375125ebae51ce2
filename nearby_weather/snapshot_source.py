"""
File-backed weather fetcher.

Reads OpenWeatherMap-shaped current weather documents from a JSON file that an
external job keeps up to date:

    {
        "bookmarked": {...} | null,
        "nearby": [{...}, ...] | null
    }

A null entry means the data could not be obtained and is reported as a failed
load; an empty nearby list is a successful load with no records.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles

from nearby_weather.const import Config
from nearby_weather.weather_data_manager import WeatherSnapshot
from nearby_weather.weather_models import Coordinate, LoadResult, WeatherRecord

logger = logging.getLogger(__name__)


def parse_record(document: Dict[str, Any]) -> WeatherRecord:
    """Build a record from one current weather document. Raises KeyError on missing fields."""
    return WeatherRecord(
        identifier=int(document["id"]),
        city_name=document["name"],
        coordinate=Coordinate(
            latitude=float(document["coord"]["lat"]),
            longitude=float(document["coord"]["lon"]),
        ),
        temperature_kelvin=float(document["main"]["temp"]),
        cloud_coverage=int(document.get("clouds", {}).get("all", 0)),
        humidity=int(document["main"]["humidity"]),
        windspeed=float(document.get("wind", {}).get("speed", 0.0)),
        condition_codes=[int(condition["id"]) for condition in document.get("weather", [])],
    )


def parse_snapshot(payload: Dict[str, Any]) -> WeatherSnapshot:
    bookmarked_doc: Optional[Dict[str, Any]] = payload.get("bookmarked")
    nearby_docs: Optional[List[Dict[str, Any]]] = payload.get("nearby")

    if bookmarked_doc is None:
        bookmarked = LoadResult.failed("bookmarked city unavailable")
    else:
        bookmarked = LoadResult.loaded(parse_record(bookmarked_doc))

    if nearby_docs is None:
        nearby = LoadResult.failed("nearby locations unavailable")
    else:
        nearby = LoadResult.loaded([parse_record(doc) for doc in nearby_docs])

    return WeatherSnapshot(bookmarked=bookmarked, nearby=nearby)


class SnapshotFileFetcher:
    """Async callable returning the snapshot currently stored on disk."""

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        self.file_path = Path(file_path or Config.WEATHER_SNAPSHOT_FILE)

    async def __call__(self) -> WeatherSnapshot:
        async with aiofiles.open(self.file_path, 'r', encoding='utf-8') as f:
            content = await f.read()
        payload = json.loads(content)
        if not isinstance(payload, dict):
            raise ValueError(f"Weather snapshot {self.file_path} does not hold an object")
        snapshot = parse_snapshot(payload)
        logger.debug(f"Read weather snapshot from {self.file_path}")
        return snapshot

"""In-memory owner of the shared weather collection."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from nearby_weather.const import APP_TZ
from nearby_weather.error_handler import ErrorHandler
from nearby_weather.event_system import EventBus, EventType
from nearby_weather.logger import general_logger
from nearby_weather.preferences import PreferencesManager
from nearby_weather.types import LocationSource
from nearby_weather.weather_models import (
    Coordinate, LoadResult, SortKey, WeatherRecord
)

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371000.0


@dataclass(frozen=True)
class WeatherSnapshot:
    """Everything a single fetch produced."""
    bookmarked: LoadResult[WeatherRecord]
    nearby: LoadResult[List[WeatherRecord]]


WeatherFetcher = Callable[[], Awaitable[WeatherSnapshot]]


def distance_in_meters(origin: Coordinate, destination: Coordinate) -> float:
    """Great-circle distance between two coordinates."""
    lat1, lon1 = math.radians(origin.latitude), math.radians(origin.longitude)
    lat2, lon2 = math.radians(destination.latitude), math.radians(destination.longitude)
    d_lat = lat2 - lat1
    d_lon = lon2 - lon1
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


class WeatherDataManager:
    """
    Shared weather collection consumed by the list and map presenters.

    Fetching is delegated to the injected fetcher. The manager keeps the
    results, applies the persisted sort orientation after every update and
    announces new data on the event bus.
    """

    def __init__(
        self,
        fetcher: WeatherFetcher,
        location_source: LocationSource,
        preferences: PreferencesManager,
        event_bus: EventBus,
    ) -> None:
        self.fetcher = fetcher
        self.location_source = location_source
        self.preferences = preferences
        self.event_bus = event_bus
        self._bookmarked: LoadResult[WeatherRecord] = LoadResult.not_loaded()
        self._nearby: LoadResult[List[WeatherRecord]] = LoadResult.not_loaded()

    def bookmarked_record(self) -> LoadResult[WeatherRecord]:
        return self._bookmarked

    def nearby_records(self) -> LoadResult[List[WeatherRecord]]:
        return self._nearby

    def lookup_record(self, identifier: int) -> Optional[WeatherRecord]:
        candidates: List[WeatherRecord] = []
        if self._bookmarked.is_loaded:
            candidates.append(self._bookmarked.data)
        if self._nearby.is_loaded:
            candidates.extend(self._nearby.data)
        return next((record for record in candidates if record.identifier == identifier), None)

    def set_weather_data(
        self,
        bookmarked: LoadResult[WeatherRecord],
        nearby: LoadResult[List[WeatherRecord]],
    ) -> None:
        """Replace both collections wholesale."""
        self._bookmarked = bookmarked
        if nearby.is_loaded:
            nearby = LoadResult.loaded(list(nearby.data))
        self._nearby = nearby

    def sort_nearby_records(self, key: SortKey) -> None:
        """Stable sort of the nearby collection; the orientation is remembered."""
        self.preferences.sort_orientation = key
        self._apply_sort(key)

    def _apply_sort(self, key: SortKey) -> None:
        if not self._nearby.is_loaded:
            return
        records = self._nearby.data

        if key == SortKey.NAME:
            records = sorted(records, key=lambda record: record.city_name.casefold())
        elif key == SortKey.TEMPERATURE:
            records = sorted(records, key=lambda record: record.temperature_kelvin, reverse=True)
        elif key == SortKey.DISTANCE:
            position = self.location_source.current_position
            if not self.location_source.permission_granted or position is None:
                logger.warning("Distance sort requested without a known position, order unchanged")
                return
            records = sorted(records, key=lambda record: distance_in_meters(position, record.coordinate))

        self._nearby = LoadResult.loaded(records)
        logger.debug(f"Nearby records sorted by {key.value}")

    async def update(self) -> None:
        """Fetch fresh data, keeping the previous data if the fetch fails."""
        try:
            snapshot = await self.fetcher()
        except Exception as e:
            std_error = await ErrorHandler.handle_error(
                e,
                context_data={"operation": "weather_update"},
                event_bus=self.event_bus,
                source="weather_data_manager",
            )
            if not self._bookmarked.is_loaded:
                self._bookmarked = LoadResult.failed(std_error.message)
            if not self._nearby.is_loaded:
                self._nearby = LoadResult.failed(std_error.message)
            return

        self.set_weather_data(snapshot.bookmarked, snapshot.nearby)
        self._apply_sort(self.preferences.sort_orientation)

        self.preferences.last_refresh = datetime.now(APP_TZ)
        try:
            await self.preferences.save()
        except OSError as e:
            logger.warning(f"Could not persist preferences after refresh: {e}")

        nearby_count = len(self._nearby.data) if self._nearby.is_loaded else 0
        general_logger.info(
            f"Weather data updated: bookmarked={self._bookmarked.status.value}, "
            f"nearby={self._nearby.status.value} ({nearby_count} records)"
        )
        await self.event_bus.publish_event(
            EventType.WEATHER_DATA_UPDATED,
            source="weather_data_manager",
            data={"nearby_count": nearby_count},
        )

"""
Type definitions for the collaborators the presenters depend on.

The presenters never reach for shared instances; every collaborator below is
injected at construction so tests can substitute fakes.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable

from nearby_weather.weather_models import (
    Coordinate, LoadResult, SortKey, TemperatureUnit, WeatherRecord, WindspeedUnit
)

# Basic type aliases
RecordId = int
ChatId = int


@runtime_checkable
class WeatherDataSource(Protocol):
    """Owner of the shared weather collection."""

    def bookmarked_record(self) -> LoadResult[WeatherRecord]:
        ...

    def nearby_records(self) -> LoadResult[List[WeatherRecord]]:
        ...

    def lookup_record(self, identifier: RecordId) -> Optional[WeatherRecord]:
        ...

    def sort_nearby_records(self, key: SortKey) -> None:
        ...

    async def update(self) -> None:
        ...


@runtime_checkable
class LocationSource(Protocol):
    @property
    def permission_granted(self) -> bool:
        ...

    @property
    def current_position(self) -> Optional[Coordinate]:
        ...


@runtime_checkable
class UnitPreferences(Protocol):
    @property
    def temperature_unit(self) -> TemperatureUnit:
        ...

    @property
    def windspeed_unit(self) -> WindspeedUnit:
        ...


class ListView(Protocol):
    """Surface the list presenter renders into."""

    async def reload(self, layout: Any) -> None:
        ...


class MapView(Protocol):
    """Surface the map presenter renders into."""

    @property
    def annotations(self) -> List[Any]:
        ...

    async def remove_annotations(self, annotations: List[Any]) -> None:
        ...

    async def add_annotations(self, annotations: List[Any]) -> None:
        ...

    async def set_region(self, region: Any) -> None:
        ...

    def dequeue_reusable_annotation_view(self, identifier: str) -> Optional[Any]:
        ...


class ActivityIndicator(Protocol):
    def begin(self) -> None:
        ...

    def end(self) -> None:
        ...


class Navigator(Protocol):
    async def show_weather_detail(self, record: WeatherRecord) -> None:
        ...

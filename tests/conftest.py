"""
Pytest configuration and shared fixtures for the NearbyWeather test suite.
"""

import os
import tempfile

# Keep test runs from writing log files into the working directory
os.environ.setdefault("NEARBY_WEATHER_LOG_DIR", tempfile.mkdtemp(prefix="nearby_weather_logs_"))

import pytest
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

from nearby_weather.event_system import EventBus
from nearby_weather.localization import Localizer
from nearby_weather.preferences import PreferencesManager
from nearby_weather.weather_models import Coordinate, LoadResult, SortKey, WeatherRecord


# ============================================================================
# Fakes
# ============================================================================

class FakeDataSource:
    """In-memory weather collection recording the calls made to it."""

    def __init__(self) -> None:
        self.bookmarked: LoadResult = LoadResult.not_loaded()
        self.nearby: LoadResult = LoadResult.not_loaded()
        self.sort_calls: List[SortKey] = []
        self.update = AsyncMock()

    def bookmarked_record(self) -> LoadResult:
        return self.bookmarked

    def nearby_records(self) -> LoadResult:
        return self.nearby

    def lookup_record(self, identifier: int) -> Optional[WeatherRecord]:
        records = []
        if self.bookmarked.is_loaded:
            records.append(self.bookmarked.data)
        if self.nearby.is_loaded:
            records.extend(self.nearby.data)
        return next((r for r in records if r.identifier == identifier), None)

    def sort_nearby_records(self, key: SortKey) -> None:
        self.sort_calls.append(key)


class FakeLocationSource:
    def __init__(self, permission_granted: bool = False, current_position: Optional[Coordinate] = None) -> None:
        self.permission_granted = permission_granted
        self.current_position = current_position


class RecordingListView:
    def __init__(self) -> None:
        self.layouts = []

    async def reload(self, layout) -> None:
        self.layouts.append(layout)

    @property
    def last_layout(self):
        return self.layouts[-1] if self.layouts else None


class RecordingMapView:
    """Map view that logs the order of its mutations."""

    def __init__(self) -> None:
        self.annotations = []
        self.calls = []
        self.regions = []
        self.reusable = {}

    async def remove_annotations(self, annotations) -> None:
        self.calls.append(("remove", list(annotations)))
        self.annotations = [a for a in self.annotations if a not in annotations]

    async def add_annotations(self, annotations) -> None:
        self.calls.append(("add", list(annotations)))
        self.annotations = self.annotations + list(annotations)

    async def set_region(self, region) -> None:
        self.calls.append(("region", region))
        self.regions.append(region)

    def dequeue_reusable_annotation_view(self, identifier: str):
        return self.reusable.pop(identifier, None)


class CountingIndicator:
    def __init__(self) -> None:
        self.begin_count = 0
        self.end_count = 0

    def begin(self) -> None:
        self.begin_count += 1

    def end(self) -> None:
        self.end_count += 1


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def make_record():
    """Factory for weather records with sensible defaults."""
    def _make(
        identifier: int = 1,
        city_name: str = "Berlin",
        temperature_kelvin: float = 290.0,
        latitude: float = 52.52,
        longitude: float = 13.405,
        condition_codes: Optional[List[int]] = None,
        cloud_coverage: int = 20,
        humidity: int = 60,
        windspeed: float = 3.0,
    ) -> WeatherRecord:
        return WeatherRecord(
            identifier=identifier,
            city_name=city_name,
            coordinate=Coordinate(latitude=latitude, longitude=longitude),
            temperature_kelvin=temperature_kelvin,
            cloud_coverage=cloud_coverage,
            humidity=humidity,
            windspeed=windspeed,
            condition_codes=[800] if condition_codes is None else condition_codes,
        )
    return _make


@pytest.fixture
def data_source():
    return FakeDataSource()


@pytest.fixture
def location_source():
    return FakeLocationSource()


@pytest.fixture
def granted_location_source():
    return FakeLocationSource(
        permission_granted=True,
        current_position=Coordinate(latitude=52.52, longitude=13.405),
    )


@pytest.fixture
def preferences(tmp_path):
    return PreferencesManager(tmp_path / "preferences.json")


@pytest.fixture
def list_view():
    return RecordingListView()


@pytest.fixture
def map_view():
    return RecordingMapView()


@pytest.fixture
def indicator():
    return CountingIndicator()


@pytest.fixture
def navigator():
    mock_navigator = MagicMock()
    mock_navigator.show_weather_detail = AsyncMock()
    return mock_navigator


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def localizer():
    return Localizer('en')

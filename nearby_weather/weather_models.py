"""Weather data structures shared by the presenters and the data manager."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar('T')


class SortKey(Enum):
    """Orientations the nearby collection can be sorted by."""
    NAME = "name"
    TEMPERATURE = "temperature"
    DISTANCE = "distance"


class TemperatureUnit(Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"
    KELVIN = "kelvin"


class WindspeedUnit(Enum):
    KILOMETRES = "kilometres"
    MILES = "miles"


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherRecord:
    """Weather information for one city as delivered by the data source."""
    identifier: int
    city_name: str
    coordinate: Coordinate
    temperature_kelvin: float
    cloud_coverage: int
    humidity: int
    windspeed: float
    condition_codes: List[int] = field(default_factory=list)

    @property
    def primary_condition_code(self) -> Optional[int]:
        return self.condition_codes[0] if self.condition_codes else None


class LoadStatus(Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """
    Tagged result of a fetch.

    Distinguishes data that was never fetched from a fetch that failed and
    from a fetch that succeeded, even when the successful payload is empty.
    """
    status: LoadStatus
    data: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def not_loaded(cls) -> 'LoadResult[T]':
        return cls(status=LoadStatus.NOT_LOADED)

    @classmethod
    def loaded(cls, data: T) -> 'LoadResult[T]':
        return cls(status=LoadStatus.LOADED, data=data)

    @classmethod
    def failed(cls, reason: str) -> 'LoadResult[T]':
        return cls(status=LoadStatus.FAILED, reason=reason)

    @property
    def is_loaded(self) -> bool:
        return self.status == LoadStatus.LOADED and self.data is not None

    @property
    def is_failed(self) -> bool:
        return self.status == LoadStatus.FAILED

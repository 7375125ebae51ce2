"""Sort chooser for the nearby locations list."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from nearby_weather.localization import Localizer
from nearby_weather.types import LocationSource, WeatherDataSource
from nearby_weather.weather_models import SortKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SortOption:
    """One entry of the chooser; the cancel entry has no key."""
    title: str
    key: Optional[SortKey] = None

    @property
    def is_cancel(self) -> bool:
        return self.key is None


class SortCoordinator:
    """
    Offers the sort orientations and delegates the reordering to the data source.

    The coordinator keeps no record of the active orientation.
    """

    def __init__(
        self,
        data_source: WeatherDataSource,
        location_source: LocationSource,
        on_sorted: Callable[[], Awaitable[None]],
        localizer: Optional[Localizer] = None,
    ) -> None:
        self.data_source = data_source
        self.location_source = location_source
        self.on_sorted = on_sorted
        self.localizer = localizer or Localizer()

    def available_keys(self) -> List[SortKey]:
        keys = [SortKey.NAME, SortKey.TEMPERATURE]
        if self.location_source.permission_granted:
            keys.append(SortKey.DISTANCE)
        return keys

    def sort_options(self) -> List[SortOption]:
        options = [SortOption(title=self.localizer.get('sort.cancel'))]
        options.extend(
            SortOption(title=self.localizer.get(f'sort.{key.value}'), key=key)
            for key in self.available_keys()
        )
        return options

    async def choose(self, key: Optional[SortKey]) -> bool:
        """Apply a choice. Returns False when nothing was sorted."""
        if key is None:
            return False
        if key not in self.available_keys():
            logger.warning(f"Sort by {key.value} is not available, ignoring the choice")
            return False

        self.data_source.sort_nearby_records(key)
        await self.on_sorted()
        return True

"""
List presentation of the weather collection.

Two sections are shown once any data exists: the bookmarked location (always
exactly one row) and the nearby locations (one row per record, or a single
alert row when the collection could not be loaded). Without any data a single
"no data" alert row is shown and no section headers.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from nearby_weather.const import APP_TITLE, APP_TZ, Weather
from nearby_weather.conversion import ConversionService
from nearby_weather.event_system import Event, EventBus, EventObserver, EventType
from nearby_weather.localization import Localizer
from nearby_weather.preferences import PreferencesManager
from nearby_weather.refresh_coordinator import RefreshCoordinator
from nearby_weather.sort_coordinator import SortCoordinator
from nearby_weather.types import (
    ActivityIndicator, ListView, LocationSource, Navigator, WeatherDataSource
)
from nearby_weather.weather_models import SortKey, WeatherRecord

logger = logging.getLogger(__name__)

BOOKMARKED_SECTION = 0
NEARBY_SECTION = 1


@dataclass(frozen=True)
class WeatherDataCell:
    identifier: int
    condition_glyph: Optional[str]
    city_name: str
    temperature: str
    cloud_coverage: str
    humidity: str
    windspeed: str


@dataclass(frozen=True)
class AlertCell:
    notice: str
    animated: bool = True


Cell = Union[WeatherDataCell, AlertCell]


@dataclass(frozen=True)
class ListSection:
    header: Optional[str]
    rows: List[Cell]


@dataclass(frozen=True)
class ListLayout:
    title: str
    subtitle: Optional[str]
    sections: List[ListSection]
    sort_enabled: bool


class WeatherListPresenter:
    """Table data source and delegate for the weather list."""

    def __init__(
        self,
        view: ListView,
        data_source: WeatherDataSource,
        location_source: LocationSource,
        preferences: PreferencesManager,
        navigator: Navigator,
        indicator: ActivityIndicator,
        event_bus: EventBus,
        conversion: Optional[ConversionService] = None,
        localizer: Optional[Localizer] = None,
    ) -> None:
        self.view = view
        self.data_source = data_source
        self.location_source = location_source
        self.preferences = preferences
        self.navigator = navigator
        self.event_bus = event_bus
        self.conversion = conversion or ConversionService()
        self.localizer = localizer or Localizer(preferences.language)
        self.sort_coordinator = SortCoordinator(
            data_source, location_source, self.reload, self.localizer
        )
        self.refresh_coordinator = RefreshCoordinator(
            data_source, indicator, self.reload, event_bus
        )
        self.indicator = indicator
        self._observers: List[EventObserver] = []

    # --- State ---

    def has_bookmarked_data(self) -> bool:
        return self.data_source.bookmarked_record().is_loaded

    def has_nearby_data(self) -> bool:
        nearby = self.data_source.nearby_records()
        return nearby.is_loaded and len(nearby.data) > 0

    def has_any_data(self) -> bool:
        return self.has_bookmarked_data() or self.has_nearby_data()

    @property
    def sort_enabled(self) -> bool:
        return self.location_source.permission_granted

    # --- Data source callbacks ---

    def number_of_sections(self) -> int:
        return 2 if self.has_any_data() else 1

    def number_of_rows(self, section: int) -> int:
        if not self.has_any_data():
            return 1
        if section == BOOKMARKED_SECTION:
            return 1
        if section == NEARBY_SECTION:
            nearby = self.data_source.nearby_records()
            return len(nearby.data) if nearby.is_loaded else 1
        return 0

    def title_for_header(self, section: int) -> Optional[str]:
        if not self.has_any_data():
            return None
        if section == BOOKMARKED_SECTION:
            return self.localizer.get('list.section_header.bookmarked')
        if section == NEARBY_SECTION:
            return self.localizer.get('list.section_header.nearby')
        return None

    def cell_for_row(self, section: int, row: int) -> Cell:
        if not self.has_any_data():
            return AlertCell(notice=self.localizer.get('list.alert.no_data'))

        if section == BOOKMARKED_SECTION:
            bookmarked = self.data_source.bookmarked_record()
            if bookmarked.is_loaded:
                return self.make_data_cell(bookmarked.data)
            return AlertCell(notice=self.localizer.get('list.alert.bookmarked_city_invalid'))

        if section == NEARBY_SECTION:
            nearby = self.data_source.nearby_records()
            if nearby.is_loaded:
                return self.make_data_cell(nearby.data[row])
            return AlertCell(notice=self.localizer.get('list.alert.location_unavailable'))

        raise IndexError(f"Section {section} does not exist")

    def make_data_cell(self, record: WeatherRecord) -> WeatherDataCell:
        temperature = self.conversion.temperature_descriptor(
            self.preferences.temperature_unit, record.temperature_kelvin
        )
        windspeed = self.conversion.windspeed_descriptor(
            self.preferences.windspeed_unit, record.windspeed
        )
        return WeatherDataCell(
            identifier=record.identifier,
            condition_glyph=self.conversion.condition_glyph(record.primary_condition_code),
            city_name=record.city_name,
            temperature=f"{Weather.TEMPERATURE_GLYPH} {temperature}",
            cloud_coverage=f"{Weather.CLOUD_COVERAGE_GLYPH} {record.cloud_coverage}%",
            humidity=f"{Weather.HUMIDITY_GLYPH} {record.humidity}%",
            windspeed=f"{Weather.WINDSPEED_GLYPH} {windspeed}",
        )

    def navigation_subtitle(self) -> Optional[str]:
        last_refresh = self.preferences.last_refresh
        if last_refresh is None:
            return None
        if last_refresh.tzinfo is not None:
            last_refresh = last_refresh.astimezone(APP_TZ)
        return self.localizer.get('list.last_refresh', date=last_refresh.strftime('%Y-%m-%d %H:%M'))

    def build_layout(self) -> ListLayout:
        sections = []
        for section in range(self.number_of_sections()):
            rows = [self.cell_for_row(section, row) for row in range(self.number_of_rows(section))]
            sections.append(ListSection(header=self.title_for_header(section), rows=rows))
        return ListLayout(
            title=APP_TITLE,
            subtitle=self.navigation_subtitle(),
            sections=sections,
            sort_enabled=self.sort_enabled,
        )

    async def reload(self) -> None:
        await self.view.reload(self.build_layout())

    # --- Delegate callbacks ---

    async def did_select_row(self, section: int, row: int) -> bool:
        """Navigate to the detail of a data row. Alert rows do nothing."""
        cell = self.cell_for_row(section, row)
        if not isinstance(cell, WeatherDataCell):
            return False
        return await self.did_select_record(cell.identifier)

    async def did_select_record(self, identifier: int) -> bool:
        """Navigate to the detail of a record shown earlier, looked up by its identifier."""
        record = self.data_source.lookup_record(identifier)
        if record is None:
            logger.warning(f"Weather record {identifier} disappeared before it could be shown")
            return False

        await self.navigator.show_weather_detail(record)
        return True

    # --- Lifecycle ---

    async def will_appear(self) -> None:
        if not self._observers:
            self._observers = [
                self.event_bus.subscribe_to_event(EventType.WEATHER_DATA_UPDATED, self._on_weather_data_updated),
                self.event_bus.subscribe_to_event(EventType.APP_BECAME_ACTIVE, self._on_configuration_changed),
                self.event_bus.subscribe_to_event(EventType.LOCATION_PERMISSION_CHANGED, self._on_configuration_changed),
            ]
        await self.reload()

    async def did_appear(self) -> None:
        if self.preferences.is_initial_launch:
            self.preferences.mark_launched()
            await self._save_preferences("initial launch flag")
            await self.refresh_coordinator.refresh()

    async def will_disappear(self) -> None:
        self.indicator.end()
        for observer in self._observers:
            self.event_bus.unsubscribe(observer)
        self._observers = []

    async def _on_weather_data_updated(self, event: Event) -> None:
        await self.reload()

    async def _on_configuration_changed(self, event: Event) -> None:
        logger.debug(f"Re-rendering after {event.event_type.value}")
        await self.reload()

    # --- User actions ---

    async def refresh(self) -> None:
        await self.refresh_coordinator.refresh()

    async def sort(self, key: Optional[SortKey]) -> bool:
        """Apply a sort choice and persist the orientation it chose."""
        if not await self.sort_coordinator.choose(key):
            return False
        await self._save_preferences("sort orientation")
        return True

    async def _save_preferences(self, what: str) -> None:
        try:
            await self.preferences.save()
        except OSError as e:
            logger.warning(f"Could not persist {what}: {e}")

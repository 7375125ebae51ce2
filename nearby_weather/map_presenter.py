"""
Map presentation of weather-annotated locations.

Projects the bookmarked and nearby weather records into map annotations and
decides the initial viewport from the device position.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from nearby_weather.const import MapDefaults
from nearby_weather.conversion import ConversionService
from nearby_weather.localization import Localizer
from nearby_weather.types import LocationSource, MapView, UnitPreferences, WeatherDataSource
from nearby_weather.weather_models import Coordinate, TemperatureUnit, WeatherRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationViewModel:
    title: str
    subtitle: str
    coordinate: Coordinate
    identifier: Optional[int] = None


@dataclass(frozen=True)
class MapRegion:
    center: Coordinate
    latitudinal_meters: float
    longitudinal_meters: float
    animated: bool = True


@dataclass
class AnnotationView:
    """Pin rendered for an annotation; reused between annotations."""
    annotation: AnnotationViewModel
    reuse_identifier: str
    can_show_callout: bool = True
    callout_offset: Tuple[int, int] = MapDefaults.CALLOUT_OFFSET


def make_annotation(
    record: WeatherRecord,
    conversion: ConversionService,
    temperature_unit: TemperatureUnit,
) -> AnnotationViewModel:
    glyph = conversion.condition_glyph(record.primary_condition_code)
    temperature = conversion.temperature_descriptor(temperature_unit, record.temperature_kelvin)
    return AnnotationViewModel(
        title=record.city_name,
        subtitle=f"{glyph} {temperature}" if glyph else temperature,
        coordinate=record.coordinate,
        identifier=record.identifier,
    )


def project_annotations(
    bookmarked: Optional[Sequence[WeatherRecord]],
    nearby: Optional[Sequence[WeatherRecord]],
    conversion: ConversionService,
    temperature_unit: TemperatureUnit,
) -> List[AnnotationViewModel]:
    """Bookmarked annotations first, then nearby ones, preserving order."""
    records = list(bookmarked or []) + list(nearby or [])
    return [make_annotation(record, conversion, temperature_unit) for record in records]


def select_map_region(
    location_source: LocationSource,
    span_meters: float = MapDefaults.REGION_SPAN_METERS,
) -> Optional[MapRegion]:
    """Region centred on the device, or None to leave the viewport untouched."""
    if not location_source.permission_granted:
        return None
    position = location_source.current_position
    if position is None:
        return None
    return MapRegion(
        center=position,
        latitudinal_meters=span_meters,
        longitudinal_meters=span_meters,
        animated=True,
    )


class NearbyLocationsMapPresenter:
    """Drives a MapView from the shared weather collection."""

    def __init__(
        self,
        view: MapView,
        data_source: WeatherDataSource,
        location_source: LocationSource,
        preferences: UnitPreferences,
        conversion: Optional[ConversionService] = None,
        localizer: Optional[Localizer] = None,
    ) -> None:
        self.view = view
        self.data_source = data_source
        self.location_source = location_source
        self.preferences = preferences
        self.conversion = conversion or ConversionService()
        self.localizer = localizer or Localizer()
        self.annotations: List[AnnotationViewModel] = []

    @property
    def title(self) -> str:
        return self.localizer.get('map.title')

    def build_annotations(self) -> List[AnnotationViewModel]:
        bookmarked = self.data_source.bookmarked_record()
        nearby = self.data_source.nearby_records()
        return project_annotations(
            [bookmarked.data] if bookmarked.is_loaded else None,
            nearby.data if nearby.is_loaded else None,
            self.conversion,
            self.preferences.temperature_unit,
        )

    async def present(self) -> None:
        """Replace every annotation on the map, then recentre if possible."""
        self.annotations = self.build_annotations()

        stale = list(self.view.annotations)
        if stale:
            await self.view.remove_annotations(stale)
        await self.view.add_annotations(self.annotations)
        logger.debug(f"Presented {len(self.annotations)} annotations, removed {len(stale)}")

        region = select_map_region(self.location_source)
        if region is not None:
            await self.view.set_region(region)

    def annotation_view_for(self, annotation: Any) -> Optional[AnnotationView]:
        if not isinstance(annotation, AnnotationViewModel):
            return None

        identifier = MapDefaults.ANNOTATION_REUSE_IDENTIFIER
        dequeued = self.view.dequeue_reusable_annotation_view(identifier)
        if isinstance(dequeued, AnnotationView):
            dequeued.annotation = annotation
            return dequeued
        return AnnotationView(annotation=annotation, reuse_identifier=identifier)

"""
Tests for the weather list presenter.

Covers section and row layout for every combination of bookmarked and nearby
data, the inline alert rows, selection, and the lifecycle hooks.
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, patch

from nearby_weather.event_system import EventType
from nearby_weather.list_presenter import AlertCell, WeatherDataCell, WeatherListPresenter
from nearby_weather.weather_models import LoadResult, SortKey


@pytest.fixture
def presenter(list_view, data_source, location_source, preferences, navigator, indicator, event_bus, localizer):
    return WeatherListPresenter(
        view=list_view,
        data_source=data_source,
        location_source=location_source,
        preferences=preferences,
        navigator=navigator,
        indicator=indicator,
        event_bus=event_bus,
        localizer=localizer,
    )


class TestNoData:
    """Nothing was ever loaded or every fetch failed."""

    @pytest.mark.parametrize("bookmarked,nearby", [
        (LoadResult.not_loaded(), LoadResult.not_loaded()),
        (LoadResult.failed("offline"), LoadResult.failed("offline")),
        (LoadResult.not_loaded(), LoadResult.loaded([])),
    ])
    def test_single_alert_row_without_headers(self, presenter, data_source, bookmarked, nearby):
        data_source.bookmarked = bookmarked
        data_source.nearby = nearby

        assert presenter.number_of_sections() == 1
        assert presenter.number_of_rows(0) == 1
        assert presenter.title_for_header(0) is None

        cell = presenter.cell_for_row(0, 0)
        assert isinstance(cell, AlertCell)
        assert cell.notice.startswith("No weather data available")
        assert cell.animated is True

    @pytest.mark.asyncio
    async def test_selecting_alert_row_does_nothing(self, presenter, navigator):
        assert await presenter.did_select_row(0, 0) is False
        navigator.show_weather_detail.assert_not_awaited()


class TestBookmarkedAndNearby:

    def test_berlin_with_empty_nearby_list_has_zero_nearby_rows(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record(1, "Berlin", 290.0))
        data_source.nearby = LoadResult.loaded([])

        assert presenter.number_of_sections() == 2
        assert presenter.number_of_rows(0) == 1
        assert presenter.number_of_rows(1) == 0

        cell = presenter.cell_for_row(0, 0)
        assert isinstance(cell, WeatherDataCell)
        assert cell.city_name == "Berlin"
        assert cell.temperature == "🌡 16.85°C"

    @pytest.mark.parametrize("nearby", [LoadResult.not_loaded(), LoadResult.failed("no position")])
    def test_berlin_with_absent_nearby_shows_location_alert(self, presenter, data_source, make_record, nearby):
        data_source.bookmarked = LoadResult.loaded(make_record(1, "Berlin", 290.0))
        data_source.nearby = nearby

        assert presenter.number_of_sections() == 2
        assert presenter.number_of_rows(1) == 1
        cell = presenter.cell_for_row(1, 0)
        assert isinstance(cell, AlertCell)
        assert "location is unavailable" in cell.notice

    def test_invalid_bookmark_with_nearby_records(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.failed("unknown city")
        data_source.nearby = LoadResult.loaded([make_record(2, "Potsdam"), make_record(3, "Spandau")])

        assert presenter.number_of_sections() == 2
        assert presenter.number_of_rows(0) == 1
        assert presenter.number_of_rows(1) == 2

        bookmark_cell = presenter.cell_for_row(0, 0)
        assert isinstance(bookmark_cell, AlertCell)
        assert "bookmarked city is invalid" in bookmark_cell.notice
        assert [presenter.cell_for_row(1, row).city_name for row in range(2)] == ["Potsdam", "Spandau"]

    def test_section_headers(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record())
        data_source.nearby = LoadResult.loaded([make_record(2, "Potsdam")])

        assert presenter.title_for_header(0) == "Bookmarked Location"
        assert presenter.title_for_header(1) == "Nearby Locations"

    def test_data_cell_content(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.loaded(
            make_record(1, "Berlin", 290.0, condition_codes=[500], cloud_coverage=75, humidity=81, windspeed=5.0)
        )

        cell = presenter.cell_for_row(0, 0)

        assert cell.condition_glyph == "🌧"
        assert cell.cloud_coverage == "☁️ 75%"
        assert cell.humidity == "💧 81%"
        assert cell.windspeed == "🎏 18.00 km/h"

    def test_unknown_condition_code_has_no_glyph(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record(condition_codes=[42]))
        assert presenter.cell_for_row(0, 0).condition_glyph is None

    def test_unknown_section_raises(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record())
        with pytest.raises(IndexError):
            presenter.cell_for_row(5, 0)


class TestSelection:

    @pytest.mark.asyncio
    async def test_selecting_data_row_navigates(self, presenter, data_source, navigator, make_record):
        potsdam = make_record(2, "Potsdam")
        data_source.bookmarked = LoadResult.loaded(make_record())
        data_source.nearby = LoadResult.loaded([potsdam])

        assert await presenter.did_select_row(1, 0) is True
        navigator.show_weather_detail.assert_awaited_once_with(potsdam)

    @pytest.mark.asyncio
    async def test_selecting_location_alert_does_nothing(self, presenter, data_source, navigator, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record())
        data_source.nearby = LoadResult.failed("no position")

        assert await presenter.did_select_row(1, 0) is False
        navigator.show_weather_detail.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_record_vanishing_before_lookup(self, presenter, data_source, navigator, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record())
        data_source.lookup_record = lambda identifier: None

        assert await presenter.did_select_row(0, 0) is False
        navigator.show_weather_detail.assert_not_awaited()


class TestLayout:

    def test_subtitle_absent_without_refresh(self, presenter):
        assert presenter.build_layout().subtitle is None

    def test_subtitle_shows_last_refresh(self, presenter, preferences):
        preferences.last_refresh = datetime(2024, 5, 1, 14, 30)
        layout = presenter.build_layout()
        assert layout.title == "NearbyWeather"
        assert layout.subtitle == "Last refresh: 2024-05-01 14:30"

    def test_sort_enabled_follows_permission(self, presenter, location_source):
        assert presenter.build_layout().sort_enabled is False
        location_source.permission_granted = True
        assert presenter.build_layout().sort_enabled is True

    def test_layout_sections_match_callbacks(self, presenter, data_source, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record())
        data_source.nearby = LoadResult.loaded([make_record(2, "Potsdam"), make_record(3, "Spandau")])

        layout = presenter.build_layout()

        assert [section.header for section in layout.sections] == ["Bookmarked Location", "Nearby Locations"]
        assert [len(section.rows) for section in layout.sections] == [1, 2]


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_will_appear_subscribes_once_and_reloads(self, presenter, event_bus, list_view):
        await presenter.will_appear()
        await presenter.will_appear()

        counts = event_bus.get_observer_count()
        assert counts[EventType.WEATHER_DATA_UPDATED.value] == 1
        assert counts[EventType.APP_BECAME_ACTIVE.value] == 1
        assert counts[EventType.LOCATION_PERMISSION_CHANGED.value] == 1
        assert len(list_view.layouts) == 2

    @pytest.mark.asyncio
    async def test_data_update_event_rerenders(self, presenter, event_bus, list_view):
        await presenter.will_appear()
        await event_bus.publish_event(EventType.WEATHER_DATA_UPDATED, source="test")
        assert len(list_view.layouts) == 2

    @pytest.mark.asyncio
    async def test_app_became_active_recomputes_sort_state(self, presenter, event_bus, list_view, location_source):
        await presenter.will_appear()
        location_source.permission_granted = True
        await event_bus.publish_event(EventType.APP_BECAME_ACTIVE, source="test")
        assert list_view.last_layout.sort_enabled is True

    @pytest.mark.asyncio
    async def test_will_disappear_unsubscribes_and_stops_indicator(self, presenter, event_bus, list_view, indicator):
        await presenter.will_appear()
        await presenter.will_disappear()

        await event_bus.publish_event(EventType.WEATHER_DATA_UPDATED, source="test")

        assert len(list_view.layouts) == 1
        assert indicator.end_count == 1
        assert event_bus.get_observer_count()[EventType.WEATHER_DATA_UPDATED.value] == 0

    @pytest.mark.asyncio
    async def test_initial_launch_triggers_refresh(self, presenter, preferences, data_source, tmp_path):
        await presenter.did_appear()

        data_source.update.assert_awaited_once()
        assert preferences.is_initial_launch is False
        assert (tmp_path / "preferences.json").exists()

    @pytest.mark.asyncio
    async def test_later_launch_does_not_refresh(self, presenter, preferences, data_source):
        preferences.mark_launched()
        await presenter.did_appear()
        data_source.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_initial_launch_refreshes_even_if_flag_cannot_be_saved(self, presenter, preferences, data_source):
        with patch.object(preferences, "save", new=AsyncMock(side_effect=OSError("read-only"))):
            await presenter.did_appear()
        data_source.update.assert_awaited_once()


class TestUserActions:

    @pytest.mark.asyncio
    async def test_refresh_rerenders_after_update(self, presenter, data_source, list_view, indicator):
        await presenter.refresh()

        data_source.update.assert_awaited_once()
        assert indicator.begin_count == indicator.end_count == 1
        assert len(list_view.layouts) == 1

    @pytest.mark.asyncio
    async def test_sort_delegates_and_rerenders(self, presenter, data_source, list_view):
        assert await presenter.sort(SortKey.TEMPERATURE) is True
        assert data_source.sort_calls == [SortKey.TEMPERATURE]
        assert len(list_view.layouts) == 1

    @pytest.mark.asyncio
    async def test_cancelled_sort_changes_nothing(self, presenter, data_source, list_view):
        assert await presenter.sort(None) is False
        assert data_source.sort_calls == []
        assert list_view.layouts == []

    @pytest.mark.asyncio
    async def test_sort_choice_is_persisted(self, presenter, tmp_path):
        assert await presenter.sort(SortKey.NAME) is True
        assert (tmp_path / "preferences.json").exists()

    @pytest.mark.asyncio
    async def test_sort_applies_even_if_orientation_cannot_be_saved(self, presenter, preferences, data_source):
        with patch.object(preferences, "save", new=AsyncMock(side_effect=OSError("read-only"))):
            assert await presenter.sort(SortKey.NAME) is True
        assert data_source.sort_calls == [SortKey.NAME]


class TestSelectByIdentifier:

    @pytest.mark.asyncio
    async def test_record_found_regardless_of_order(self, presenter, data_source, navigator, make_record):
        aachen = make_record(2, "Aachen", 285.0)
        zossen = make_record(3, "Zossen", 295.0)
        data_source.bookmarked = LoadResult.loaded(make_record())
        data_source.nearby = LoadResult.loaded([zossen, aachen])

        assert await presenter.did_select_record(2) is True
        navigator.show_weather_detail.assert_awaited_once_with(aachen)

    @pytest.mark.asyncio
    async def test_unknown_identifier_does_nothing(self, presenter, data_source, navigator, make_record):
        data_source.bookmarked = LoadResult.loaded(make_record())

        assert await presenter.did_select_record(-1) is False
        navigator.show_weather_detail.assert_not_awaited()

import pytest
from unittest.mock import AsyncMock

from nearby_weather.sort_coordinator import SortCoordinator
from nearby_weather.weather_models import SortKey


@pytest.fixture
def on_sorted():
    return AsyncMock()


def test_distance_hidden_without_permission(data_source, location_source, on_sorted):
    coordinator = SortCoordinator(data_source, location_source, on_sorted)
    assert coordinator.available_keys() == [SortKey.NAME, SortKey.TEMPERATURE]


def test_distance_offered_with_permission(data_source, granted_location_source, on_sorted):
    coordinator = SortCoordinator(data_source, granted_location_source, on_sorted)
    assert coordinator.available_keys() == [SortKey.NAME, SortKey.TEMPERATURE, SortKey.DISTANCE]


def test_options_start_with_cancel(data_source, granted_location_source, on_sorted, localizer):
    coordinator = SortCoordinator(data_source, granted_location_source, on_sorted, localizer)
    options = coordinator.sort_options()

    assert options[0].is_cancel
    assert options[0].title == "Cancel"
    assert [o.title for o in options[1:]] == ["Sort by name", "Sort by temperature", "Sort by distance"]


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [SortKey.NAME, SortKey.TEMPERATURE])
async def test_choice_sorts_then_notifies(data_source, location_source, on_sorted, key):
    coordinator = SortCoordinator(data_source, location_source, on_sorted)

    assert await coordinator.choose(key) is True
    assert data_source.sort_calls == [key]
    on_sorted.assert_awaited_once()


@pytest.mark.asyncio
async def test_cancel_does_nothing(data_source, location_source, on_sorted):
    coordinator = SortCoordinator(data_source, location_source, on_sorted)

    assert await coordinator.choose(None) is False
    assert data_source.sort_calls == []
    on_sorted.assert_not_awaited()


@pytest.mark.asyncio
async def test_distance_refused_without_permission(data_source, location_source, on_sorted):
    coordinator = SortCoordinator(data_source, location_source, on_sorted)

    assert await coordinator.choose(SortKey.DISTANCE) is False
    assert data_source.sort_calls == []


@pytest.mark.asyncio
async def test_permission_checked_at_choice_time(data_source, location_source, on_sorted):
    coordinator = SortCoordinator(data_source, location_source, on_sorted)
    location_source.permission_granted = True

    assert await coordinator.choose(SortKey.DISTANCE) is True
    assert data_source.sort_calls == [SortKey.DISTANCE]

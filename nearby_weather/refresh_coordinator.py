"""Pull-to-refresh / refresh button handling."""

import logging
from typing import Awaitable, Callable, Optional

from nearby_weather.error_handler import ErrorHandler
from nearby_weather.event_system import EventBus
from nearby_weather.types import ActivityIndicator, WeatherDataSource

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """
    Runs one weather update with the activity indicator shown.

    The completion callback runs whether the update succeeded or not. Triggers
    arriving while an update is running start another update.
    """

    def __init__(
        self,
        data_source: WeatherDataSource,
        indicator: ActivityIndicator,
        on_complete: Callable[[], Awaitable[None]],
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.data_source = data_source
        self.indicator = indicator
        self.on_complete = on_complete
        self.event_bus = event_bus
        self.in_flight = 0

    async def refresh(self) -> None:
        self.in_flight += 1
        logger.debug(f"Refresh started, {self.in_flight} in flight")
        self.indicator.begin()
        try:
            await self.data_source.update()
        except Exception as e:
            await ErrorHandler.handle_error(
                e,
                context_data={"operation": "refresh"},
                event_bus=self.event_bus,
                source="refresh_coordinator",
            )
        finally:
            self.in_flight -= 1
            self.indicator.end()
        await self.on_complete()

"""Holds the device location permission and last known position."""

import logging
from typing import Optional

from nearby_weather.event_system import EventBus, EventType
from nearby_weather.weather_models import Coordinate

logger = logging.getLogger(__name__)


class LocationService:
    """
    Last known position of the user.

    Permission counts as granted once a position has been shared and stays
    granted until it is revoked.
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus
        self._permission_granted = False
        self._current_position: Optional[Coordinate] = None

    @property
    def permission_granted(self) -> bool:
        return self._permission_granted

    @property
    def current_position(self) -> Optional[Coordinate]:
        return self._current_position

    async def update_position(self, latitude: float, longitude: float) -> None:
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            raise ValueError(f"Invalid coordinate ({latitude}, {longitude})")

        was_granted = self._permission_granted
        self._current_position = Coordinate(latitude=latitude, longitude=longitude)
        self._permission_granted = True
        logger.debug(f"Current position updated to {latitude:.4f}, {longitude:.4f}")

        if not was_granted:
            await self._publish_permission_change()

    async def revoke(self) -> None:
        if not self._permission_granted and self._current_position is None:
            return
        self._permission_granted = False
        self._current_position = None
        await self._publish_permission_change()

    async def _publish_permission_change(self) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish_event(
                EventType.LOCATION_PERMISSION_CHANGED,
                source="location_service",
                data={"permission_granted": self._permission_granted},
            )

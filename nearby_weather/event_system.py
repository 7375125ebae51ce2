"""
Event System with Observer Pattern

Presenters subscribe to the events they care about while they are on screen
and unsubscribe when they go away. Events are dispatched on the running event
loop, so observers run on the same single context as the rendering code.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events in the application."""
    WEATHER_DATA_UPDATED = "weather_data_updated"
    APP_BECAME_ACTIVE = "app_became_active"
    LOCATION_PERMISSION_CHANGED = "location_permission_changed"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class Event:
    """Base event class."""
    event_type: EventType
    source: str
    timestamp: datetime
    data: Dict[str, Any] = field(default_factory=dict)
    event_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.event_id is None:
            self.event_id = str(uuid.uuid4())


EventCallback = Callable[[Event], Union[None, Awaitable[None]]]


class EventObserver(ABC):
    """Abstract observer interface."""

    @abstractmethod
    async def handle_event(self, event: Event) -> None:
        """Handle an event."""
        pass

    @abstractmethod
    def get_interested_events(self) -> List[EventType]:
        """Get list of event types this observer is interested in."""
        pass


class AsyncEventObserver(EventObserver):
    """Observer wrapping a sync or async callback."""

    def __init__(self, callback: EventCallback, interested_events: List[EventType]):
        self.callback = callback
        self.interested_events = interested_events

    async def handle_event(self, event: Event) -> None:
        """Handle event using callback."""
        try:
            result = self.callback(event)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"Error in event observer callback for {event.event_type.value}: {e}")

    def get_interested_events(self) -> List[EventType]:
        return self.interested_events


class EventBus:
    """Central event bus for managing events and observers."""

    def __init__(self, max_history_size: int = 100) -> None:
        self._observers: Dict[EventType, List[EventObserver]] = {}
        self._global_observers: List[EventObserver] = []
        self._event_history: List[Event] = []
        self._max_history_size = max_history_size

    def subscribe(self, observer: EventObserver) -> EventObserver:
        """Subscribe an observer to events."""
        interested_events = observer.get_interested_events()

        if not interested_events:
            self._global_observers.append(observer)
        else:
            for event_type in interested_events:
                self._observers.setdefault(event_type, []).append(observer)

        logger.debug(f"Subscribed observer to events: {[e.value for e in interested_events] or 'ALL'}")
        return observer

    def subscribe_to_event(self, event_type: EventType, callback: EventCallback) -> EventObserver:
        """Subscribe a callback function to a specific event type."""
        return self.subscribe(AsyncEventObserver(callback, [event_type]))

    def unsubscribe(self, observer: EventObserver) -> None:
        """Unsubscribe an observer from every event it was registered for."""
        if observer in self._global_observers:
            self._global_observers.remove(observer)

        for observers in self._observers.values():
            if observer in observers:
                observers.remove(observer)

        logger.debug("Unsubscribed observer from events")

    async def publish(self, event: Event) -> None:
        """Deliver an event to every interested observer."""
        observers_to_notify = list(self._global_observers)
        observers_to_notify.extend(self._observers.get(event.event_type, []))

        for observer in observers_to_notify:
            await observer.handle_event(event)

        self._add_to_history(event)

    async def publish_event(
        self,
        event_type: EventType,
        source: str,
        data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Publish an event with the given parameters."""
        await self.publish(Event(
            event_type=event_type,
            source=source,
            timestamp=datetime.now(),
            data=data or {}
        ))

    def _add_to_history(self, event: Event) -> None:
        self._event_history.append(event)
        if len(self._event_history) > self._max_history_size:
            self._event_history = self._event_history[-self._max_history_size:]

    def get_event_history(self, event_type: Optional[EventType] = None, limit: int = 100) -> List[Event]:
        """Get event history, optionally filtered by event type."""
        if event_type:
            filtered_events = [e for e in self._event_history if e.event_type == event_type]
        else:
            filtered_events = self._event_history
        return filtered_events[-limit:]

    def get_observer_count(self) -> Dict[str, int]:
        """Get count of observers by event type."""
        counts = {"global": len(self._global_observers)}
        for event_type, observers in self._observers.items():
            counts[event_type.value] = len(observers)
        return counts

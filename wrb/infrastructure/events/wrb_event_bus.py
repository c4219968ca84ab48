"""
WRB Event Bus - Thread-safe event bus for run builder domain events.

Design Decisions:
- Thread-safe via RLock; subscribers may live in other threads
- Bounded history to prevent memory leaks
- Handlers run outside the lock; a failing handler is logged and skipped

Usage:
    bus = WRBEventBus()

    # Subscribe to events
    bus.subscribe(ConfigurationAppliedEvent, handle_applied)

    # Publish events
    bus.publish(ConfigurationAppliedEvent(changed=True))

    # Get history
    recent = bus.get_history(limit=10)
"""

from typing import Type, Callable, List, Dict, Optional, Any
from threading import RLock
from datetime import datetime
from collections import deque
import logging

from wrb.domain.events import WRBEvent

logger = logging.getLogger(__name__)


class WRBEventBus:
    """
    Thread-safe WRB Event Bus with bounded history.

    Thread Safety:
    - All public methods are thread-safe
    - Uses RLock to allow handlers to publish additional events
    """

    def __init__(self, max_history: int = 1000):
        """
        Initialize WRB Event Bus.

        Args:
            max_history: Maximum events to keep in history
        """
        self._lock = RLock()
        self._subscribers: Dict[Type, List[Callable[[Any], None]]] = {}
        self._event_history: deque = deque(maxlen=max_history)
        self._max_history = max_history

    # ═══════════════════════════════════════════════════════════════
    # Core Pub/Sub Operations
    # ═══════════════════════════════════════════════════════════════

    def subscribe(
        self,
        event_type: Type[WRBEvent],
        handler: Callable[[WRBEvent], None]
    ) -> None:
        """
        Subscribe to an event type.

        Subscribing to WRBEvent receives every event.

        Args:
            event_type: The event class to subscribe to
            handler: Callback function that receives the event
        """
        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)

    def unsubscribe(
        self,
        event_type: Type[WRBEvent],
        handler: Callable[[WRBEvent], None]
    ) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event class to unsubscribe from
            handler: The callback to remove
        """
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def publish(self, event: WRBEvent) -> None:
        """
        Publish an event to all subscribers.

        Events are stored in history and delivered synchronously to
        subscribers of the event's class and of its base classes.

        Args:
            event: The event instance to publish
        """
        with self._lock:
            self._event_history.append(event)
            handlers = []
            for event_type in type(event).__mro__:
                handlers.extend(self._subscribers.get(event_type, []))

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

    def publish_all(self, events: List[WRBEvent]) -> None:
        """Publish multiple events in order."""
        for event in events:
            self.publish(event)

    # ═══════════════════════════════════════════════════════════════
    # History and Query Operations
    # ═══════════════════════════════════════════════════════════════

    def get_event_history(
        self,
        event_type: Optional[Type[WRBEvent]] = None
    ) -> List[WRBEvent]:
        """
        Get event history, optionally filtered by type.

        Returns:
            List of events (oldest first)
        """
        with self._lock:
            events = list(self._event_history)

        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]

        return events

    def get_history(
        self,
        event_type: Optional[Type[WRBEvent]] = None,
        since: Optional[datetime] = None,
        limit: int = 100
    ) -> List[WRBEvent]:
        """
        Get event history with optional filtering.

        Args:
            event_type: Filter by event type
            since: Filter events after this timestamp
            limit: Maximum number of events to return

        Returns:
            List of events (most recent first)
        """
        events = self.get_event_history(event_type)

        if since is not None:
            events = [e for e in events if e.timestamp >= since]

        return list(reversed(events[-limit:]))

    def clear_history(self) -> None:
        """Clear all event history."""
        with self._lock:
            self._event_history.clear()

    def get_subscriber_count(
        self,
        event_type: Optional[Type[WRBEvent]] = None
    ) -> int:
        """Count subscribers for one event type, or in total if None."""
        with self._lock:
            if event_type is not None:
                return len(self._subscribers.get(event_type, []))
            return sum(len(h) for h in self._subscribers.values())


# ═══════════════════════════════════════════════════════════════
# Global Instance Management
# ═══════════════════════════════════════════════════════════════

_global_event_bus: Optional[WRBEventBus] = None


def get_event_bus() -> WRBEventBus:
    """
    Get global WRB event bus instance.

    Creates a new instance on first call, sized from the active config.
    """
    global _global_event_bus
    if _global_event_bus is None:
        from wrb.config import get_config
        _global_event_bus = WRBEventBus(max_history=get_config().event_history_size)
    return _global_event_bus


def set_event_bus(bus: WRBEventBus) -> None:
    """Set global WRB event bus instance (useful for testing)."""
    global _global_event_bus
    _global_event_bus = bus


def reset_event_bus() -> None:
    """Reset global event bus; the next get_event_bus() creates a new one."""
    global _global_event_bus
    _global_event_bus = None

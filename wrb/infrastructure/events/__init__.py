"""Event infrastructure."""

from .wrb_event_bus import (
    WRBEventBus,
    get_event_bus,
    set_event_bus,
    reset_event_bus,
)

__all__ = [
    "WRBEventBus",
    "get_event_bus",
    "set_event_bus",
    "reset_event_bus",
]

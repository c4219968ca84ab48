"""
Domain Events - Notifications about graph edits and layout.

Subscribers receive them through the WRB event bus.
"""

from .graph_events import (
    WRBEvent,
    PrimitiveNodeCreatedEvent,
    PrimitiveNodeRemovedEvent,
    PrimitiveValueUpdatedEvent,
    ConfigurationAppliedEvent,
    ConfigurationRejectedEvent,
    LayoutComputedEvent,
)

__all__ = [
    # Base
    "WRBEvent",
    # Primitive events
    "PrimitiveNodeCreatedEvent",
    "PrimitiveNodeRemovedEvent",
    "PrimitiveValueUpdatedEvent",
    # Apply events
    "ConfigurationAppliedEvent",
    "ConfigurationRejectedEvent",
    # Layout events
    "LayoutComputedEvent",
]

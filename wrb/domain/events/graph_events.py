"""
Graph-related domain events.

Published while a run configuration is applied to a workflow version and
while its layout is computed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid


@dataclass
class WRBEvent:
    """Base class for all run builder domain events."""
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__


@dataclass
class PrimitiveNodeCreatedEvent(WRBEvent):
    """Published when a primitive node is created and wired."""
    primitive_id: str = ""
    kind: str = ""
    value: Any = None
    node_id: Optional[str] = None
    param: Optional[str] = None
    pending_upload: bool = False


@dataclass
class PrimitiveNodeRemovedEvent(WRBEvent):
    """Published when a primitive node is deleted during rewiring."""
    primitive_id: str = ""
    node_id: Optional[str] = None
    param: Optional[str] = None


@dataclass
class PrimitiveValueUpdatedEvent(WRBEvent):
    """Published when an existing primitive gets a new value."""
    primitive_id: str = ""
    old_value: Any = None
    new_value: Any = None
    consumers: List[str] = field(default_factory=list)


@dataclass
class ConfigurationAppliedEvent(WRBEvent):
    """Published when a configuration apply completes."""
    changed: bool = False
    entries: int = 0
    created: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    pending_uploads: List[str] = field(default_factory=list)


@dataclass
class ConfigurationRejectedEvent(WRBEvent):
    """Published when a configuration entry fails and the apply is aborted."""
    key: Optional[str] = None
    error_code: str = ""
    error_message: str = ""


@dataclass
class LayoutComputedEvent(WRBEvent):
    """Published when heights and coordinates have been assigned."""
    node_count: int = 0
    root_count: int = 0
    max_height: int = 0
    heights: Dict[str, int] = field(default_factory=dict)

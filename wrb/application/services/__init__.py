"""Application Services - Graph editing, allocation and layout."""

from .node_resolver import NodeResolver
from .primitive_manager import PrimitiveNodeManager, NormalizedValue
from .connection_wirer import ConnectionWirer
from .config_applier import ConfigApplier, ApplyResult
from .machine_allocator import MachineAllocationValidator
from .tree_projector import TreeProjector
from .layout_engine import LayoutEngine

__all__ = [
    "NodeResolver",
    "PrimitiveNodeManager",
    "NormalizedValue",
    "ConnectionWirer",
    "ConfigApplier",
    "ApplyResult",
    "MachineAllocationValidator",
    "TreeProjector",
    "LayoutEngine",
]

"""
Workflow Run Builder (WRB) - Client-side core for remote workflow runs.

Turns a declarative run configuration into an edited workflow version graph
ready to be stored and executed remotely:
- Node Resolver: IDs, bare names and labels to canonical node IDs
- Config Applier: Idempotent rewiring of primitive input nodes
- Machine Allocation: Requests checked against fleet maxima
- Tree Projector / Layout Engine: Display forest, heights and coordinates

Architecture follows:
- Domain-Driven Design
- Interface-based abstractions
- Pure apply (clone, edit, discard on failure)
"""

import logging
from typing import Optional

__version__ = "0.1.0"

# Configuration
from wrb.config import WRBConfig, LayoutConfig, PrimitiveConfig, get_config

# Domain Models
from wrb.domain.models import (
    WorkflowVersionGraph,
    Node,
    PrimitiveNode,
    Connection,
    NodeKind,
    PrimitiveKind,
    Machines,
    MachineAllocation,
    RunConfiguration,
    Forest,
    TreeNode,
    SubJob,
    WRBError,
)

# Application Services
from wrb.application.services import (
    NodeResolver,
    ConfigApplier,
    ApplyResult,
    MachineAllocationValidator,
    TreeProjector,
    LayoutEngine,
)

# SDK
from wrb.sdk import RunBuilder, PreparedRun


def configure_logging(config: Optional[WRBConfig] = None) -> logging.Logger:
    """
    Apply the configured log level to the `wrb` logger.

    Args:
        config: Configuration to use (global config if omitted)

    Returns:
        The `wrb` logger
    """
    config = config or get_config()
    logger = logging.getLogger("wrb")
    logger.setLevel(config.log_level.upper())
    return logger


__all__ = [
    # Version
    "__version__",
    # Configuration
    "WRBConfig",
    "LayoutConfig",
    "PrimitiveConfig",
    "configure_logging",
    # Domain Models
    "WorkflowVersionGraph",
    "Node",
    "PrimitiveNode",
    "Connection",
    "NodeKind",
    "PrimitiveKind",
    "Machines",
    "MachineAllocation",
    "RunConfiguration",
    "Forest",
    "TreeNode",
    "SubJob",
    "WRBError",
    # Application Services
    "NodeResolver",
    "ConfigApplier",
    "ApplyResult",
    "MachineAllocationValidator",
    "TreeProjector",
    "LayoutEngine",
    # SDK
    "RunBuilder",
    "PreparedRun",
]

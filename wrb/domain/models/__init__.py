"""Domain Models - Entities, Value Objects, and Aggregates."""

from .endpoints import SourceEndpoint, DestinationEndpoint, PRIMITIVE_OUTPUT_PORT
from .graph import (
    NodeKind,
    PrimitiveKind,
    Coordinates,
    NodeInput,
    NodeOutput,
    Node,
    PrimitiveNode,
    Connection,
    WorkflowVersionGraph,
    split_numeric_suffix,
    file_basename,
)
from .machines import MachineClass, Machines, MachineAllocation
from .tree import TreeNode, Forest, TASK_STATUSES
from .run import SubJob
from .run_config import (
    PrimitiveInput,
    NodeParameterInput,
    RunConfiguration,
    split_inputs,
)
from .exceptions import (
    WRBError,
    NodeReferenceError,
    UndefinedReferenceError,
    AmbiguousReferenceError,
    BadReferenceError,
    IncompleteReferenceError,
    UnknownParameterError,
    InputTypeError,
    TypeMismatchError,
    InvalidLiteralFormatError,
    AllocationError,
    CannotAllocateError,
    MachineOverflowError,
    InvalidMachineCountError,
    StructuralError,
    DanglingConnectionError,
    MissingNodeDuringCleanupError,
    ConnectionNotFoundError,
    GraphCycleError,
)

__all__ = [
    # Endpoints
    "SourceEndpoint",
    "DestinationEndpoint",
    "PRIMITIVE_OUTPUT_PORT",
    # Graph
    "NodeKind",
    "PrimitiveKind",
    "Coordinates",
    "NodeInput",
    "NodeOutput",
    "Node",
    "PrimitiveNode",
    "Connection",
    "WorkflowVersionGraph",
    "split_numeric_suffix",
    "file_basename",
    # Machines
    "MachineClass",
    "Machines",
    "MachineAllocation",
    # Tree
    "TreeNode",
    "Forest",
    "TASK_STATUSES",
    # Run
    "SubJob",
    "PrimitiveInput",
    "NodeParameterInput",
    "RunConfiguration",
    "split_inputs",
    # Errors
    "WRBError",
    "NodeReferenceError",
    "UndefinedReferenceError",
    "AmbiguousReferenceError",
    "BadReferenceError",
    "IncompleteReferenceError",
    "UnknownParameterError",
    "InputTypeError",
    "TypeMismatchError",
    "InvalidLiteralFormatError",
    "AllocationError",
    "CannotAllocateError",
    "MachineOverflowError",
    "InvalidMachineCountError",
    "StructuralError",
    "DanglingConnectionError",
    "MissingNodeDuringCleanupError",
    "ConnectionNotFoundError",
    "GraphCycleError",
]

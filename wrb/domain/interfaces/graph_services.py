"""
Graph Service Interfaces.

Contracts for turning run-configuration entries into graph edits:
reference resolution and configuration apply.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, TYPE_CHECKING

from ..models.graph import WorkflowVersionGraph

if TYPE_CHECKING:
    from ...application.services.config_applier import ApplyResult


class INodeResolver(ABC):
    """
    Interface for resolving user references to canonical identifiers.

    References may be node IDs ("nmap-1"), bare names ("nmap", meaning
    "nmap-1"), labels, or "<ref>.<param>" parameter references.
    """

    @abstractmethod
    def resolve(self, ref: str, require_addressable: bool = True) -> str:
        """
        Resolve a node reference.

        Args:
            ref: ID, bare name or label
            require_addressable: Reject label hits on TOOL/MODULE nodes

        Returns:
            Canonical node ID

        Raises:
            UndefinedReferenceError, AmbiguousReferenceError,
            IncompleteReferenceError
        """
        pass

    @abstractmethod
    def resolve_parameter(self, ref: str) -> Tuple[str, str]:
        """
        Resolve "<ref>.<param>" to (node ID, parameter name).

        Raises:
            BadReferenceError: The reference does not have exactly one '.'
        """
        pass

    @abstractmethod
    def resolve_primitive(self, ref: str) -> str:
        """Resolve a primitive node by ID or unique label."""
        pass

    @abstractmethod
    def parameter_type(self, node_id: str, param: str) -> str:
        """
        Declared type of a node's input port.

        Raises:
            UnknownParameterError: The node has no such port
        """
        pass


class IConfigApplier(ABC):
    """
    Interface for applying a flat input mapping to a workflow graph.

    Implementations must never mutate the graph they are given.
    """

    @abstractmethod
    def apply(self, graph: WorkflowVersionGraph, inputs: Dict[str, Any]) -> "ApplyResult":
        """
        Apply input values to a copy of the graph.

        Args:
            graph: Snapshot of the stored workflow version
            inputs: Reference string -> scalar or list of scalars

        Returns:
            ApplyResult with the new graph and whether it changed

        Raises:
            WRBError: Any entry failed; nothing is returned
        """
        pass

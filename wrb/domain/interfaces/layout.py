"""
Tree Projection and Layout Interfaces.
"""

from abc import ABC, abstractmethod
from typing import Dict

from ..models.graph import Coordinates, WorkflowVersionGraph
from ..models.tree import Forest


class ITreeProjector(ABC):
    """Derives the display forest from a flat node and connection list."""

    @abstractmethod
    def project(self, graph: WorkflowVersionGraph, include_primitives: bool = False) -> Forest:
        """
        Build the display forest.

        Args:
            graph: Workflow version graph
            include_primitives: Add primitive nodes as leaves

        Returns:
            Forest with all tree nodes and the roots
        """
        pass


class ILayoutEngine(ABC):
    """Assigns heights and display coordinates to a forest."""

    @abstractmethod
    def compute_heights(self, forest: Forest) -> Dict[str, int]:
        """
        Assign a height to every tree node.

        Raises:
            GraphCycleError: The forest contains a cycle
        """
        pass

    @abstractmethod
    def assign_coordinates(self, forest: Forest) -> Dict[str, Coordinates]:
        """Compute coordinates from previously computed heights."""
        pass

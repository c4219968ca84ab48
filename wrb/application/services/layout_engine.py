"""
Layout Engine Implementation.

Assigns every tree node a height (leaves at 0, consumers above their
suppliers) and derives display coordinates for the remote visual editor.

Height assignment:
1. Longest path from the leaves (cycles are rejected)
2. Children are pulled down directly below their parents, first for every
   root and again for the tallest roots
3. A root at or below one of its children is raised above it and its
   subtree re-adjusted
4. A node at or above its lowest parent has that parent's subtree re-adjusted
5. Finally every consumer is lifted strictly above all of its suppliers and
   heights are shifted so the lowest is 0

Coordinates: heights advance along X; nodes sharing a height are sorted by
name and spread along Y, with extra room next to the widest nodes.
"""

import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from wrb.config import LayoutConfig
from wrb.domain.events import LayoutComputedEvent
from wrb.domain.interfaces.layout import ILayoutEngine
from wrb.domain.models.graph import Coordinates, WorkflowVersionGraph
from wrb.domain.models.tree import Forest, TreeNode
from wrb.domain.models.exceptions import GraphCycleError

from .tree_projector import TreeProjector

if TYPE_CHECKING:
    from wrb.infrastructure.events.wrb_event_bus import WRBEventBus

logger = logging.getLogger(__name__)


def _longest_path_heights(forest: Forest) -> Dict[str, int]:
    heights: Dict[str, int] = {}
    visiting = set()

    def visit(node: TreeNode) -> int:
        if node.name in heights:
            return heights[node.name]
        if node.name in visiting:
            raise GraphCycleError(f"connections form a cycle through '{node.name}'")
        visiting.add(node.name)
        height = 0
        for child in node.children:
            height = max(height, visit(child) + 1)
        visiting.discard(node.name)
        heights[node.name] = height
        return height

    for node in forest:
        visit(node)
    return heights


def _adjust_children(node: TreeNode) -> None:
    """Place every descendant one level below the node it supplies."""
    for child in node.children:
        child.height = node.height - 1
        _adjust_children(child)


class LayoutEngine(ILayoutEngine):
    """Computes heights and coordinates for display forests."""

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        event_bus: Optional["WRBEventBus"] = None,
    ):
        self._config = config or LayoutConfig()
        self._event_bus = event_bus

    # ═══════════════════════════════════════════════════════════════
    # Heights
    # ═══════════════════════════════════════════════════════════════

    def compute_heights(self, forest: Forest) -> Dict[str, int]:
        initial = _longest_path_heights(forest)
        for node in forest:
            node.height = initial[node.name]

        roots = forest.roots
        if roots:
            max_root_height = max(r.height for r in roots)
            for root in roots:
                _adjust_children(root)
            for root in roots:
                if root.height == max_root_height:
                    _adjust_children(root)

            for root in roots:
                max_child_height = max((c.height for c in root.children), default=0)
                if root.children and root.height <= max_child_height:
                    root.height = max_child_height + 1
                    _adjust_children(root)

        for node in forest:
            if node.parents:
                lowest_parent = min(node.parents, key=lambda p: p.height)
                if lowest_parent.height <= node.height:
                    _adjust_children(lowest_parent)

        # Suppliers first: the longest-path height is a topological order.
        for node in sorted(forest, key=lambda n: (initial[n.name], n.name)):
            if node.children:
                node.height = max(node.height, max(c.height for c in node.children) + 1)

        if len(forest):
            lowest = min(n.height for n in forest)
            for node in forest:
                node.height -= lowest

        return forest.heights()

    # ═══════════════════════════════════════════════════════════════
    # Coordinates
    # ═══════════════════════════════════════════════════════════════

    def assign_coordinates(self, forest: Forest) -> Dict[str, Coordinates]:
        distance = self._config.node_distance
        by_height: Dict[int, List[TreeNode]] = {}
        for node in forest:
            by_height.setdefault(node.height, []).append(node)

        max_inputs = {
            height: max((n.input_count for n in nodes if not n.is_primitive), default=0)
            for height, nodes in by_height.items()
        }

        coordinates: Dict[str, Coordinates] = {}
        x = 0.0
        for height in range(max(by_height, default=-1) + 1):
            nodes = sorted(by_height.get(height, []), key=lambda n: n.name)
            widest = max_inputs.get(height, 0)
            start = -(len(nodes) - 1) * distance / 2
            indent = distance * (widest // self._config.width_divisor)
            previous_indent = 0.0
            if height > 0:
                previous_indent = distance * (max_inputs.get(height - 1, 0) // self._config.previous_width_divisor)

            for i, node in enumerate(nodes):
                node_x = x + previous_indent
                if i == 0 and height > 0:
                    node_x += indent
                coordinates[node.name] = Coordinates(x=node_x, y=self._config.y_scale * start)

                start += distance
                if i + 1 < len(nodes) and not nodes[i + 1].is_primitive and nodes[i + 1].input_count == widest:
                    start += indent
                if not node.is_primitive and node.input_count == widest:
                    start += indent

                if i == len(nodes) - 1:
                    x += 2 * distance + previous_indent

        return coordinates

    # ═══════════════════════════════════════════════════════════════
    # Graph Layout
    # ═══════════════════════════════════════════════════════════════

    def layout(self, graph: WorkflowVersionGraph, include_primitives: bool = True) -> Forest:
        """
        Project, lay out and write coordinates into the graph in place.

        Returns:
            The forest used for the layout, with heights set
        """
        forest = TreeProjector().project(graph, include_primitives=include_primitives)
        heights = self.compute_heights(forest)
        for name, coords in self.assign_coordinates(forest).items():
            target = graph.get_node(name) or graph.get_primitive(name)
            target.coordinates = coords

        max_height = max(heights.values(), default=0)
        logger.info(f"Laid out {len(forest)} node(s) over {max_height + 1 if heights else 0} height(s)")
        if self._event_bus is not None:
            self._event_bus.publish(LayoutComputedEvent(
                node_count=len(forest),
                root_count=len(forest.roots),
                max_height=max_height,
                heights=heights,
            ))
        return forest

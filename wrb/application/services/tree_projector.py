"""
Tree Projector Implementation.

Inverts the execution direction of a workflow graph into a display forest:
a node's children supply its inputs, its parents consume its output, and the
roots are the real nodes nothing consumes.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from wrb.domain.interfaces.layout import ITreeProjector
from wrb.domain.models.graph import WorkflowVersionGraph
from wrb.domain.models.run import SubJob
from wrb.domain.models.tree import Forest, TreeNode

logger = logging.getLogger(__name__)


class TreeProjector(ITreeProjector):
    """Builds display forests and overlays run status on them."""

    def project(self, graph: WorkflowVersionGraph, include_primitives: bool = False) -> Forest:
        forest = Forest()

        for node_id in sorted(graph.nodes):
            node = graph.nodes[node_id]
            forest.nodes[node_id] = TreeNode(
                name=node_id,
                label=node.label,
                input_count=len(node.inputs),
            )

        if include_primitives:
            for primitive_id in sorted(graph.primitive_nodes):
                primitive = graph.primitive_nodes[primitive_id]
                forest.nodes[primitive_id] = TreeNode(
                    name=primitive_id,
                    label=primitive.label,
                    is_primitive=True,
                )

        for connection in graph.connections:
            consumer = forest.nodes.get(connection.destination.node_id)
            supplier = forest.nodes.get(connection.source.node_id)
            if consumer is None or supplier is None or consumer.is_primitive:
                continue
            consumer.add_child(supplier)

        for tree_node in forest.nodes.values():
            tree_node.children.sort(key=lambda n: n.name)
            tree_node.parents.sort(key=lambda n: n.name)

        forest.roots = [n for n in forest if not n.is_primitive and n.is_root]
        logger.debug(f"Projected {len(forest)} tree nodes with {len(forest.roots)} root(s)")
        return forest

    def apply_sub_jobs(
        self,
        forest: Forest,
        sub_jobs: Iterable[SubJob],
        now: Optional[datetime] = None,
    ) -> Forest:
        """
        Overlay sub-job status on the tree nodes they ran for.

        Args:
            forest: Forest to annotate in place
            sub_jobs: Sub-jobs of one run
            now: Reference time for unfinished sub-jobs (defaults to UTC now)

        Returns:
            The same forest
        """
        now = now or datetime.now(timezone.utc)
        for sub_job in sub_jobs:
            tree_node = forest.get(sub_job.name)
            if tree_node is None:
                logger.debug(f"Sub-job for unknown node '{sub_job.name}' ignored")
                continue

            tree_node.status = sub_job.status.lower()
            if sub_job.outputs_status:
                tree_node.output_status = sub_job.outputs_status.lower().replace("_", " ")
            tree_node.duration = sub_job.duration(now)
            tree_node.task_group = sub_job.task_group
            if sub_job.task_group:
                tree_node.task_count = len(sub_job.children)
                tree_node.task_status = sub_job.task_status_counts()
        return forest

"""
Node Resolver Implementation.

Turns user-supplied references into canonical node and parameter IDs.

Resolution order for a node reference:
1. Exact node ID
2. Ambiguity check: a label shared by several nodes is rejected
3. A unique label hit on an addressable node (SCRIPT/SPLITTER, or any kind
   when the caller asked for it)
4. A reference without a numeric suffix is retried as "<ref>-1"
5. A unique label hit on a TOOL/MODULE node asks for the two-part form
"""

import logging
from typing import List, Tuple

from wrb.domain.interfaces.graph_services import INodeResolver
from wrb.domain.models.graph import WorkflowVersionGraph, split_numeric_suffix
from wrb.domain.models.exceptions import (
    AmbiguousReferenceError,
    BadReferenceError,
    IncompleteReferenceError,
    UndefinedReferenceError,
    UnknownParameterError,
)

logger = logging.getLogger(__name__)


class NodeResolver(INodeResolver):
    """
    Resolves node, parameter and primitive references against one graph.

    The resolver reads the graph on every call, so it stays valid while the
    graph is being edited.
    """

    def __init__(self, graph: WorkflowVersionGraph):
        self._graph = graph

    def _label_hits(self, ref: str) -> List[str]:
        return sorted(node_id for node_id, node in self._graph.nodes.items() if node.label == ref)

    def resolve(self, ref: str, require_addressable: bool = True) -> str:
        nodes = self._graph.nodes
        if ref in nodes:
            return ref

        hits = self._label_hits(ref)
        if len(hits) > 1:
            raise AmbiguousReferenceError(ref, hits)

        if hits:
            node = nodes[hits[0]]
            if node.kind.label_addressable or not require_addressable:
                logger.debug(f"Resolved '{ref}' by label to {node.id}")
                return node.id

        _, index = split_numeric_suffix(ref)
        default_id = f"{ref}-1"
        if index is None and default_id in nodes:
            logger.debug(f"Resolved '{ref}' to default instance {default_id}")
            return default_id

        if hits:
            raise IncompleteReferenceError(ref)
        raise UndefinedReferenceError(ref)

    def resolve_parameter(self, ref: str) -> Tuple[str, str]:
        parts = ref.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise BadReferenceError(
                f"invalid parameter reference '{ref}', expected '<node>.<parameter-name>'"
            )
        node_ref, param = parts
        node_id = self.resolve(node_ref, require_addressable=False)
        self.parameter_type(node_id, param)
        return node_id, param

    def resolve_primitive(self, ref: str) -> str:
        primitives = self._graph.primitive_nodes
        if ref in primitives:
            return ref

        hits = sorted(pid for pid, p in primitives.items() if p.label == ref)
        if len(hits) > 1:
            raise AmbiguousReferenceError(ref, hits)
        if not hits:
            raise UndefinedReferenceError(ref, what="primitive node")
        return hits[0]

    def parameter_type(self, node_id: str, param: str) -> str:
        node = self._graph.get_node(node_id)
        if node is None:
            raise UndefinedReferenceError(node_id)
        port = node.declared_ports().get(param)
        if port is None:
            raise UnknownParameterError(node_id, param)
        return port.type

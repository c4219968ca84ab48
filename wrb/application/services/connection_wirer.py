"""
Connection Wirer Implementation.

Adds and removes connections and keeps the mirrored input entries of
primitive-fed parameters in sync.

A node parameter fed by a primitive carries a second input entry keyed
`<port>/<primitiveID>`: a visible copy of the declared port holding the
primitive's value (`in/<primitiveID>/<basename>` for files and folders).
"""

import logging
from typing import List

from wrb.domain.models.endpoints import PRIMITIVE_OUTPUT_PORT
from wrb.domain.models.graph import Connection, NodeInput, PrimitiveNode, WorkflowVersionGraph
from wrb.domain.models.exceptions import (
    ConnectionNotFoundError,
    DanglingConnectionError,
    UnknownParameterError,
)

logger = logging.getLogger(__name__)


def mirror_key(port: str, primitive_id: str) -> str:
    return f"{port}/{primitive_id}"


class ConnectionWirer:
    """Edits the connections of one graph in place."""

    def __init__(self, graph: WorkflowVersionGraph):
        self._graph = graph

    # ═══════════════════════════════════════════════════════════════
    # Connections
    # ═══════════════════════════════════════════════════════════════

    def connect(self, source_id: str, source_port: str, destination_id: str, destination_port: str) -> Connection:
        """
        Append a connection.

        Raises:
            DanglingConnectionError: Either endpoint does not exist
        """
        if not self._graph.has_endpoint(source_id):
            raise DanglingConnectionError(f"cannot connect from missing node '{source_id}'")
        if destination_id not in self._graph.nodes:
            raise DanglingConnectionError(f"cannot connect to missing node '{destination_id}'")

        connection = Connection.between(source_id, source_port, destination_id, destination_port)
        self._graph.connections.append(connection)
        logger.debug(f"Connected {connection.source} -> {connection.destination}")
        return connection

    def disconnect(self, source_id: str, source_port: str, destination_id: str, destination_port: str) -> Connection:
        """
        Remove exactly one matching connection.

        Raises:
            ConnectionNotFoundError: No connection matches
        """
        for i, connection in enumerate(self._graph.connections):
            if (
                connection.source.node_id == source_id
                and connection.source.port == source_port
                and connection.destination.matches(destination_id, destination_port)
            ):
                del self._graph.connections[i]
                logger.debug(f"Disconnected {connection.source} -> {connection.destination}")
                return connection
        raise ConnectionNotFoundError(
            f"no connection from '{source_id}.{source_port}' to '{destination_id}.{destination_port}'"
        )

    def find_sources(self, destination_id: str, destination_port: str) -> List[str]:
        """Primitive IDs feeding a node parameter, in wiring order."""
        return [
            c.source.node_id
            for c in self._graph.connections_to(destination_id, destination_port)
            if c.source.node_id in self._graph.primitive_nodes
        ]

    def consumers_of(self, source_id: str) -> List[Connection]:
        return self._graph.connections_from(source_id)

    # ═══════════════════════════════════════════════════════════════
    # Mirrored Input Entries
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def mirror_value(primitive: PrimitiveNode):
        return primitive.mirrored_value()

    def add_mirror(self, node_id: str, port: str, primitive: PrimitiveNode) -> NodeInput:
        """
        Create or refresh the mirrored entry of a primitive on a node parameter.

        An existing entry keeps its own fields; only its value is rewritten.
        """
        node = self._graph.nodes[node_id]
        declared = node.inputs.get(port)
        if declared is None:
            raise UnknownParameterError(node_id, port)
        declared.visible = True
        key = mirror_key(port, primitive.id)
        entry = node.inputs.get(key)
        if entry is None:
            entry = declared.mirror(self.mirror_value(primitive))
            node.inputs[key] = entry
        else:
            entry.value = self.mirror_value(primitive)
        return entry

    def remove_mirror(self, node_id: str, port: str, primitive_id: str) -> None:
        node = self._graph.nodes.get(node_id)
        if node is not None:
            node.inputs.pop(mirror_key(port, primitive_id), None)

    def mirror_is_current(self, node_id: str, port: str, primitive: PrimitiveNode) -> bool:
        node = self._graph.nodes[node_id]
        entry = node.inputs.get(mirror_key(port, primitive.id))
        return (
            port in node.inputs
            and entry is not None
            and entry.value == self.mirror_value(primitive)
        )

    def refresh_mirrors(self, primitive: PrimitiveNode) -> List[str]:
        """
        Rewrite the mirrored entries of every parameter a primitive feeds.

        Returns:
            IDs of the consuming nodes
        """
        consumers = []
        for connection in self.consumers_of(primitive.id):
            destination = connection.destination
            if destination.node_id not in self._graph.nodes:
                raise DanglingConnectionError(
                    f"connection {connection.destination} references a missing node"
                )
            self.add_mirror(destination.node_id, destination.port, primitive)
            consumers.append(destination.node_id)
        return consumers

    def wire_primitive(self, primitive: PrimitiveNode, node_id: str, port: str) -> Connection:
        """Connect a primitive to a node parameter and mirror its value."""
        connection = self.connect(primitive.id, PRIMITIVE_OUTPUT_PORT, node_id, port)
        self.add_mirror(node_id, port, primitive)
        return connection

    def unwire_primitive(self, primitive_id: str, node_id: str, port: str) -> Connection:
        """Disconnect a primitive from a node parameter and drop its mirror."""
        connection = self.disconnect(primitive_id, PRIMITIVE_OUTPUT_PORT, node_id, port)
        self.remove_mirror(node_id, port, primitive_id)
        return connection

"""
Domain Models for Workflow Version Graphs.

This module contains the in-memory representation of a stored workflow
version as the remote service returns it:
- NodeKind / PrimitiveKind: Closed sets of node and literal kinds
- NodeInput / NodeOutput: Port definitions (Value Objects)
- Node: Tool, script, splitter or module node (Entity)
- PrimitiveNode: Literal-value node feeding a parameter (Entity)
- Connection: Directed edge between two ports (Value Object)
- WorkflowVersionGraph: Aggregate root owning all of the above

Serialization uses the remote field names verbatim (`primitiveNodes`,
`type_name`, `meta.label`, ...). Fields the models do not know about are kept
in `extra` and written back unchanged.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .endpoints import DestinationEndpoint, SourceEndpoint, PRIMITIVE_OUTPUT_PORT


SPLITTER_ID_PREFIXES = ("file-splitter", "split-to-string")


def split_numeric_suffix(ref: str) -> Tuple[str, Optional[int]]:
    """Split "nmap-2" into ("nmap", 2); refs without a numeric suffix get None."""
    base, sep, tail = ref.rpartition("-")
    if sep and base and tail.isdigit():
        return base, int(tail)
    return ref, None


def file_basename(value: str) -> str:
    """Last path segment of a URL or file reference."""
    return value.rstrip("/").rsplit("/", 1)[-1]


class NodeKind(str, Enum):
    """Kinds of work nodes in a workflow graph."""
    TOOL = "TOOL"
    SCRIPT = "SCRIPT"
    SPLITTER = "SPLITTER"
    MODULE = "MODULE"

    @property
    def label_addressable(self) -> bool:
        """Scripts and splitters can be referenced by their label alone."""
        return self in (NodeKind.SCRIPT, NodeKind.SPLITTER)

    @classmethod
    def infer(cls, node_id: str, data: Dict[str, Any]) -> "NodeKind":
        raw = data.get("type")
        if isinstance(raw, str) and raw.upper() in cls.__members__:
            return cls[raw.upper()]
        if data.get("script"):
            return cls.SCRIPT
        if node_id.startswith(SPLITTER_ID_PREFIXES):
            return cls.SPLITTER
        return cls.TOOL


class PrimitiveKind(str, Enum):
    """Kinds of literal-value nodes."""
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    FILE = "FILE"
    FOLDER = "FOLDER"

    @property
    def id_prefix(self) -> str:
        return _PRIMITIVE_PREFIXES[self]

    @property
    def type_name(self) -> str:
        return _PRIMITIVE_TYPE_NAMES[self]

    def format_id(self, index: int) -> str:
        return f"{self.id_prefix}{index}"

    @classmethod
    def from_type(cls, declared: str) -> Optional["PrimitiveKind"]:
        """Map a declared parameter type ("STRING", "file", ...) to a kind."""
        if not isinstance(declared, str):
            return None
        return cls.__members__.get(declared.upper())

    @classmethod
    def from_id(cls, primitive_id: str) -> Optional["PrimitiveKind"]:
        for kind, prefix in _PRIMITIVE_PREFIXES.items():
            if primitive_id.startswith(prefix):
                return kind
        return None

    @classmethod
    def parse_index(cls, primitive_id: str) -> Optional[int]:
        """Numeric suffix of a primitive ID, or None when it is not one."""
        kind = cls.from_id(primitive_id)
        if kind is None:
            return None
        tail = primitive_id[len(kind.id_prefix):]
        return int(tail) if tail.isdigit() else None


_PRIMITIVE_PREFIXES = {
    PrimitiveKind.STRING: "string-input-",
    PrimitiveKind.BOOLEAN: "boolean-input-",
    PrimitiveKind.FILE: "http-input-",
    PrimitiveKind.FOLDER: "git-input-",
}

_PRIMITIVE_TYPE_NAMES = {
    PrimitiveKind.STRING: "STRING",
    PrimitiveKind.BOOLEAN: "BOOLEAN",
    PrimitiveKind.FILE: "URL",
    PrimitiveKind.FOLDER: "GIT",
}


@dataclass
class Coordinates:
    """2D position consumed by the remote visual editor."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Coordinates":
        data = data or {}
        return cls(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)))


@dataclass
class NodeInput:
    """
    Input port definition on a node.

    A port fed by a primitive gets a mirrored entry keyed `<port>/<primitiveID>`
    holding the primitive's value.
    """
    type: str
    order: int = 0
    value: Any = None
    name: Optional[str] = None
    command: Optional[str] = None
    description: Optional[str] = None
    multi: Optional[bool] = None
    visible: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def mirror(self, value: Any) -> "NodeInput":
        """Copy of this definition carrying a primitive's value."""
        return NodeInput(
            type=self.type,
            order=self.order,
            value=value,
            command=self.command,
            description=self.description,
            multi=self.multi,
            visible=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["type"] = self.type
        data["order"] = self.order
        for key in ("name", "value", "command", "description", "multi", "visible"):
            attr = getattr(self, key)
            if attr is not None:
                data[key] = attr
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeInput":
        known = {"type", "order", "name", "value", "command", "description", "multi", "visible"}
        return cls(
            type=data.get("type", ""),
            order=data.get("order", 0),
            value=data.get("value"),
            name=data.get("name"),
            command=data.get("command"),
            description=data.get("description"),
            multi=data.get("multi"),
            visible=data.get("visible"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class NodeOutput:
    """Output port definition on a node."""
    type: str
    order: int = 0
    parameter_name: Optional[str] = None
    visible: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["type"] = self.type
        data["order"] = self.order
        if self.parameter_name is not None:
            data["parameter_name"] = self.parameter_name
        if self.visible is not None:
            data["visible"] = self.visible
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeOutput":
        known = {"type", "order", "parameter_name", "visible"}
        return cls(
            type=data.get("type", ""),
            order=data.get("order", 0),
            parameter_name=data.get("parameter_name"),
            visible=data.get("visible"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class Node:
    """
    Entity - a unit of work in the workflow graph.

    `id` follows the `<kind>-<index>` convention ("nmap-1"); `label` is the
    display name and is not required to be unique.
    """
    id: str
    label: str = ""
    kind: NodeKind = NodeKind.TOOL
    inputs: Dict[str, NodeInput] = field(default_factory=dict)
    outputs: Dict[str, NodeOutput] = field(default_factory=dict)
    coordinates: Coordinates = field(default_factory=Coordinates)
    script: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_default_label(self) -> bool:
        """True when the label is just the ID without its "-N" suffix."""
        base, index = split_numeric_suffix(self.id)
        return index is not None and self.label == base

    def declared_ports(self) -> Dict[str, NodeInput]:
        """Input ports excluding mirrored `<port>/<primitiveID>` entries."""
        return {name: port for name, port in self.inputs.items() if "/" not in name}

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["name"] = self.id
        meta = dict(data.get("meta") or {})
        meta.update({"label": self.label, "coordinates": self.coordinates.to_dict()})
        data["meta"] = meta
        if "type" not in data and NodeKind.infer(self.id, {"script": self.script}) != self.kind:
            data["type"] = self.kind.value
        data["inputs"] = {name: port.to_dict() for name, port in self.inputs.items()}
        data["outputs"] = {name: port.to_dict() for name, port in self.outputs.items()}
        if self.script is not None:
            data["script"] = self.script
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], node_id: Optional[str] = None) -> "Node":
        node_id = data.get("name") or node_id or ""
        meta = data.get("meta") or {}
        extra = {k: v for k, v in data.items() if k not in {"name", "meta", "inputs", "outputs", "script"}}
        meta_extra = {k: v for k, v in meta.items() if k not in ("label", "coordinates")}
        if meta_extra:
            extra["meta"] = meta_extra
        return cls(
            id=node_id,
            label=meta.get("label", ""),
            kind=NodeKind.infer(node_id, data),
            inputs={k: NodeInput.from_dict(v) for k, v in (data.get("inputs") or {}).items()},
            outputs={k: NodeOutput.from_dict(v) for k, v in (data.get("outputs") or {}).items()},
            coordinates=Coordinates.from_dict(meta.get("coordinates")),
            script=data.get("script"),
            extra=extra,
        )


@dataclass
class PrimitiveNode:
    """
    Entity - a literal value wired into one or more node parameters.

    `pending_upload` marks FILE primitives that point at a local file which
    still has to be uploaded; it is never sent to the remote service.
    """
    id: str
    kind: PrimitiveKind
    value: Any
    label: str = ""
    coordinates: Coordinates = field(default_factory=Coordinates)
    pending_upload: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def type_name(self) -> str:
        return self.kind.type_name

    @property
    def index(self) -> Optional[int]:
        return PrimitiveKind.parse_index(self.id)

    def mirrored_value(self) -> Any:
        """Value written into a consuming node's mirrored input entry."""
        if self.kind in (PrimitiveKind.FILE, PrimitiveKind.FOLDER):
            return f"in/{self.id}/{file_basename(str(self.value))}"
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "name": self.id,
            "type": self.kind.value,
            "label": self.label,
            "value": self.value,
            "type_name": self.type_name,
            "coordinates": self.coordinates.to_dict(),
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], primitive_id: Optional[str] = None) -> "PrimitiveNode":
        primitive_id = data.get("name") or primitive_id or ""
        kind = PrimitiveKind.from_type(data.get("type", "")) or PrimitiveKind.from_id(primitive_id)
        if kind is None:
            kind = PrimitiveKind.STRING
        known = {"name", "type", "label", "value", "type_name", "coordinates"}
        return cls(
            id=primitive_id,
            kind=kind,
            value=data.get("value"),
            label=data.get("label", ""),
            coordinates=Coordinates.from_dict(data.get("coordinates")),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class Connection:
    """Value Object - directed edge from an output port to an input port."""
    source: SourceEndpoint
    destination: DestinationEndpoint

    @classmethod
    def between(cls, source_id: str, source_port: str, destination_id: str, destination_port: str) -> "Connection":
        return cls(
            source=SourceEndpoint(source_id, source_port),
            destination=DestinationEndpoint(destination_id, destination_port, source_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": {"id": self.source.format()},
            "destination": {"id": self.destination.format()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        return cls(
            source=SourceEndpoint.parse(data["source"]["id"]),
            destination=DestinationEndpoint.parse(data["destination"]["id"]),
        )


@dataclass
class WorkflowVersionGraph:
    """
    Aggregate Root - the data section of one stored workflow version.

    Fetched once as a snapshot, mutated in memory by a configuration apply,
    then handed off to be stored as a new immutable version.
    """
    nodes: Dict[str, Node] = field(default_factory=dict)
    primitive_nodes: Dict[str, PrimitiveNode] = field(default_factory=dict)
    connections: List[Connection] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def add_node(self, node: Node) -> "WorkflowVersionGraph":
        self.nodes[node.id] = node
        return self

    def add_primitive(self, primitive: PrimitiveNode) -> "WorkflowVersionGraph":
        self.primitive_nodes[primitive.id] = primitive
        return self

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def get_primitive(self, primitive_id: str) -> Optional[PrimitiveNode]:
        return self.primitive_nodes.get(primitive_id)

    def has_endpoint(self, node_id: str) -> bool:
        return node_id in self.nodes or node_id in self.primitive_nodes

    def connections_to(self, node_id: str, port: Optional[str] = None) -> List[Connection]:
        """Connections entering a node (optionally a single port)."""
        return [
            c for c in self.connections
            if c.destination.node_id == node_id and (port is None or c.destination.port == port)
        ]

    def connections_from(self, node_id: str) -> List[Connection]:
        """Connections leaving a node."""
        return [c for c in self.connections if c.source.node_id == node_id]

    def labeled_nodes(self) -> List[Node]:
        """Nodes whose label was changed from the default derived from their ID."""
        return [n for _, n in sorted(self.nodes.items()) if not n.has_default_label]

    def pending_uploads(self) -> List[PrimitiveNode]:
        return [p for _, p in sorted(self.primitive_nodes.items()) if p.pending_upload]

    def mark_uploaded(self, primitive_id: str, reference: Optional[str] = None) -> None:
        """
        Clear the pending-upload marker once the file has been uploaded.

        Args:
            primitive_id: ID of the FILE primitive
            reference: Stored-file reference to use from now on (optional)
        """
        primitive = self.primitive_nodes[primitive_id]
        if reference is not None:
            primitive.value = reference
            primitive.label = reference
        primitive.pending_upload = False

    def iter_primitive_feeds(self) -> Iterator[Tuple[Connection, PrimitiveNode]]:
        for connection in self.connections:
            primitive = self.primitive_nodes.get(connection.source.node_id)
            if primitive is not None:
                yield connection, primitive

    def validate(self) -> List[str]:
        """
        Validate graph invariants.

        Returns:
            List of violation messages (empty if valid)
        """
        errors = []

        for connection in self.connections:
            if not self.has_endpoint(connection.source.node_id):
                errors.append(f"Connection source '{connection.source}' references a missing node")
            if connection.destination.node_id not in self.nodes:
                errors.append(f"Connection destination '{connection.destination}' references a missing node")

        for connection, primitive in self.iter_primitive_feeds():
            node = self.nodes.get(connection.destination.node_id)
            if node is None:
                continue
            mirror_key = f"{connection.destination.port}/{primitive.id}"
            entry = node.inputs.get(mirror_key)
            if entry is None:
                errors.append(f"Node '{node.id}' has no mirrored input '{mirror_key}'")
            elif entry.value != primitive.mirrored_value():
                errors.append(
                    f"Mirrored input '{mirror_key}' on '{node.id}' holds {entry.value!r}, "
                    f"expected {primitive.mirrored_value()!r}"
                )

        return errors

    def clone(self) -> "WorkflowVersionGraph":
        """Deep copy; mutations of the clone never reach the snapshot."""
        return deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the remote `data` payload."""
        data = dict(self.extra)
        data["nodes"] = {nid: n.to_dict() for nid, n in self.nodes.items()}
        data["connections"] = [c.to_dict() for c in self.connections]
        data["primitiveNodes"] = {pid: p.to_dict() for pid, p in self.primitive_nodes.items()}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowVersionGraph":
        """Deserialize from the remote `data` payload."""
        known = {"nodes", "connections", "primitiveNodes"}
        return cls(
            nodes={nid: Node.from_dict(n, nid) for nid, n in (data.get("nodes") or {}).items()},
            primitive_nodes={
                pid: PrimitiveNode.from_dict(p, pid)
                for pid, p in (data.get("primitiveNodes") or {}).items()
            },
            connections=[Connection.from_dict(c) for c in (data.get("connections") or [])],
            extra={k: v for k, v in data.items() if k not in known},
        )


__all__ = [
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
    "PRIMITIVE_OUTPUT_PORT",
]

"""
Config Applier Implementation.

Applies a run configuration's input mapping to a workflow version graph.

The caller's graph is never touched: the apply works on a clone and the
clone is only handed back when every entry succeeded. A failing entry
aborts the whole apply with the offending configuration key attached.

Entry kinds:
- `<primitive>`: overwrite an existing primitive and refresh every mirrored
  entry it feeds
- `<node>.<param>`: replace the primitives feeding the parameter with one new
  primitive per supplied value, unless exactly those values are already wired
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from wrb.config import WRBConfig, get_config
from wrb.domain.interfaces.file_probe import IFileProbe
from wrb.domain.interfaces.graph_services import IConfigApplier
from wrb.domain.events import (
    WRBEvent,
    ConfigurationAppliedEvent,
    ConfigurationRejectedEvent,
    PrimitiveNodeCreatedEvent,
    PrimitiveNodeRemovedEvent,
    PrimitiveValueUpdatedEvent,
)
from wrb.domain.models.graph import PrimitiveKind, WorkflowVersionGraph
from wrb.domain.models.run_config import NodeParameterInput, PrimitiveInput, split_inputs
from wrb.domain.models.exceptions import (
    DanglingConnectionError,
    IncompleteReferenceError,
    NodeReferenceError,
    UndefinedReferenceError,
    WRBError,
)

from .connection_wirer import ConnectionWirer
from .node_resolver import NodeResolver
from .primitive_manager import NormalizedValue, PrimitiveNodeManager

if TYPE_CHECKING:
    from wrb.infrastructure.events.wrb_event_bus import WRBEventBus

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """
    Outcome of a successful apply.

    Attributes:
        graph: The new graph (a clone of the snapshot)
        changed: Whether submitting `graph` would store anything new
        pending_uploads: FILE primitives pointing at local files to upload
        created: Primitive IDs created by this apply
        removed: Primitive IDs deleted by this apply
    """
    graph: WorkflowVersionGraph
    changed: bool
    pending_uploads: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)


class _ApplyPass:
    """State of one apply over one cloned graph."""

    def __init__(self, graph: WorkflowVersionGraph, config: WRBConfig, file_probe: Optional[IFileProbe]):
        self.graph = graph
        self.resolver = NodeResolver(graph)
        self.primitives = PrimitiveNodeManager(graph, config.primitives, file_probe)
        self.wirer = ConnectionWirer(graph)
        self.created: List[str] = []
        self.removed: List[str] = []
        self.events: List[WRBEvent] = []

    def _names_node(self, ref: str) -> bool:
        try:
            self.resolver.resolve(ref, require_addressable=False)
        except NodeReferenceError:
            return False
        return True

    def apply_primitive(self, entry: PrimitiveInput) -> None:
        try:
            primitive_id = self.resolver.resolve_primitive(entry.key)
        except UndefinedReferenceError:
            # A bare node reference is missing its parameter name.
            if self._names_node(entry.key):
                raise IncompleteReferenceError(entry.key)
            raise
        old_value = self.graph.primitive_nodes[primitive_id].value
        primitive = self.primitives.update_value(primitive_id, entry.value)
        consumers = self.wirer.refresh_mirrors(primitive)
        self.events.append(PrimitiveValueUpdatedEvent(
            primitive_id=primitive_id,
            old_value=old_value,
            new_value=primitive.value,
            consumers=consumers,
        ))

    def apply_node_parameter(self, entry: NodeParameterInput) -> None:
        node_id, param = self.resolver.resolve_parameter(entry.key)
        declared_type = self.resolver.parameter_type(node_id, param)

        kinds = [self.primitives.check_compatible(declared_type, v) for v in entry.values]
        normalized = [self.primitives.normalize(k, v) for k, v in zip(kinds, entry.values)]

        existing = self.wirer.find_sources(node_id, param)
        if self._already_wired(node_id, param, existing, kinds, normalized):
            logger.debug(f"{entry.key}: already wired, nothing to do")
            return

        for primitive_id in existing:
            self.wirer.unwire_primitive(primitive_id, node_id, param)
            if not self.wirer.consumers_of(primitive_id):
                self.primitives.remove(primitive_id)
                self.removed.append(primitive_id)
                self.events.append(PrimitiveNodeRemovedEvent(
                    primitive_id=primitive_id, node_id=node_id, param=param,
                ))

        for kind, raw in zip(kinds, entry.values):
            primitive = self.primitives.create(kind, raw)
            self.wirer.wire_primitive(primitive, node_id, param)
            self.created.append(primitive.id)
            self.events.append(PrimitiveNodeCreatedEvent(
                primitive_id=primitive.id,
                kind=kind.value,
                value=primitive.value,
                node_id=node_id,
                param=param,
                pending_upload=primitive.pending_upload,
            ))

    def _already_wired(
        self,
        node_id: str,
        param: str,
        existing: List[str],
        kinds: List[PrimitiveKind],
        normalized: List[NormalizedValue],
    ) -> bool:
        if len(existing) != len(normalized):
            return False
        for primitive_id, kind, value in zip(existing, kinds, normalized):
            primitive = self.graph.primitive_nodes[primitive_id]
            if (
                primitive.kind != kind
                or primitive.value != value.value
                or primitive.label != value.label
                or primitive.pending_upload != value.pending_upload
            ):
                return False
            if not self.wirer.mirror_is_current(node_id, param, primitive):
                return False
        return True


class ConfigApplier(IConfigApplier):
    """
    Applies input mappings to workflow version graphs.

    Primitive entries are applied first, then node-parameter entries, each
    group in mapping order.
    """

    def __init__(
        self,
        config: Optional[WRBConfig] = None,
        file_probe: Optional[IFileProbe] = None,
        event_bus: Optional["WRBEventBus"] = None,
    ):
        """
        Initialize the config applier.

        Args:
            config: Run builder configuration (global config if omitted)
            file_probe: Local file check for FILE values
            event_bus: Optional bus receiving apply events
        """
        self._config = config or get_config()
        self._file_probe = file_probe
        self._event_bus = event_bus

    def _publish(self, *events: WRBEvent) -> None:
        if self._event_bus is not None:
            self._event_bus.publish_all(list(events))

    def apply(self, graph: WorkflowVersionGraph, inputs: Dict[str, Any]) -> ApplyResult:
        working = graph.clone()
        apply_pass = _ApplyPass(working, self._config, self._file_probe)
        key: Optional[str] = None

        try:
            primitive_inputs, node_inputs = split_inputs(inputs)
            for primitive_entry in primitive_inputs:
                key = primitive_entry.key
                apply_pass.apply_primitive(primitive_entry)
            for node_entry in node_inputs:
                key = node_entry.key
                apply_pass.apply_node_parameter(node_entry)
            key = None

            if self._config.validate_graph:
                violations = working.validate()
                if violations:
                    raise DanglingConnectionError("; ".join(violations))
        except WRBError as e:
            if key is not None:
                e.attach_key(key)
            logger.warning(f"Rejected run configuration: {e}")
            self._publish(ConfigurationRejectedEvent(key=e.key, error_code=e.code, error_message=e.message))
            raise

        pending = [p.id for p in working.pending_uploads()]
        changed = working != graph

        logger.info(
            f"Applied {len(inputs)} input(s): changed={changed}, "
            f"created={len(apply_pass.created)}, removed={len(apply_pass.removed)}, "
            f"pending uploads={len(pending)}"
        )
        self._publish(*apply_pass.events, ConfigurationAppliedEvent(
            changed=changed,
            entries=len(inputs),
            created=list(apply_pass.created),
            removed=list(apply_pass.removed),
            pending_uploads=pending,
        ))

        return ApplyResult(
            graph=working,
            changed=changed,
            pending_uploads=pending,
            created=apply_pass.created,
            removed=apply_pass.removed,
        )

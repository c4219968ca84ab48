"""
RunBuilder - Main Entry Point for the WRB SDK.

Architecture:
    RunBuilder (SDK Facade)
        │
        ├── ConfigApplier               - Inputs -> new graph (Application)
        ├── MachineAllocationValidator  - Machine request -> allocation (Application)
        ├── NodeResolver                - Output references -> node IDs (Application)
        └── LayoutEngine                - Heights and coordinates (Application)

`prepare` is the abort-before-submit point: it runs apply, allocation,
output selection and layout in that order and returns nothing unless every
step succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING
import logging

from wrb.config import WRBConfig, get_config
from wrb.api.schemas import RunConfigModel, WorkflowVersionModel
from wrb.application.services import (
    ApplyResult,
    ConfigApplier,
    LayoutEngine,
    MachineAllocationValidator,
    NodeResolver,
    TreeProjector,
)
from wrb.domain.interfaces.file_probe import IFileProbe
from wrb.domain.models.exceptions import WRBError
from wrb.domain.models.graph import WorkflowVersionGraph
from wrb.domain.models.machines import MachineAllocation, Machines
from wrb.domain.models.run_config import RunConfiguration
from wrb.domain.models.tree import Forest

if TYPE_CHECKING:
    from wrb.infrastructure.events.wrb_event_bus import WRBEventBus

logger = logging.getLogger(__name__)


@dataclass
class PreparedRun:
    """
    Everything needed to submit a run (SDK operation DTO).

    `graph` only has to be stored as a new version when `changed` is set;
    files listed in `pending_uploads` must be uploaded first.
    """
    graph: WorkflowVersionGraph
    changed: bool
    allocation: MachineAllocation
    outputs: List[str] = field(default_factory=list)
    forest: Forest = field(default_factory=Forest)
    pending_uploads: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Graph section of the version to store."""
        return self.graph.to_dict()


class RunBuilder:
    """
    Facade turning a run configuration into a submittable run.

    Usage:
        builder = RunBuilder.create("development")
        prepared = builder.prepare(version_payload, {"inputs": {"nmap.target": "example.com"}},
                                   maxima=Machines(small=3, large=5))
        if prepared.changed:
            ...  # store prepared.to_payload() as a new version
    """

    def __init__(
        self,
        config: Optional[WRBConfig] = None,
        file_probe: Optional[IFileProbe] = None,
        event_bus: Optional["WRBEventBus"] = None,
    ):
        self._config = config or get_config()
        self._applier = ConfigApplier(self._config, file_probe, event_bus)
        self._projector = TreeProjector()
        self._layout = LayoutEngine(self._config.layout, event_bus)

    @classmethod
    def create(cls, mode: str = "testing", **kwargs) -> "RunBuilder":
        """
        Factory method for quick RunBuilder creation.

        Args:
            mode: "testing", "development", or "production"
            **kwargs:
                - base_dir: Directory local file paths are relative to
                - files: Paths the in-memory probe reports as existing (testing)
                - event_bus: Bus receiving apply and layout events
        """
        from wrb.infrastructure.files import InMemoryFileProbe, LocalFileProbe

        if mode == "development":
            config = WRBConfig.for_development()
            probe = LocalFileProbe(kwargs.get("base_dir"))
        elif mode == "production":
            config = WRBConfig.for_production()
            probe = LocalFileProbe(kwargs.get("base_dir"))
        else:
            config = WRBConfig.for_testing()
            probe = InMemoryFileProbe(kwargs.get("files", ()))
        return cls(config=config, file_probe=probe, event_bus=kwargs.get("event_bus"))

    # ═══════════════════════════════════════════════════════════════════════════
    # Individual Steps
    # ═══════════════════════════════════════════════════════════════════════════

    def apply(self, graph: WorkflowVersionGraph, inputs: Dict[str, Any]) -> ApplyResult:
        return self._applier.apply(graph, inputs)

    def allocate(
        self,
        request: Any,
        maxima: Optional[Machines],
        total: Optional[int] = None,
        single_machine: bool = False,
        use_max: bool = False,
    ) -> MachineAllocation:
        validator = MachineAllocationValidator(maxima, total, single_machine, use_max)
        try:
            return validator.validate(request)
        except WRBError as e:
            raise e.attach_key("machines")

    def resolve_outputs(self, graph: WorkflowVersionGraph, refs: List[str]) -> List[str]:
        """
        Resolve output references (ID, bare name or label of any node kind).

        Returns:
            Node IDs in reference order, without duplicates
        """
        resolver = NodeResolver(graph)
        resolved: List[str] = []
        for ref in refs:
            try:
                node_id = resolver.resolve(ref, require_addressable=False)
            except WRBError as e:
                raise e.attach_key("outputs")
            if node_id not in resolved:
                resolved.append(node_id)
        return resolved

    # ═══════════════════════════════════════════════════════════════════════════
    # Full Preparation
    # ═══════════════════════════════════════════════════════════════════════════

    def prepare(
        self,
        snapshot: Union[WorkflowVersionGraph, Dict[str, Any]],
        run_config: Union[RunConfiguration, Dict[str, Any]],
        maxima: Optional[Machines] = None,
        total: Optional[int] = None,
    ) -> PreparedRun:
        """
        Prepare a run from a version snapshot and a run configuration.

        Args:
            snapshot: Graph, fetched version payload, or its `data` section
            run_config: Parsed configuration or the raw configuration mapping
            maxima: Per-class machine maxima of the fleet
            total: Fleet-wide limit for a uniform machine count

        Returns:
            PreparedRun

        Raises:
            WRBError: Any step failed; nothing may be submitted
            pydantic.ValidationError: A raw document is malformed
        """
        graph = self._to_graph(snapshot)
        if isinstance(run_config, dict):
            run_config = RunConfigModel.model_validate(run_config).to_run_configuration()

        result = self.apply(graph, run_config.inputs)
        allocation = self.allocate(
            run_config.machines,
            maxima,
            total=total,
            single_machine=run_config.single_machine,
            use_max=run_config.use_max,
        )
        outputs = self.resolve_outputs(result.graph, run_config.outputs)

        if result.changed:
            forest = self._layout.layout(result.graph, include_primitives=True)
        else:
            forest = self._projector.project(result.graph)

        logger.info(
            f"Prepared run: changed={result.changed}, machines={allocation.format()}, "
            f"outputs={len(outputs)}, pending uploads={len(result.pending_uploads)}"
        )
        return PreparedRun(
            graph=result.graph,
            changed=result.changed,
            allocation=allocation,
            outputs=outputs,
            forest=forest,
            pending_uploads=list(result.pending_uploads),
        )

    @staticmethod
    def _to_graph(snapshot: Union[WorkflowVersionGraph, Dict[str, Any]]) -> WorkflowVersionGraph:
        if isinstance(snapshot, WorkflowVersionGraph):
            return snapshot
        if "data" in snapshot:
            return WorkflowVersionModel.model_validate(snapshot).to_graph()
        return WorkflowVersionModel.model_validate({"data": snapshot}).to_graph()

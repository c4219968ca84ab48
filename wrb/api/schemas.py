"""
Boundary Schemas (Pydantic).

Validate the two documents the run builder receives from outside:
- a run configuration as parsed from the user's YAML/JSON file
- a workflow version as fetched from the remote service

Each schema converts to the matching domain object. Invalid documents raise
pydantic.ValidationError.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wrb.domain.models.endpoints import DestinationEndpoint, SourceEndpoint
from wrb.domain.models.exceptions import BadReferenceError
from wrb.domain.models.graph import WorkflowVersionGraph
from wrb.domain.models.run_config import RunConfiguration


# ═══════════════════════════════════════════════════════════════════════════════
# Run Configuration
# ═══════════════════════════════════════════════════════════════════════════════

class RunConfigModel(BaseModel):
    """
    Run configuration file.

    `input`/`output` are accepted next to `inputs`/`outputs`; the plural key
    wins when both are present. Outputs may be a single reference or a list.
    """
    inputs: Optional[Dict[str, Any]] = Field(None, description="Reference -> value(s)")
    input: Optional[Dict[str, Any]] = Field(None, description="Alias of inputs")
    outputs: Optional[List[str]] = Field(None, description="Node references to collect outputs from")
    output: Optional[List[str]] = Field(None, description="Alias of outputs")
    machines: Any = Field(None, description="Number, max/maximum, or small/medium/large mapping")
    fleet: Optional[str] = Field(None, description="Fleet name")
    use_static_ips: bool = Field(False, alias="use-static-ips")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("outputs", "output", mode="before")
    @classmethod
    def validate_outputs(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v]
        return [str(v)]

    @field_validator("machines")
    @classmethod
    def validate_machines(cls, v: Any) -> Any:
        if v is None or isinstance(v, (int, str, dict)):
            return v
        raise ValueError("machines must be a number, max/maximum, or a mapping of machine classes")

    def to_run_configuration(self, single_machine: bool = False, use_max: bool = False) -> RunConfiguration:
        inputs = self.inputs if self.inputs is not None else self.input
        outputs = self.outputs if self.outputs is not None else self.output
        return RunConfiguration(
            inputs=dict(inputs or {}),
            outputs=list(outputs or []),
            machines=self.machines,
            fleet=self.fleet,
            use_static_ips=self.use_static_ips,
            single_machine=single_machine,
            use_max=use_max,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Workflow Version
# ═══════════════════════════════════════════════════════════════════════════════

class EndpointSchema(BaseModel):
    """Connection endpoint as stored remotely."""
    id: str = Field(..., description="Slash-separated endpoint ID")

    model_config = ConfigDict(extra="allow")


class ConnectionSchema(BaseModel):
    """Directed edge between two ports."""
    source: EndpointSchema
    destination: EndpointSchema

    model_config = ConfigDict(extra="allow")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: EndpointSchema) -> EndpointSchema:
        try:
            SourceEndpoint.parse(v.id)
        except BadReferenceError as e:
            raise ValueError(e.message)
        return v

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: EndpointSchema) -> EndpointSchema:
        try:
            DestinationEndpoint.parse(v.id)
        except BadReferenceError as e:
            raise ValueError(e.message)
        return v


class WorkflowDataSchema(BaseModel):
    """The graph section of a workflow version."""
    nodes: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    connections: List[ConnectionSchema] = Field(default_factory=list)
    primitive_nodes: Dict[str, Dict[str, Any]] = Field(default_factory=dict, alias="primitiveNodes")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class WorkflowVersionModel(BaseModel):
    """Workflow version as fetched from the remote service."""
    id: Optional[str] = Field(None, description="Version ID")
    name: Optional[str] = Field(None, description="Workflow name")
    version_number: Optional[int] = Field(None, description="Sequential version number")
    workflow_info: Optional[str] = Field(None, description="Owning workflow ID")
    data: WorkflowDataSchema = Field(default_factory=WorkflowDataSchema)

    model_config = ConfigDict(extra="allow")

    def to_graph(self) -> WorkflowVersionGraph:
        return WorkflowVersionGraph.from_dict(self.data.model_dump(by_alias=True))

    @classmethod
    def from_graph(cls, graph: WorkflowVersionGraph, **fields: Any) -> "WorkflowVersionModel":
        """Wrap a graph into a version payload ready to be submitted."""
        return cls.model_validate({**fields, "data": graph.to_dict()})

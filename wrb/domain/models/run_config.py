"""
Run Configuration Domain Model.

A parsed run configuration: named input values, desired outputs and the
machine request. Input keys come in two shapes:

- `<primitive-ref>`: overwrite an existing primitive node (single value)
- `<node-ref>.<param>`: rewire a node parameter (single value or list)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import InvalidLiteralFormatError


@dataclass(frozen=True)
class PrimitiveInput:
    """Value for an existing primitive node."""
    key: str
    value: Any


@dataclass(frozen=True)
class NodeParameterInput:
    """Values for a node parameter, in wiring order."""
    key: str
    values: Tuple[Any, ...]


def split_inputs(inputs: Dict[str, Any]) -> Tuple[List[PrimitiveInput], List[NodeParameterInput]]:
    """
    Split an input mapping into primitive entries and node-parameter entries.

    Mapping order is preserved within each group.

    Raises:
        InvalidLiteralFormatError: A list was supplied for a primitive key
    """
    primitive_inputs: List[PrimitiveInput] = []
    node_inputs: List[NodeParameterInput] = []

    for key, value in inputs.items():
        if "." in key:
            values = tuple(value) if isinstance(value, (list, tuple)) else (value,)
            node_inputs.append(NodeParameterInput(key=key, values=values))
        elif isinstance(value, (list, tuple)):
            raise InvalidLiteralFormatError(
                f"got a list of values {list(value)!r}; primitive nodes take a single value, "
                f"use '{key}.<parameter-name>' to pass several values to a node",
                key=key,
            )
        else:
            primitive_inputs.append(PrimitiveInput(key=key, value=value))

    return primitive_inputs, node_inputs


@dataclass
class RunConfiguration:
    """
    Everything a user asked for when starting a run.

    Attributes:
        inputs: Reference string -> scalar or list of scalars
        outputs: Node references whose outputs should be collected
        machines: None, an int, "max", or a class -> count mapping
        fleet: Fleet name (resolved outside the core)
        use_static_ips: Route traffic through static IPs
        single_machine: Tool mode, only one machine may be allocated
        use_max: Default to the class maxima when no machines are requested
    """
    inputs: Dict[str, Any] = field(default_factory=dict)
    outputs: List[str] = field(default_factory=list)
    machines: Any = None
    fleet: Optional[str] = None
    use_static_ips: bool = False
    single_machine: bool = False
    use_max: bool = False

    def split_inputs(self) -> Tuple[List[PrimitiveInput], List[NodeParameterInput]]:
        return split_inputs(self.inputs)


__all__ = [
    "PrimitiveInput",
    "NodeParameterInput",
    "RunConfiguration",
    "split_inputs",
]

"""
Workflow Run Builder Exceptions.

Structured errors raised while resolving references, normalizing literal
values, wiring connections and validating machine allocations.

Design Principles:
- Hierarchy: everything inherits from WRBError so callers can abort a
  submission with a single handler
- Rich context: every error carries a stable code and, once known, the
  configuration key that caused it
- Four families mirror the failure classes of a configuration apply:
  reference, input type, allocation and structural errors
"""

from typing import Any, Dict, Iterable, List, Optional


class WRBError(Exception):
    """
    Base exception for workflow run builder errors.

    Attributes:
        code: Stable machine-readable error code
        message: Human-readable description
        key: Configuration key that triggered the error (if known)
    """

    code = "WRB_ERROR"

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key

    def attach_key(self, key: str) -> "WRBError":
        """Record the offending configuration key unless one is already set."""
        if self.key is None:
            self.key = key
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "key": self.key, "message": self.message}

    def __str__(self) -> str:
        if self.key:
            return f"{self.key}: {self.message}"
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Reference Errors
# ═══════════════════════════════════════════════════════════════════════════════


class NodeReferenceError(WRBError):
    """A reference string could not be turned into a node or parameter."""

    code = "REFERENCE_ERROR"


class UndefinedReferenceError(NodeReferenceError):
    """No node, label or primitive matches the reference."""

    code = "UNDEFINED_REFERENCE"

    def __init__(self, ref: str, what: str = "node", key: Optional[str] = None):
        super().__init__(f"{what} reference '{ref}' was not found in IDs or labels", key)
        self.ref = ref


class AmbiguousReferenceError(NodeReferenceError):
    """
    Several nodes share the referenced label.

    The caller has to use one of the candidate IDs instead.
    """

    code = "AMBIGUOUS_REFERENCE"

    def __init__(self, ref: str, candidates: Iterable[str], key: Optional[str] = None):
        self.candidates: List[str] = sorted(candidates)
        super().__init__(
            f"multiple nodes are labeled '{ref}' ({', '.join(self.candidates)}), use a node ID instead",
            key,
        )
        self.ref = ref


class BadReferenceError(NodeReferenceError):
    """The reference is malformed (e.g. more than one '.' separator)."""

    code = "BAD_REFERENCE"


class IncompleteReferenceError(BadReferenceError):
    """
    A label matched a tool or module node without naming a parameter.

    Tool parameters are only addressable with the `<node>.<param>` form.
    """

    code = "INCOMPLETE_REFERENCE"

    def __init__(self, ref: str, key: Optional[str] = None):
        super().__init__(
            f"incomplete input name for a tool node: '{ref}', use '{ref}.<parameter-name>' instead",
            key,
        )
        self.ref = ref


class UnknownParameterError(NodeReferenceError):
    """The node exists but has no input port with the given name."""

    code = "UNKNOWN_PARAMETER"

    def __init__(self, node_id: str, param: str, key: Optional[str] = None):
        super().__init__(f"parameter '{param}' not found for node '{node_id}'", key)
        self.node_id = node_id
        self.param = param


# ═══════════════════════════════════════════════════════════════════════════════
# Input Type Errors
# ═══════════════════════════════════════════════════════════════════════════════


class InputTypeError(WRBError):
    """A supplied value does not fit the parameter it is wired to."""

    code = "INPUT_TYPE_ERROR"


class TypeMismatchError(InputTypeError):
    """The inferred kind of a value disagrees with the declared parameter type."""

    code = "TYPE_MISMATCH"

    def __init__(self, expected: str, supplied: str, value: Any = None, key: Optional[str] = None):
        hint = " (or integer, if a number is needed)" if expected.lower() == "string" else ""
        super().__init__(
            f"value {value!r} should be of type {expected.lower()}{hint} instead of {supplied.lower()}",
            key,
        )
        self.expected = expected
        self.supplied = supplied
        self.value = value


class InvalidLiteralFormatError(InputTypeError):
    """The value has the right kind but an unacceptable format."""

    code = "INVALID_LITERAL_FORMAT"


# ═══════════════════════════════════════════════════════════════════════════════
# Allocation Errors
# ═══════════════════════════════════════════════════════════════════════════════


class AllocationError(WRBError):
    """A machine allocation request cannot be satisfied."""

    code = "ALLOCATION_ERROR"


class CannotAllocateError(AllocationError):
    """The requested machine class is not offered by the fleet."""

    code = "CANNOT_ALLOCATE"

    def __init__(self, machine_class: str, key: Optional[str] = None):
        super().__init__(f"machine class '{machine_class}' is not available for this workflow", key)
        self.machine_class = machine_class


class MachineOverflowError(AllocationError):
    """More machines were requested than the class maximum allows."""

    code = "MACHINE_OVERFLOW"

    def __init__(self, machine_class: str, requested: int, maxima: str, key: Optional[str] = None):
        super().__init__(
            f"invalid number of machines for '{machine_class}' ({requested}); "
            f"the maximum number of machines you can allocate for this workflow: {maxima}",
            key,
        )
        self.machine_class = machine_class
        self.requested = requested
        self.maxima = maxima


class InvalidMachineCountError(AllocationError):
    """The machine request is malformed (negative, non-numeric, unknown class)."""

    code = "INVALID_MACHINE_COUNT"


# ═══════════════════════════════════════════════════════════════════════════════
# Structural Errors
# ═══════════════════════════════════════════════════════════════════════════════


class StructuralError(WRBError):
    """The graph itself is inconsistent."""

    code = "STRUCTURAL_ERROR"


class DanglingConnectionError(StructuralError):
    """A connection references a node that does not exist."""

    code = "DANGLING_CONNECTION"


class MissingNodeDuringCleanupError(StructuralError):
    """A primitive scheduled for removal was already gone."""

    code = "MISSING_NODE_DURING_CLEANUP"


class ConnectionNotFoundError(StructuralError):
    """No connection matches the endpoints to disconnect."""

    code = "CONNECTION_NOT_FOUND"


class GraphCycleError(StructuralError):
    """The connections form a cycle, so no layout height exists."""

    code = "GRAPH_CYCLE"


__all__ = [
    "WRBError",
    "NodeReferenceError",
    "UndefinedReferenceError",
    "AmbiguousReferenceError",
    "BadReferenceError",
    "IncompleteReferenceError",
    "UnknownParameterError",
    "InputTypeError",
    "TypeMismatchError",
    "InvalidLiteralFormatError",
    "AllocationError",
    "CannotAllocateError",
    "MachineOverflowError",
    "InvalidMachineCountError",
    "StructuralError",
    "DanglingConnectionError",
    "MissingNodeDuringCleanupError",
    "ConnectionNotFoundError",
    "GraphCycleError",
]

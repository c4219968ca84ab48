"""
Primitive Node Manager Implementation.

Creates, normalizes and numbers the literal-value nodes of a graph.

Value rules per kind:
- STRING: strings as-is, integers and floats stringified, booleans rejected
- BOOLEAN: real booleans only, labelled "true"/"false"
- FILE: http(s) URLs, stored-file references, or an existing local path
  (rewritten to the upload prefix and marked as pending upload)
- FOLDER: http(s) URLs of a git repository (ending in ".git")
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional

from wrb.config import PrimitiveConfig
from wrb.domain.interfaces.file_probe import IFileProbe
from wrb.domain.models.graph import PrimitiveKind, PrimitiveNode, WorkflowVersionGraph
from wrb.domain.models.exceptions import (
    InvalidLiteralFormatError,
    MissingNodeDuringCleanupError,
    TypeMismatchError,
    UndefinedReferenceError,
)

logger = logging.getLogger(__name__)

URL_SCHEMES = ("http://", "https://")

# Inferred value kinds each declared parameter type accepts
ACCEPTED_KINDS: Dict[PrimitiveKind, FrozenSet[PrimitiveKind]] = {
    PrimitiveKind.STRING: frozenset({PrimitiveKind.STRING}),
    PrimitiveKind.BOOLEAN: frozenset({PrimitiveKind.BOOLEAN}),
    PrimitiveKind.FILE: frozenset({PrimitiveKind.FILE, PrimitiveKind.STRING}),
    PrimitiveKind.FOLDER: frozenset({PrimitiveKind.FOLDER, PrimitiveKind.STRING}),
}


@dataclass(frozen=True)
class NormalizedValue:
    """A literal after normalization, ready to be stored on a primitive."""
    value: Any
    label: str
    pending_upload: bool = False


def is_git_url(value: str) -> bool:
    return value.startswith(URL_SCHEMES) and value.endswith(".git")


class PrimitiveNodeManager:
    """
    Manages primitive nodes of one graph during one apply pass.

    IDs handed out by `new_id` or freed by `remove` are remembered, so an ID
    is never reused within the same pass.
    """

    def __init__(
        self,
        graph: WorkflowVersionGraph,
        config: Optional[PrimitiveConfig] = None,
        file_probe: Optional[IFileProbe] = None,
    ):
        """
        Initialize the primitive manager.

        Args:
            graph: Graph whose primitives are managed (mutated in place)
            config: Value normalization settings
            file_probe: Local file check for FILE values (local paths are rejected without one)
        """
        self._graph = graph
        self._config = config or PrimitiveConfig()
        self._file_probe = file_probe
        self._issued: Dict[PrimitiveKind, int] = {}

    # ═══════════════════════════════════════════════════════════════
    # Typing
    # ═══════════════════════════════════════════════════════════════

    def _is_stored_reference(self, value: str) -> bool:
        return value.startswith(tuple(self._config.stored_file_prefixes))

    def infer_kind(self, value: Any) -> PrimitiveKind:
        """
        Infer the literal kind of a raw configuration value.

        Raises:
            InvalidLiteralFormatError: The value is not a scalar
        """
        if isinstance(value, bool):
            return PrimitiveKind.BOOLEAN
        if isinstance(value, (int, float)):
            return PrimitiveKind.STRING
        if isinstance(value, str):
            if is_git_url(value):
                return PrimitiveKind.FOLDER
            if self._is_stored_reference(value):
                return PrimitiveKind.FILE
            return PrimitiveKind.STRING
        raise InvalidLiteralFormatError(
            f"unsupported value type {type(value).__name__}; "
            f"only strings, numbers and booleans can be used as input values"
        )

    def check_compatible(self, declared_type: str, value: Any) -> PrimitiveKind:
        """
        Check a value against a declared parameter type.

        Returns:
            Kind of primitive to create for the value

        Raises:
            TypeMismatchError: The value's kind is not accepted by the parameter
        """
        supplied = self.infer_kind(value)
        declared = PrimitiveKind.from_type(declared_type)
        if declared is None or supplied not in ACCEPTED_KINDS[declared]:
            raise TypeMismatchError(str(declared_type), supplied.value, value)
        return declared

    # ═══════════════════════════════════════════════════════════════
    # Normalization
    # ═══════════════════════════════════════════════════════════════

    def normalize(self, kind: PrimitiveKind, raw: Any) -> NormalizedValue:
        """
        Normalize a raw value for a primitive of the given kind.

        Raises:
            InvalidLiteralFormatError: The value has an unacceptable format
        """
        if kind == PrimitiveKind.BOOLEAN:
            if not isinstance(raw, bool):
                raise InvalidLiteralFormatError(f"boolean input must be true or false, got {raw!r}")
            return NormalizedValue(raw, "true" if raw else "false")

        if kind == PrimitiveKind.STRING:
            if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
                raise InvalidLiteralFormatError(f"string input must be a string or a number, got {raw!r}")
            value = raw if isinstance(raw, str) else str(raw)
            return NormalizedValue(value, value)

        if not isinstance(raw, str):
            raise InvalidLiteralFormatError(f"{kind.value.lower()} input must be a string, got {raw!r}")

        if kind == PrimitiveKind.FILE:
            return self._normalize_file(raw)
        if not is_git_url(raw):
            raise InvalidLiteralFormatError(
                f"folder input must be a git repository URL (http:// or https://, ending in .git), got {raw!r}"
            )
        return NormalizedValue(raw, raw)

    def _normalize_file(self, raw: str) -> NormalizedValue:
        if raw.startswith(URL_SCHEMES) or self._is_stored_reference(raw):
            return NormalizedValue(raw, raw)

        if self._config.allow_local_files and self._file_probe is not None and self._file_probe.is_file(raw):
            logger.debug(f"Local file '{raw}' will be uploaded before submission")
            reference = f"{self._config.upload_prefix}{raw}"
            return NormalizedValue(reference, reference, pending_upload=True)

        raise InvalidLiteralFormatError(
            f"file input must be a URL (http:// or https://), a stored file reference "
            f"({', '.join(self._config.stored_file_prefixes)}) or an existing local file, got {raw!r}"
        )

    # ═══════════════════════════════════════════════════════════════
    # Lifecycle
    # ═══════════════════════════════════════════════════════════════

    def new_id(self, kind: PrimitiveKind) -> str:
        """Next free primitive ID of a kind: highest suffix seen plus one."""
        highest = self._issued.get(kind, 0)
        candidates = list(self._graph.primitive_nodes)
        candidates.extend(c.source.node_id for c in self._graph.connections)
        for candidate in candidates:
            if PrimitiveKind.from_id(candidate) != kind:
                continue
            index = PrimitiveKind.parse_index(candidate)
            if index is not None and index > highest:
                highest = index
        self._issued[kind] = highest + 1
        return kind.format_id(highest + 1)

    def create(self, kind: PrimitiveKind, raw: Any) -> PrimitiveNode:
        """Normalize a value and add a new primitive holding it."""
        normalized = self.normalize(kind, raw)
        primitive = PrimitiveNode(
            id=self.new_id(kind),
            kind=kind,
            value=normalized.value,
            label=normalized.label,
            pending_upload=normalized.pending_upload,
        )
        self._graph.add_primitive(primitive)
        logger.debug(f"Created primitive {primitive.id} = {primitive.value!r}")
        return primitive

    def update_value(self, primitive_id: str, raw: Any) -> PrimitiveNode:
        """
        Overwrite the value of an existing primitive.

        Raises:
            UndefinedReferenceError: No such primitive
            TypeMismatchError: The value does not fit the primitive's kind
        """
        primitive = self._graph.get_primitive(primitive_id)
        if primitive is None:
            raise UndefinedReferenceError(primitive_id, what="primitive node")
        self.check_compatible(primitive.kind.value, raw)
        normalized = self.normalize(primitive.kind, raw)
        primitive.value = normalized.value
        primitive.label = normalized.label
        primitive.pending_upload = normalized.pending_upload
        logger.debug(f"Updated primitive {primitive_id} = {primitive.value!r}")
        return primitive

    def remove(self, primitive_id: str) -> PrimitiveNode:
        """
        Delete a primitive.

        Raises:
            MissingNodeDuringCleanupError: The primitive was already gone
        """
        primitive = self._graph.primitive_nodes.pop(primitive_id, None)
        if primitive is None:
            raise MissingNodeDuringCleanupError(f"primitive node '{primitive_id}' does not exist")
        index = primitive.index
        if index is not None and index > self._issued.get(primitive.kind, 0):
            self._issued[primitive.kind] = index
        logger.debug(f"Removed primitive {primitive_id}")
        return primitive

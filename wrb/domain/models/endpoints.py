"""
Connection Endpoint Value Objects.

The remote schema encodes connection endpoints as slash-separated strings:

- source:      output/<nodeID>/<port>
- destination: input/<nodeID>/<port>/<sourceNodeID>

The destination embeds the source node so that several literals can feed one
multi-valued port without colliding. Older versions omit the source segment,
so it is optional when parsing.

These value objects keep the parsing and formatting in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import BadReferenceError

SOURCE_PREFIX = "output"
DESTINATION_PREFIX = "input"
PRIMITIVE_OUTPUT_PORT = "output"


@dataclass(frozen=True)
class SourceEndpoint:
    """
    Output side of a connection.

    Examples:
        >>> SourceEndpoint.parse("output/string-input-1/output").node_id
        'string-input-1'
    """
    node_id: str
    port: str = PRIMITIVE_OUTPUT_PORT

    @classmethod
    def parse(cls, raw: str) -> "SourceEndpoint":
        parts = raw.split("/")
        if len(parts) != 3 or parts[0] != SOURCE_PREFIX or not parts[1] or not parts[2]:
            raise BadReferenceError(f"connection source is not formatted correctly: {raw}")
        return cls(node_id=parts[1], port=parts[2])

    def format(self) -> str:
        return f"{SOURCE_PREFIX}/{self.node_id}/{self.port}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class DestinationEndpoint:
    """
    Input side of a connection.

    `source_id` is the node feeding this port; it is None only for legacy
    destinations written without the trailing segment.
    """
    node_id: str
    port: str
    source_id: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "DestinationEndpoint":
        parts = raw.split("/")
        if len(parts) not in (3, 4) or parts[0] != DESTINATION_PREFIX or not parts[1] or not parts[2]:
            raise BadReferenceError(f"connection destination is not formatted correctly: {raw}")
        source_id = parts[3] if len(parts) == 4 and parts[3] else None
        return cls(node_id=parts[1], port=parts[2], source_id=source_id)

    def format(self) -> str:
        if self.source_id is None:
            return f"{DESTINATION_PREFIX}/{self.node_id}/{self.port}"
        return f"{DESTINATION_PREFIX}/{self.node_id}/{self.port}/{self.source_id}"

    def matches(self, node_id: str, port: str) -> bool:
        """True when this endpoint targets the given node parameter."""
        return self.node_id == node_id and self.port == port

    def __str__(self) -> str:
        return self.format()


__all__ = [
    "SourceEndpoint",
    "DestinationEndpoint",
    "PRIMITIVE_OUTPUT_PORT",
]

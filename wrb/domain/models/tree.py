"""
Display Tree Domain Models.

The display tree reads from final outputs back to sources: a node's children
are the nodes supplying its inputs, its parents are the nodes consuming its
output. Roots are real nodes that nothing consumes.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Iterator, List, Optional


TASK_STATUSES = ("PENDING", "RUNNING", "SUCCEEDED", "FAILED", "STOPPING", "STOPPED")


@dataclass(eq=False)
class TreeNode:
    """
    One node of the display forest.

    Children and parents are object references, so equality is identity.
    """
    name: str
    label: str = ""
    is_primitive: bool = False
    input_count: int = 0
    height: int = 0
    status: str = "pending"
    output_status: str = "no outputs"
    duration: timedelta = field(default_factory=timedelta)
    task_group: bool = False
    task_count: int = 0
    task_status: Dict[str, int] = field(default_factory=dict)
    children: List["TreeNode"] = field(default_factory=list, repr=False)
    parents: List["TreeNode"] = field(default_factory=list, repr=False)

    def add_child(self, child: "TreeNode") -> None:
        """Link a supplier below this node; duplicate links are ignored."""
        if child not in self.children:
            self.children.append(child)
        if self not in child.parents:
            child.parents.append(self)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_root(self) -> bool:
        return not self.parents


@dataclass
class Forest:
    """All tree nodes keyed by name, plus the roots sorted by name."""
    nodes: Dict[str, TreeNode] = field(default_factory=dict)
    roots: List[TreeNode] = field(default_factory=list)

    def get(self, name: str) -> Optional[TreeNode]:
        return self.nodes.get(name)

    def __iter__(self) -> Iterator[TreeNode]:
        for name in sorted(self.nodes):
            yield self.nodes[name]

    def __len__(self) -> int:
        return len(self.nodes)

    def heights(self) -> Dict[str, int]:
        return {name: node.height for name, node in self.nodes.items()}

    def edges(self) -> Iterator[tuple]:
        """(consumer, supplier) pairs."""
        for node in self:
            for child in node.children:
                yield node, child


__all__ = ["TreeNode", "Forest", "TASK_STATUSES"]

"""
Machine Allocation Domain Models.

A fleet offers compute machines in three size classes. Per class, a count of
None means the class is not offered (or not requested); zero never appears in
a validated allocation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple


class MachineClass(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @classmethod
    def parse(cls, name: str) -> Optional["MachineClass"]:
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            return None


@dataclass
class Machines:
    """
    Per-class machine counts.

    Used both for fleet maxima and for a validated allocation.
    """
    small: Optional[int] = None
    medium: Optional[int] = None
    large: Optional[int] = None

    def get(self, machine_class: MachineClass) -> Optional[int]:
        return getattr(self, machine_class.value)

    def set(self, machine_class: MachineClass, count: Optional[int]) -> None:
        setattr(self, machine_class.value, count)

    def items(self) -> Iterator[Tuple[MachineClass, Optional[int]]]:
        for machine_class in MachineClass:
            yield machine_class, self.get(machine_class)

    def offered(self) -> Iterator[Tuple[MachineClass, int]]:
        """Classes with a count set, in small/medium/large order."""
        for machine_class, count in self.items():
            if count is not None:
                yield machine_class, count

    @property
    def total(self) -> int:
        return sum(count for _, count in self.offered())

    def is_empty(self) -> bool:
        return all(count is None for _, count in self.items())

    def format(self, inline: bool = True) -> str:
        """
        Human-readable summary.

        Examples:
            >>> Machines(small=2, large=5).format()
            'small: 2, large: 5'
        """
        parts = [f"{c.value}: {count}" for c, count in self.offered()]
        if inline:
            return ", ".join(parts)
        return "".join(f" {part}\n" for part in parts)

    def to_dict(self) -> Dict[str, int]:
        return {c.value: count for c, count in self.offered()}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Machines":
        machines = cls()
        for name, count in (data or {}).items():
            machine_class = MachineClass.parse(name)
            if machine_class is not None and count is not None:
                machines.set(machine_class, int(count))
        return machines

    @classmethod
    def from_fleet(cls, entries: Iterable[Dict[str, Any]]) -> "Machines":
        """
        Currently available machines of a fleet.

        Args:
            entries: Fleet machine records with `name`, `total` and `running`
        """
        machines = cls()
        for entry in entries:
            machine_class = MachineClass.parse(entry.get("name", ""))
            if machine_class is None:
                continue
            machines.set(machine_class, int(entry.get("total", 0)) - int(entry.get("running", 0)))
        return machines


@dataclass
class MachineAllocation:
    """
    Validated machine allocation for one run.

    `parallelism` is set instead of per-class counts when a single uniform
    count was requested.
    """
    machines: Machines = field(default_factory=Machines)
    parallelism: Optional[int] = None

    def format(self, inline: bool = True) -> str:
        if self.parallelism is not None:
            return f"parallelism: {self.parallelism}"
        return self.machines.format(inline)

    def to_dict(self) -> Dict[str, Any]:
        if self.parallelism is not None:
            return {"parallelism": self.parallelism}
        return {"machines": self.machines.to_dict()}


__all__ = ["MachineClass", "Machines", "MachineAllocation"]

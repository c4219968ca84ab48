"""
Machine Allocation Validator Implementation.

Validates a run's machine request against the per-class maxima of the fleet.

Accepted requests:
- None: one machine of each offered class (or the maxima with `use_max`)
- int: uniform parallelism, bounded by the fleet total
- "max" / "maximum": every offered class at its maximum
- mapping: class name -> int or "max"; zero omits the class

Single-machine (tool) mode allows exactly one machine of one class.
"""

import logging
from typing import Any, Dict, Optional

from wrb.domain.interfaces.allocation import IMachineAllocationValidator
from wrb.domain.models.machines import MachineAllocation, MachineClass, Machines
from wrb.domain.models.exceptions import (
    CannotAllocateError,
    InvalidMachineCountError,
    MachineOverflowError,
)

logger = logging.getLogger(__name__)

MAX_KEYWORDS = ("max", "maximum")


def _is_max_keyword(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in MAX_KEYWORDS


class MachineAllocationValidator(IMachineAllocationValidator):
    """
    Validates machine requests for one fleet.

    The maxima are passed in explicitly; nothing is read from shared state,
    so validators for different fleets can be used side by side.
    """

    def __init__(
        self,
        maxima: Optional[Machines] = None,
        total: Optional[int] = None,
        single_machine: bool = False,
        use_max: bool = False,
    ):
        """
        Initialize the validator.

        Args:
            maxima: Per-class maxima; None for a class means "not offered"
            total: Fleet-wide limit for a uniform count (sum of maxima if omitted)
            single_machine: Tool mode, only one machine may be allocated
            use_max: Default to the maxima when nothing is requested
        """
        self._maxima = maxima
        self._total = total
        self._single_machine = single_machine
        self._use_max = use_max

    def _require_maxima(self) -> Machines:
        if self._maxima is None:
            raise InvalidMachineCountError("no maximum machines specified for this workflow")
        return self._maxima

    def _maxima_text(self) -> str:
        return self._require_maxima().format(inline=True) or "none"

    def validate(self, request: Any = None) -> MachineAllocation:
        if request is None:
            allocation = self._default_allocation()
        elif isinstance(request, bool):
            raise InvalidMachineCountError(f"invalid machine request: {request!r}")
        elif isinstance(request, int):
            allocation = self._uniform_allocation(request)
        elif _is_max_keyword(request) and self._single_machine:
            allocation = MachineAllocation(machines=Machines(large=1))
        elif _is_max_keyword(request):
            offered = [c for c, count in self._require_maxima().offered() if count > 0]
            allocation = self._mapping_allocation({c.value: "max" for c in offered})
        elif isinstance(request, dict):
            allocation = self._mapping_allocation(request)
        else:
            raise InvalidMachineCountError(
                f"invalid machine request: {request!r}; use a number, max/maximum, "
                f"or a mapping of small/medium/large to a number or max/maximum"
            )

        logger.debug(f"Validated machine allocation: {allocation.format()}")
        return allocation

    # ═══════════════════════════════════════════════════════════════
    # Request Shapes
    # ═══════════════════════════════════════════════════════════════

    def _default_allocation(self) -> MachineAllocation:
        if self._single_machine:
            machine_class = MachineClass.LARGE if self._use_max else MachineClass.SMALL
            machines = Machines()
            machines.set(machine_class, 1)
            return MachineAllocation(machines=machines)

        machines = Machines()
        for machine_class, maximum in self._require_maxima().offered():
            if maximum > 0:
                machines.set(machine_class, maximum if self._use_max else 1)
        if machines.is_empty():
            raise InvalidMachineCountError("the fleet does not offer any machines for this workflow")
        return MachineAllocation(machines=machines)

    def _uniform_allocation(self, count: int) -> MachineAllocation:
        if count <= 0:
            raise InvalidMachineCountError(f"number of machines must be at least 1, got {count}")
        if self._single_machine:
            if count > 1:
                raise InvalidMachineCountError("only one machine can be used in single-machine mode")
            return MachineAllocation(parallelism=1)

        limit = self._total if self._total is not None else self._require_maxima().total
        if count > limit:
            raise MachineOverflowError("machines", count, self._maxima_text())
        return MachineAllocation(parallelism=count)

    def _mapping_allocation(self, request: Dict[str, Any]) -> MachineAllocation:
        requested = Machines()
        for name, value in request.items():
            machine_class = MachineClass.parse(name)
            if machine_class is None:
                raise InvalidMachineCountError(
                    f"unrecognized machine class '{name}'; machine class can be small, medium or large"
                )
            requested.set(machine_class, self._parse_count(machine_class, value))

        if requested.is_empty():
            # Every class skipped: same as no request.
            return self._default_allocation()

        if self._single_machine:
            if len(list(requested.offered())) > 1 or requested.total > 1:
                raise InvalidMachineCountError("only one machine of a single class can be used in single-machine mode")
            return MachineAllocation(machines=requested)

        maxima = self._require_maxima()
        for machine_class, count in requested.offered():
            maximum = maxima.get(machine_class)
            if maximum is None or maximum <= 0:
                raise CannotAllocateError(machine_class.value)
            if count > maximum:
                raise MachineOverflowError(machine_class.value, count, self._maxima_text())
        return MachineAllocation(machines=requested)

    def _parse_count(self, machine_class: MachineClass, value: Any) -> Optional[int]:
        if _is_max_keyword(value):
            if self._single_machine:
                return 1
            maximum = self._require_maxima().get(machine_class)
            if maximum is None or maximum <= 0:
                raise CannotAllocateError(machine_class.value)
            return maximum

        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidMachineCountError(
                f"invalid number of '{machine_class.value}' machines: {value!r}; use a number or max/maximum"
            )
        if value < 0:
            raise InvalidMachineCountError(f"number of '{machine_class.value}' machines cannot be negative")
        return value or None

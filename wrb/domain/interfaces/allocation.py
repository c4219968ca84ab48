"""
Machine Allocation Interface.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..models.machines import MachineAllocation


class IMachineAllocationValidator(ABC):
    """Validates a machine request against the maxima of a fleet."""

    @abstractmethod
    def validate(self, request: Any = None) -> MachineAllocation:
        """
        Validate a machine request.

        Args:
            request: None, an int, "max", or a class -> count mapping

        Returns:
            Validated allocation

        Raises:
            AllocationError: The request cannot be satisfied
        """
        pass

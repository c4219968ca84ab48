"""Domain Interfaces - Abstract contracts for application services and ports."""

from .file_probe import IFileProbe
from .graph_services import INodeResolver, IConfigApplier
from .layout import ITreeProjector, ILayoutEngine
from .allocation import IMachineAllocationValidator

__all__ = [
    "IFileProbe",
    "INodeResolver",
    "IConfigApplier",
    "ITreeProjector",
    "ILayoutEngine",
    "IMachineAllocationValidator",
]

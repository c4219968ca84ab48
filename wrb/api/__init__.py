"""API Layer - Boundary schemas for run configurations and workflow versions."""

from .schemas import (
    RunConfigModel,
    EndpointSchema,
    ConnectionSchema,
    WorkflowDataSchema,
    WorkflowVersionModel,
)

__all__ = [
    "RunConfigModel",
    "EndpointSchema",
    "ConnectionSchema",
    "WorkflowDataSchema",
    "WorkflowVersionModel",
]

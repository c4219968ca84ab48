"""Application Layer - Services orchestrating the domain."""

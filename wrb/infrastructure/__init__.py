"""Infrastructure Layer - Event bus and filesystem adapters."""

"""Domain Layer - Models, interfaces and events of the run builder."""

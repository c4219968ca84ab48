"""
WRB Configuration.

Centralized configuration for the Workflow Run Builder.

Supports three modes:
- Testing: no filesystem access, graph validation after every apply
- Development: local files allowed, graph validation, verbose logging
- Production: local files allowed, quiet logging

Usage:
    from wrb.config import WRBConfig

    # For testing
    config = WRBConfig.for_testing()

    # For development
    config = WRBConfig.for_development()

    # From environment
    config = WRBConfig.from_env()
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


# ═══════════════════════════════════════════════════════════════
# Layout Configuration
# ═══════════════════════════════════════════════════════════════


@dataclass
class LayoutConfig:
    """
    Display layout constants for the remote visual editor.

    Attributes:
        node_distance: Base spacing between nodes on both axes
        y_scale: Multiplier applied to the vertical position
        width_divisor: Inputs per extra spacing step for a wide node
        previous_width_divisor: Inputs per extra step for the previous height
    """
    node_distance: float = 400.0
    y_scale: float = 1.2
    width_divisor: int = 15
    previous_width_divisor: int = 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_distance": self.node_distance,
            "y_scale": self.y_scale,
            "width_divisor": self.width_divisor,
            "previous_width_divisor": self.previous_width_divisor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutConfig":
        return cls(
            node_distance=float(data.get("node_distance", 400.0)),
            y_scale=float(data.get("y_scale", 1.2)),
            width_divisor=int(data.get("width_divisor", 15)),
            previous_width_divisor=int(data.get("previous_width_divisor", 10)),
        )


# ═══════════════════════════════════════════════════════════════
# Primitive Value Configuration
# ═══════════════════════════════════════════════════════════════


@dataclass
class PrimitiveConfig:
    """
    Literal value normalization settings.

    Attributes:
        stored_file_prefixes: Prefixes of references to files already stored remotely
        upload_prefix: Prefix given to local files that still need uploading
        allow_local_files: Accept existing local paths for FILE parameters
    """
    stored_file_prefixes: List[str] = field(
        default_factory=lambda: ["trickest://file/", "trickest://output/"]
    )
    upload_prefix: str = "trickest://file/"
    allow_local_files: bool = True

    @classmethod
    def for_testing(cls) -> "PrimitiveConfig":
        return cls(allow_local_files=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stored_file_prefixes": list(self.stored_file_prefixes),
            "upload_prefix": self.upload_prefix,
            "allow_local_files": self.allow_local_files,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrimitiveConfig":
        defaults = cls()
        return cls(
            stored_file_prefixes=list(data.get("stored_file_prefixes", defaults.stored_file_prefixes)),
            upload_prefix=data.get("upload_prefix", defaults.upload_prefix),
            allow_local_files=bool(data.get("allow_local_files", defaults.allow_local_files)),
        )


# ═══════════════════════════════════════════════════════════════
# Main Configuration
# ═══════════════════════════════════════════════════════════════


@dataclass
class WRBConfig:
    """
    WRB configuration.

    Attributes:
        layout: Layout constants
        primitives: Literal value normalization settings
        validate_graph: Check graph invariants after every apply
        event_history_size: Events kept by the global event bus
        log_level: Level of the `wrb` logger
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    primitives: PrimitiveConfig = field(default_factory=PrimitiveConfig)

    # Post-apply invariant check
    validate_graph: bool = False

    # Event bus
    event_history_size: int = 1000

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "WRBConfig":
        """
        Create config from environment variables.

        Environment Variables:
            WRB_LOG_LEVEL: Logging level (default: "INFO")
            WRB_VALIDATE_GRAPH: Validate graphs after apply (default: "false")
            WRB_ALLOW_LOCAL_FILES: Accept local paths for FILE inputs (default: "true")
            WRB_NODE_DISTANCE: Layout node spacing (default: 400)
            WRB_EVENT_HISTORY: Event bus history size (default: 1000)

        Returns:
            WRBConfig instance
        """
        return cls(
            layout=LayoutConfig(node_distance=float(os.getenv("WRB_NODE_DISTANCE", "400"))),
            primitives=PrimitiveConfig(allow_local_files=_env_flag("WRB_ALLOW_LOCAL_FILES", "true")),
            validate_graph=_env_flag("WRB_VALIDATE_GRAPH", "false"),
            event_history_size=int(os.getenv("WRB_EVENT_HISTORY", "1000")),
            log_level=os.getenv("WRB_LOG_LEVEL", "INFO"),
        )

    @classmethod
    def for_testing(cls) -> "WRBConfig":
        """
        Create config for unit tests.

        Returns:
            WRBConfig with graph validation on and a small event history
        """
        return cls(
            primitives=PrimitiveConfig.for_testing(),
            validate_graph=True,
            event_history_size=100,
            log_level="DEBUG",
        )

    @classmethod
    def for_development(cls) -> "WRBConfig":
        """Create config for local development."""
        return cls(
            validate_graph=True,
            log_level="DEBUG",
        )

    @classmethod
    def for_production(cls) -> "WRBConfig":
        """Create config for production use."""
        return cls(
            validate_graph=False,
            log_level="WARNING",
        )

    def to_dict(self) -> dict:
        """Serialize config to dictionary."""
        return {
            "layout": self.layout.to_dict(),
            "primitives": self.primitives.to_dict(),
            "validate_graph": self.validate_graph,
            "event_history_size": self.event_history_size,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WRBConfig":
        """Deserialize config from dictionary."""
        return cls(
            layout=LayoutConfig.from_dict(data.get("layout") or {}),
            primitives=PrimitiveConfig.from_dict(data.get("primitives") or {}),
            validate_graph=bool(data.get("validate_graph", False)),
            event_history_size=int(data.get("event_history_size", 1000)),
            log_level=data.get("log_level", "INFO"),
        )


# Global config instance (lazily initialized)
_global_config: Optional[WRBConfig] = None


def get_config() -> WRBConfig:
    """
    Get global WRB configuration.

    Initializes from environment on first call.
    """
    global _global_config
    if _global_config is None:
        _global_config = WRBConfig.from_env()
    return _global_config


def set_config(config: WRBConfig) -> None:
    """
    Set global WRB configuration.

    Useful for tests to override configuration.
    """
    global _global_config
    _global_config = config


def reset_config() -> None:
    """
    Reset global configuration to None.

    Next call to get_config() will reinitialize from environment.
    """
    global _global_config
    _global_config = None

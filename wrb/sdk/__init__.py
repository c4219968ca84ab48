"""
WRB SDK - Preparing workflow runs for submission.

SDK Classes:
    - RunBuilder: Main entry point (facade)
    - PreparedRun: Result of RunBuilder.prepare

Usage:
    from wrb.sdk import RunBuilder
    from wrb.domain.models import Machines

    builder = RunBuilder.create("development")
    prepared = builder.prepare(version_payload, run_config, maxima=Machines(small=3))
"""

from .run_builder import RunBuilder, PreparedRun

__all__ = [
    "RunBuilder",
    "PreparedRun",
]

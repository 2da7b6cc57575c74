"""
Domain models for the GROMACS stage pipeline.

Pure data structures with validation, no business logic.
"""

from .config import GromacsInstall, PipelineConfig
from .stage import (
    StageDefinition,
    StageInvocation,
    RunHandle,
    output_coordinate_name,
)
from .errors import (
    PipelineError,
    ConfigurationMissing,
    PrerequisiteMissing,
    ConfigurationConflict,
    EnvironmentMissing,
    StageFailed,
)

__all__ = [
    "GromacsInstall",
    "PipelineConfig",
    "StageDefinition",
    "StageInvocation",
    "RunHandle",
    "output_coordinate_name",
    "PipelineError",
    "ConfigurationMissing",
    "PrerequisiteMissing",
    "ConfigurationConflict",
    "EnvironmentMissing",
    "StageFailed",
]

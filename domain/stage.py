"""
Stage-related domain models.

Immutable records describing one grompp + mdrun step of the chain.
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional


MDP_SUFFIX = ".mdp"
RUN_INPUT_SUFFIX = ".tpr"


def output_coordinate_name(stage_id: str) -> str:
    """Name of the .gro file mdrun writes for a stage."""
    return f"after_{stage_id}.gro"


@dataclass(frozen=True)
class StageDefinition:
    """One entry of the resolved stage list."""

    stage_id: str

    def __post_init__(self):
        """Validate stage definition."""
        if not self.stage_id:
            raise ValueError("stage_id cannot be empty")

    @classmethod
    def from_config_name(cls, name: str) -> 'StageDefinition':
        """
        Build a stage from an mdp file name.

        Only the last extension is removed, so ``nvt.eq.mdp`` becomes the
        stage ``nvt.eq``.

        Args:
            name: mdp file name as listed or read from the manifest

        Returns:
            StageDefinition for that file
        """
        path = PurePath(name)
        stage_id = str(path.with_suffix("")) if path.suffix else str(path)
        return cls(stage_id=stage_id)

    @property
    def config_file(self) -> str:
        return f"{self.stage_id}{MDP_SUFFIX}"

    @property
    def output_coordinate_file(self) -> str:
        return output_coordinate_name(self.stage_id)

    def __str__(self) -> str:
        return self.stage_id


@dataclass(frozen=True)
class StageInvocation:
    """
    Everything needed to run one stage.

    Created fresh for each stage by the orchestration layer and dropped
    once the stage has advanced.
    """

    stage: StageDefinition
    input_coordinate_file: str
    topology_file: str
    max_warnings: Optional[int] = None
    threads: Optional[int] = None

    def __post_init__(self):
        """Validate invocation."""
        if not self.input_coordinate_file:
            raise ValueError("input_coordinate_file cannot be empty")
        if not self.topology_file:
            raise ValueError("topology_file cannot be empty")

    @property
    def stage_id(self) -> str:
        return self.stage.stage_id

    @property
    def config_file(self) -> str:
        return self.stage.config_file

    @property
    def output_coordinate_file(self) -> str:
        return self.stage.output_coordinate_file


@dataclass(frozen=True)
class RunHandle:
    """Result of a successful grompp call, consumed by mdrun."""

    invocation: StageInvocation

    @property
    def run_input_file(self) -> str:
        return f"{self.invocation.stage_id}{RUN_INPUT_SUFFIX}"

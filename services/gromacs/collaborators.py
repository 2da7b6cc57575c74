"""
GROMACS collaborators.

GromppPreparer turns a StageInvocation into a run input (.tpr) and
MdrunRunner runs it to produce the stage's output .gro file. Both raise
StageFailed on a non-zero exit status; neither retries.
"""

import logging
from pathlib import Path

from domain.config import GromacsInstall
from domain.errors import StageFailed
from domain.stage import RunHandle, StageInvocation
from services.execution_mode import MdrunLaunch
from .commands import grompp_command, mdrun_command
from .invoker import CommandInvoker


class GromppPreparer:
    """Prepare step: runs grompp for a stage."""

    step_name = "grompp"

    def __init__(self, gromacs: GromacsInstall, invoker: CommandInvoker, data_dir: str):
        self.gromacs = gromacs
        self.invoker = invoker
        self.data_dir = data_dir
        self.logger = logging.getLogger(self.__class__.__name__)

    def command(self, invocation: StageInvocation) -> list[str]:
        return grompp_command(self.gromacs, invocation)

    def prepare(self, invocation: StageInvocation) -> RunHandle:
        """
        Preprocess a stage.

        Args:
            invocation: Stage to preprocess

        Returns:
            RunHandle for the mdrun step

        Raises:
            StageFailed: If grompp exits non-zero
        """
        cmd = self.command(invocation)
        self.logger.info(
            f"Preparing stage '{invocation.stage_id}' from {invocation.input_coordinate_file}"
        )
        rc = self.invoker.run(cmd, cwd=self.data_dir)
        if rc != 0:
            raise StageFailed(
                step=cmd[0],
                stage_id=invocation.stage_id,
                config_file=invocation.config_file,
                command=cmd,
                returncode=rc,
            )
        return RunHandle(invocation=invocation)


class MdrunRunner:
    """Run step: runs mdrun (or its MPI / tuned launcher) for a stage."""

    step_name = "mdrun"

    def __init__(self, launch: MdrunLaunch, invoker: CommandInvoker, data_dir: str):
        self.launch = launch
        self.invoker = invoker
        self.data_dir = data_dir
        self.logger = logging.getLogger(self.__class__.__name__)

    def command(self, handle: RunHandle) -> list[str]:
        return mdrun_command(self.launch, handle)

    def execute(self, handle: RunHandle) -> Path:
        """
        Simulate a prepared stage.

        Args:
            handle: Result of the prepare step

        Returns:
            Path of the stage's output .gro file, relative to the data directory

        Raises:
            StageFailed: If the launcher exits non-zero
        """
        invocation = handle.invocation
        cmd = self.command(handle)
        self.logger.info(f"Running stage '{invocation.stage_id}' ({self.launch.mode})")
        rc = self.invoker.run(cmd, cwd=self.data_dir, extra_env=self.launch.extra_env)
        if rc != 0:
            raise StageFailed(
                step=" ".join(self.launch.command),
                stage_id=invocation.stage_id,
                config_file=invocation.config_file,
                command=cmd,
                returncode=rc,
            )
        return Path(invocation.output_coordinate_file)

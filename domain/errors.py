"""
Pipeline error taxonomy.

Every error here is fatal: the run is aborted and the process exits
with the error status.
"""

from typing import Optional, Sequence


class PipelineError(Exception):
    """
    Base class for all fatal pipeline errors.

    ``show_usage`` marks errors caused by how the command was invoked;
    the CLI prints the usage text for them.
    """

    show_usage = False


class ConfigurationMissing(PipelineError):
    """The list of mdp files given on the command line does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Error: {path} is not a file or doesn't exist")


class PrerequisiteMissing(PipelineError):
    """The data directory, initial .gro file or topology file is missing."""

    def __init__(self, message: str, path=None, show_usage: bool = False):
        self.path = path
        self.show_usage = show_usage
        super().__init__(message)


class ConfigurationConflict(PipelineError, ValueError):
    """Options that cannot be combined, or an invalid option value."""

    show_usage = True


class EnvironmentMissing(PipelineError):
    """MPI mode was requested outside of a scheduler allocation."""

    def __init__(self, message: str, variable: Optional[str] = None):
        self.variable = variable
        super().__init__(message)


class StageFailed(PipelineError):
    """An external GROMACS command returned a non-zero exit status."""

    def __init__(
        self,
        step: str,
        stage_id: str,
        config_file: str,
        command: Sequence[str],
        returncode: int,
    ):
        self.step = step
        self.stage_id = stage_id
        self.config_file = config_file
        self.command = tuple(command)
        self.returncode = returncode
        super().__init__(
            f"{step} failed while processing {config_file} "
            f"(exit status {returncode})"
        )

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "stage": self.stage_id,
            "config_file": self.config_file,
            "command": " ".join(self.command),
            "returncode": self.returncode,
        }

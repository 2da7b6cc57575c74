"""
Execution mode selection for mdrun.

Decides once, before any stage runs, how mdrun is launched: plain,
under mpirun across the hosts of a LoadLeveler allocation, or through
g_tune_pme which tunes the PME load and then launches mdrun_mpi itself.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Mapping, Optional

from domain.config import PipelineConfig
from domain.errors import EnvironmentMissing
from utils.paths import read_host_list


logger = logging.getLogger(__name__)

HOST_FILE_VARIABLE = "LOADL_HOSTFILE"

MPIRUN_OPTIONS = (
    "-x", "LD_LIBRARY_PATH",
    "-mca", "btl_openib_ib_timeout", "30",
    "-mca", "btl_openib_ib_min_rnr_timer", "30",
)

TUNE_PME_REPEATS = 2


class ExecutionMode(Enum):
    """How mdrun is launched."""

    SINGLE = auto()
    MPI = auto()
    MPI_TUNED = auto()

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class MdrunLaunch:
    """
    Resolved mdrun launcher.

    ``command`` is the argv prefix the per-stage mdrun arguments are
    appended to; ``extra_env`` is added to the child environment only.
    """

    mode: ExecutionMode
    command: tuple[str, ...]
    extra_env: Mapping[str, str] = field(default_factory=dict)
    host_file: Optional[str] = None
    num_procs: Optional[int] = None

    @property
    def program(self) -> str:
        return self.command[0]


def mpirun_prefix(host_file: str) -> tuple[str, ...]:
    return ("mpirun",) + MPIRUN_OPTIONS + ("-machinefile", host_file)


def select_execution_mode(
    config: PipelineConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> MdrunLaunch:
    """
    Select the mdrun launcher for the run.

    Args:
        config: Validated pipeline configuration
        environ: Environment to look the host file up in (defaults to os.environ)

    Returns:
        MdrunLaunch for every stage of the run

    Raises:
        EnvironmentMissing: MPI mode without a readable host file
    """
    environ = os.environ if environ is None else environ
    gromacs = config.gromacs

    if not config.mpi:
        if config.tuned:
            logger.warning("-tuned only applies in MPI mode, ignoring it")
        return MdrunLaunch(
            mode=ExecutionMode.SINGLE,
            command=(gromacs.executable("mdrun"),),
        )

    host_file = environ.get(HOST_FILE_VARIABLE)
    if not host_file:
        raise EnvironmentMissing(
            "Must be invoked via LoadLeveler if in MPI mode "
            f"(${HOST_FILE_VARIABLE} is not set)",
            variable=HOST_FILE_VARIABLE,
        )
    if not os.path.isfile(host_file):
        raise EnvironmentMissing(
            f"Host file {host_file} from ${HOST_FILE_VARIABLE} doesn't exist",
            variable=HOST_FILE_VARIABLE,
        )

    mpirun = mpirun_prefix(host_file)
    mdrun_mpi = gromacs.executable("mdrun_mpi")

    if config.tuned:
        num_procs = len(read_host_list(host_file))
        if num_procs == 0:
            raise EnvironmentMissing(
                f"Host file {host_file} lists no hosts", variable=HOST_FILE_VARIABLE
            )
        logger.info(f"Auto-tuned MPI mode on {num_procs} processes")
        return MdrunLaunch(
            mode=ExecutionMode.MPI_TUNED,
            command=(
                gromacs.executable("g_tune_pme"),
                "-launch",
                "-np", str(num_procs),
                "-r", str(TUNE_PME_REPEATS),
            ),
            extra_env={"MDRUN": mdrun_mpi, "MPIRUN": " ".join(mpirun)},
            host_file=host_file,
            num_procs=num_procs,
        )

    logger.info(f"MPI mode with host file {host_file}")
    return MdrunLaunch(
        mode=ExecutionMode.MPI,
        command=mpirun + (mdrun_mpi,),
        host_file=host_file,
    )

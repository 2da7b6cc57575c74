"""
GROMACS command lines.

Pure functions building the argv of grompp and mdrun for one stage.
"""

from domain.config import GromacsInstall
from domain.stage import RunHandle, StageInvocation
from services.execution_mode import MdrunLaunch


def grompp_command(gromacs: GromacsInstall, invocation: StageInvocation) -> list[str]:
    """
    Build the grompp command for a stage.

    ``grompp -f <stage>.mdp -c <input.gro> -p <topology> -o <stage> [-maxwarn N]``
    """
    stage_id = invocation.stage_id
    cmd = [
        gromacs.executable("grompp"),
        "-f", invocation.config_file,
        "-c", invocation.input_coordinate_file,
        "-p", invocation.topology_file,
        "-o", stage_id,
    ]
    if invocation.max_warnings is not None:
        cmd += ["-maxwarn", str(invocation.max_warnings)]
    return cmd


def mdrun_command(launch: MdrunLaunch, handle: RunHandle) -> list[str]:
    """
    Build the mdrun command for a stage.

    All output files share the stage id as base name, except the final
    configuration which is written to ``after_<stage>.gro``.
    """
    invocation = handle.invocation
    stage_id = invocation.stage_id
    cmd = list(launch.command) + ["-v"]
    if invocation.threads is not None:
        cmd += ["-nt", str(invocation.threads)]
    cmd += [
        "-s", stage_id,
        "-e", stage_id,
        "-x", stage_id,
        "-c", invocation.output_coordinate_file,
        "-g", stage_id,
        "-o", stage_id,
    ]
    return cmd

"""
GROMACS invocation layer.
"""

from .commands import grompp_command, mdrun_command
from .invoker import CommandInvoker, COMMAND_NOT_FOUND_RC
from .collaborators import GromppPreparer, MdrunRunner

__all__ = [
    "grompp_command",
    "mdrun_command",
    "CommandInvoker",
    "COMMAND_NOT_FOUND_RC",
    "GromppPreparer",
    "MdrunRunner",
]

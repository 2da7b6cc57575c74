"""
CommandInvoker service - Runs external programs.

Single responsibility: start one process, wait for it, report its
exit status.
"""

import logging
import os
import subprocess
from typing import Mapping, Optional, Sequence


COMMAND_NOT_FOUND_RC = 127


class CommandInvoker:
    """
    Blocking subprocess runner.

    Output of the child goes straight to the parent's stdout/stderr, so
    mdrun progress is visible while it runs. There is no timeout.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        """
        Initialize invoker.

        Args:
            env: Environment for every child process (None inherits ours)
        """
        self.env = dict(env) if env is not None else None
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(
        self,
        argv: Sequence[str],
        cwd: str,
        extra_env: Optional[Mapping[str, str]] = None,
    ) -> int:
        """
        Run a command to completion.

        Args:
            argv: Program and arguments
            cwd: Working directory of the child
            extra_env: Variables added on top of the invoker environment

        Returns:
            Exit status; 127 if the program could not be found
        """
        env = self.env
        if extra_env:
            env = {**(os.environ if env is None else env), **extra_env}
        self.logger.info(f"Running: {' '.join(argv)}")
        try:
            result = subprocess.run(list(argv), cwd=cwd, env=env, check=False)
        except FileNotFoundError:
            self.logger.error(f"{argv[0]} not found")
            return COMMAND_NOT_FOUND_RC
        self.logger.debug(f"{argv[0]} exited with status {result.returncode}")
        return result.returncode

"""
IdleHandler - Handles the initial state.
"""

from orchestration.context import RunContext
from orchestration.states import PipelineState
from .base import StateHandler


class IdleHandler(StateHandler):
    """
    Handler for IDLE state.

    Opens the first stage, or completes right away when no mdp files
    were found.
    """

    def handle(self, context: RunContext) -> tuple[RunContext, PipelineState]:
        self._log_state_entry(context)

        if not context.stages:
            self.logger.warning("No mdp files to process, nothing to do")

        return self._start_next_stage(context)

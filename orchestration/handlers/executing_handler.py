"""
ExecutingHandler - Handles the run step of a stage.
"""

from orchestration.context import RunContext
from orchestration.states import PipelineState
from .base import StateHandler


class ExecutingHandler(StateHandler):
    """
    Handler for EXECUTING state.

    Runs the run collaborator (mdrun) on the prepared stage and records
    the coordinate file it produced.
    """

    def __init__(self, runner):
        """
        Initialize handler.

        Args:
            runner: Object with ``execute(run_handle) -> path``
        """
        super().__init__()
        self.runner = runner

    def handle(self, context: RunContext) -> tuple[RunContext, PipelineState]:
        self._log_state_entry(context)

        if context.run_handle is None:
            raise RuntimeError("EXECUTING entered without a prepared run")

        output = self.runner.execute(context.run_handle)
        return context.with_output(str(output)), PipelineState.ADVANCING

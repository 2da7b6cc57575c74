"""
PreparingHandler - Handles the prepare step of a stage.
"""

from orchestration.context import RunContext
from orchestration.states import PipelineState
from .base import StateHandler


class PreparingHandler(StateHandler):
    """
    Handler for PREPARING state.

    Runs the prepare collaborator (grompp) for the active invocation.
    A failure propagates as StageFailed and the mdrun step is never
    reached.
    """

    def __init__(self, preparer):
        """
        Initialize handler.

        Args:
            preparer: Object with ``prepare(invocation) -> RunHandle``
        """
        super().__init__()
        self.preparer = preparer

    def handle(self, context: RunContext) -> tuple[RunContext, PipelineState]:
        self._log_state_entry(context)

        if context.invocation is None:
            raise RuntimeError("PREPARING entered without an active stage")

        handle = self.preparer.prepare(context.invocation)
        return context.with_run_handle(handle), PipelineState.EXECUTING

"""
AdvancingHandler - Moves the run past a successful stage.
"""

from typing import Callable, Optional

from orchestration.context import RunContext
from orchestration.states import PipelineState
from .base import StateHandler


class AdvancingHandler(StateHandler):
    """
    Handler for ADVANCING state.

    Makes the finished stage the previous stage, threads its output
    .gro file into the context and opens the next stage.
    """

    def __init__(self, on_stage_completed: Optional[Callable[[str], None]] = None):
        """
        Initialize handler.

        Args:
            on_stage_completed: Called with the stage id after each stage
        """
        super().__init__()
        self.on_stage_completed = on_stage_completed

    def handle(self, context: RunContext) -> tuple[RunContext, PipelineState]:
        self._log_state_entry(context)

        invocation = context.invocation
        output = context.output_coordinate_file or invocation.output_coordinate_file
        self.logger.info(f"Stage '{invocation.stage_id}' finished, next input: {output}")

        context = context.with_stage_completed(invocation.stage_id, output)
        if self.on_stage_completed is not None:
            self.on_stage_completed(invocation.stage_id)

        return self._start_next_stage(context)

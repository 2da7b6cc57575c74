"""
Base state handler.

Abstract base class for all state handlers.
"""

from abc import ABC, abstractmethod
import logging

from domain.stage import StageInvocation
from orchestration.context import RunContext
from orchestration.states import PipelineState


class StateHandler(ABC):
    """
    Base class for state handlers.

    Each state handler implements the logic for transitioning
    from one state to the next.
    """

    def __init__(self):
        """Initialize state handler."""
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def handle(self, context: RunContext) -> tuple[RunContext, PipelineState]:
        """
        Handle the current state and determine next state.

        Args:
            context: Current run context

        Returns:
            Tuple of (updated_context, next_state)

        Raises:
            PipelineError: If an external step fails
        """
        pass

    def _start_next_stage(self, context: RunContext) -> tuple[RunContext, PipelineState]:
        """
        Open the next stage, or finish the run if there is none.

        The new invocation reads the current coordinate file, so the
        first stage gets the initial .gro file and every later stage the
        output of the stage before it.
        """
        stage = context.current_stage
        if stage is None:
            return context, PipelineState.COMPLETED

        config = context.config
        invocation = StageInvocation(
            stage=stage,
            input_coordinate_file=context.current_coordinate_file,
            topology_file=config.topology_file,
            max_warnings=config.grompp_maxwarn,
            threads=config.mdrun_threads,
        )
        self.logger.info(
            f"Stage {context.stage_index + 1}/{len(context.stages)}: {stage.config_file}"
        )
        return context.with_invocation(invocation), PipelineState.PREPARING

    def _log_state_entry(self, context: RunContext):
        """Log entry to state."""
        self.logger.debug(f"Entering state: {context.current_state}")

"""
State machine for pipeline execution.

Orchestrates state transitions and handler execution.
"""

import logging
from typing import Dict

from domain.errors import PipelineError, StageFailed
from .context import RunContext
from .states import PipelineState, is_valid_transition
from .handlers.base import StateHandler


REQUIRED_STATES = (
    PipelineState.IDLE,
    PipelineState.PREPARING,
    PipelineState.EXECUTING,
    PipelineState.ADVANCING,
)


class StateMachine:
    """
    State machine for orchestrating pipeline execution.

    Manages state transitions and delegates work to state handlers.
    The first error moves the run to FAILED; nothing after it runs.
    """

    def __init__(self, handlers: Dict[PipelineState, StateHandler]):
        """
        Initialize state machine.

        Args:
            handlers: Dict mapping states to their handlers

        Raises:
            ValueError: If a non-terminal state has no handler
        """
        self.handlers = handlers
        self.logger = logging.getLogger(self.__class__.__name__)

        self._validate_handlers()

    def _validate_handlers(self):
        """Validate that all non-terminal states have handlers."""
        missing = set(REQUIRED_STATES) - set(self.handlers.keys())
        if missing:
            raise ValueError(
                f"Missing handlers for states: {sorted(str(s) for s in missing)}"
            )

    def run(self, initial_context: RunContext) -> RunContext:
        """
        Run the state machine until a terminal state is reached.

        Args:
            initial_context: Initial run context

        Returns:
            Final run context
        """
        context = initial_context
        iteration = 0
        # IDLE plus three states per stage
        max_iterations = 1 + 3 * len(context.stages)

        self.logger.info("=" * 60)
        self.logger.info(f"Starting pipeline execution ({len(context.stages)} stages)")
        self.logger.info("=" * 60)

        while not context.is_terminal and iteration < max_iterations:
            iteration += 1

            try:
                context = self._execute_state(context)
            except StageFailed as e:
                self.logger.error(str(e))
                context = context.with_error(message=str(e), details=e.to_dict())
                break
            except PipelineError as e:
                self.logger.error(f"Error in state {context.current_state}: {e}")
                context = context.with_error(
                    message=str(e),
                    details={"iteration": iteration, "state": str(context.current_state)}
                )
                break
            except Exception as e:
                self.logger.error(f"Error in state {context.current_state}: {e}", exc_info=True)
                context = context.with_error(
                    message=f"Error in {context.current_state}: {str(e)}",
                    details={"iteration": iteration, "state": str(context.current_state)}
                )
                break

        if not context.is_terminal:
            self.logger.error("State machine exceeded maximum iterations")
            context = context.with_error(
                message="Pipeline exceeded maximum iterations",
                details={"iterations": iteration}
            )

        self._log_final_state(context)
        return context

    def _execute_state(self, context: RunContext) -> RunContext:
        """
        Execute the current state's handler.

        Args:
            context: Current run context

        Returns:
            Updated run context
        """
        current_state = context.current_state
        handler = self.handlers[current_state]

        updated_context, next_state = handler.handle(context)

        if not is_valid_transition(current_state, next_state):
            self.logger.error(f"Invalid transition: {current_state} → {next_state}")
            return context.with_error(
                message=f"Invalid state transition: {current_state} → {next_state}"
            )

        self.logger.debug(f"Transition: {current_state} → {next_state}")
        return updated_context.with_state(next_state)

    def _log_final_state(self, context: RunContext):
        """Log final pipeline state."""
        self.logger.info("=" * 60)

        if context.is_successful:
            self.logger.info("✓ Pipeline completed successfully")
        else:
            self.logger.error(f"✗ Pipeline failed: {context.error_message}")

        self.logger.info(f"Final state: {context.current_state}")
        self.logger.info(f"Completed stages: {', '.join(context.completed_stages) or '-'}")
        self.logger.info(f"Elapsed time: {context.elapsed_time:.1f}s")
        self.logger.info("=" * 60)

"""
Run context.

Immutable context object passed between state handlers.
"""

from dataclasses import dataclass, field, replace
from typing import Optional
from datetime import datetime

from domain.config import PipelineConfig
from domain.stage import RunHandle, StageDefinition, StageInvocation
from .states import PipelineState


@dataclass(frozen=True)
class RunContext:
    """
    Immutable context for pipeline execution.

    ``current_coordinate_file`` starts as the initial .gro file and is
    replaced by each stage's output once that stage has succeeded. It is
    never rolled back. Each state handler returns a new context.
    """

    # Configuration
    config: PipelineConfig
    stages: tuple[StageDefinition, ...]

    # Current state
    current_state: PipelineState

    # Coordinate threading
    current_coordinate_file: str
    previous_stage: Optional[str] = None

    # Active stage
    stage_index: int = 0
    invocation: Optional[StageInvocation] = None
    run_handle: Optional[RunHandle] = None
    output_coordinate_file: Optional[str] = None

    # Execution metadata
    start_time: datetime = field(default_factory=datetime.now)
    completed_stages: tuple[str, ...] = ()

    # Error tracking
    error_message: Optional[str] = None
    error_details: Optional[dict] = None

    def with_state(self, new_state: PipelineState) -> 'RunContext':
        """Return new context with updated state."""
        return replace(self, current_state=new_state)

    def with_invocation(self, invocation: StageInvocation) -> 'RunContext':
        """Return new context for a freshly started stage."""
        return replace(self, invocation=invocation, run_handle=None, output_coordinate_file=None)

    def with_run_handle(self, handle: RunHandle) -> 'RunContext':
        """Return new context holding the prepared run."""
        return replace(self, run_handle=handle)

    def with_output(self, output_coordinate_file: str) -> 'RunContext':
        """Return new context holding the .gro file mdrun produced."""
        return replace(self, output_coordinate_file=output_coordinate_file)

    def with_stage_completed(self, stage_id: str, output_coordinate_file: str) -> 'RunContext':
        """
        Return new context advanced past a successful stage.

        Args:
            stage_id: Stage that just finished
            output_coordinate_file: .gro file the stage produced

        Returns:
            New RunContext pointing at the next stage
        """
        return replace(
            self,
            previous_stage=stage_id,
            current_coordinate_file=output_coordinate_file,
            stage_index=self.stage_index + 1,
            invocation=None,
            run_handle=None,
            output_coordinate_file=None,
            completed_stages=self.completed_stages + (stage_id,),
        )

    def with_error(self, message: str, details: Optional[dict] = None) -> 'RunContext':
        """
        Return new context with error information.

        Args:
            message: Error message
            details: Optional error details dict

        Returns:
            New RunContext in FAILED state
        """
        return replace(
            self,
            current_state=PipelineState.FAILED,
            error_message=message,
            error_details=details or {}
        )

    @property
    def current_stage(self) -> Optional[StageDefinition]:
        """Stage at stage_index, or None once all stages are done."""
        if self.stage_index < len(self.stages):
            return self.stages[self.stage_index]
        return None

    @property
    def has_more_stages(self) -> bool:
        return self.stage_index < len(self.stages)

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self.current_state.is_terminal()

    @property
    def is_successful(self) -> bool:
        """Check if pipeline completed successfully."""
        return self.current_state == PipelineState.COMPLETED

    @property
    def has_error(self) -> bool:
        """Check if pipeline failed."""
        return self.current_state == PipelineState.FAILED

    def get_summary(self) -> dict:
        """
        Get summary of pipeline execution.

        Returns:
            Dict with execution summary
        """
        return {
            "state": str(self.current_state),
            "elapsed_time_sec": self.elapsed_time,
            "start_time": self.start_time.isoformat(),
            "total_stages": len(self.stages),
            "completed_stages": list(self.completed_stages),
            "previous_stage": self.previous_stage,
            "current_coordinate_file": self.current_coordinate_file,
            "has_error": self.has_error,
            "error_message": self.error_message,
            "error_details": self.error_details,
            "is_successful": self.is_successful,
        }

"""
Orchestration layer for pipeline execution.

State machine-based orchestration with explicit state transitions.
"""

from .states import PipelineState
from .context import RunContext
from .state_machine import StateMachine

__all__ = [
    "PipelineState",
    "RunContext",
    "StateMachine",
]

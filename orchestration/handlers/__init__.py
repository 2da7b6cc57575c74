"""
State handlers for pipeline execution.

Each handler implements logic for a specific pipeline state.
"""

from .base import StateHandler
from .idle_handler import IdleHandler
from .preparing_handler import PreparingHandler
from .executing_handler import ExecutingHandler
from .advancing_handler import AdvancingHandler

__all__ = [
    "StateHandler",
    "IdleHandler",
    "PreparingHandler",
    "ExecutingHandler",
    "AdvancingHandler",
]

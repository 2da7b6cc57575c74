"""
Pipeline execution layer.

High-level pipeline executor that wires together all components.
"""

from .executor import PipelineExecutor

__all__ = ["PipelineExecutor"]

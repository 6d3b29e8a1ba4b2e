"""Temporal workflows for animation generation."""

from .animation_workflow import AnimationGenerationWorkflow, AnimationWorkflowInput

__all__ = [
    "AnimationGenerationWorkflow",
    "AnimationWorkflowInput"
]

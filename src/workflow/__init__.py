"""Workflow state, step descriptors and the sequential runner.

This module provides:
- State definitions for one workflow run
- Declarative step descriptors with a static dependency check
- The sequential runner that threads references between steps
"""

from src.workflow.orchestrator import WorkflowRunner
from src.workflow.state import StepResult, StepStatus, WorkflowState, WorkflowStatus
from src.workflow.steps import StepDescriptor, check_dependencies

__all__ = [
    "WorkflowState",
    "WorkflowStatus",
    "StepResult",
    "StepStatus",
    "StepDescriptor",
    "check_dependencies",
    "WorkflowRunner",
]

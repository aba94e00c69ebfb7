"""Error types and error context for workflow execution.

Every step-level failure propagates to the caller of the runner; nothing
here retries or recovers. A caller that wants retries wraps the runner.

Key Components:
- WorkflowError hierarchy carrying step name, expected/actual details
- ErrorContext for timing and logging an operation
"""

import json
import logging
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


def _render(value: Any, limit: int = 2000) -> str:
    """Render a response body for an error message, truncating large payloads."""
    try:
        text = value if isinstance(value, str) else json.dumps(value, default=str)
    except (TypeError, ValueError):
        text = repr(value)
    if len(text) > limit:
        return f"{text[:limit]}... ({len(text)} chars)"
    return text


# Custom Exception Classes
class WorkflowError(Exception):
    """Base exception for workflow-related errors."""

    def __init__(self, message: str, workflow_id: Optional[str] = None, **context):
        """Initialize workflow error with context.

        Args:
            message: Error message
            workflow_id: ID of workflow where error occurred
            **context: Additional context information
        """
        super().__init__(message)
        self.workflow_id = workflow_id
        self.context = context
        self.timestamp = time.time()

    def __str__(self):
        """String representation with workflow ID if available."""
        base = super().__str__()
        if self.workflow_id:
            return f"[{self.workflow_id}] {base}"
        return base


class StepExecutionError(WorkflowError):
    """A step failed for a reason other than validation or extraction."""

    def __init__(self, message: str, step_name: str, workflow_id: Optional[str] = None, **context):
        """Initialize step execution error.

        Args:
            message: Error message
            step_name: Name of the step where the error occurred
            workflow_id: ID of workflow
            **context: Additional context
        """
        super().__init__(message, workflow_id, **context)
        self.step_name = step_name


class StepValidationError(StepExecutionError):
    """Response status, required field or expected value mismatch.

    The message always carries expected vs. actual and the response body.
    """

    def __init__(
        self,
        message: str,
        step_name: str = "",
        expected: Any = None,
        actual: Any = None,
        body: Any = None,
        workflow_id: Optional[str] = None,
        **context,
    ):
        full = message if body is None else f"{message}. Body: {_render(body)}"
        if step_name:
            full = f"Step '{step_name}': {full}"
        super().__init__(full, step_name, workflow_id, **context)
        self.expected = expected
        self.actual = actual
        self.body = body


class StepExtractionError(StepExecutionError):
    """A mandatory reference identifier is missing from a response."""

    def __init__(
        self,
        step_name: str,
        path: str,
        slot: str,
        body: Any = None,
        workflow_id: Optional[str] = None,
    ):
        message = (
            f"Step '{step_name}': expected field '{path}' for reference '{slot}' "
            f"but it was absent. Body: {_render(body)}"
        )
        super().__init__(message, step_name, workflow_id, path=path, slot=slot)
        self.path = path
        self.slot = slot
        self.body = body


class StateValidationError(WorkflowError):
    """A step ran before a reference it depends on was captured.

    This signals a mis-ordered workflow definition, not a runtime condition.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        workflow_id: Optional[str] = None,
        **context,
    ):
        """Initialize state validation error.

        Args:
            message: Error message
            field: State slot that failed validation
            workflow_id: ID of workflow
            **context: Additional context
        """
        super().__init__(message, workflow_id, **context)
        self.field = field


class WorkflowDefinitionError(WorkflowError):
    """Static check failure: a step requires a reference no earlier step produces."""


# Error Context Manager
class ErrorContext:
    """Context manager for tracking error information during execution.

    Usage:
        with ErrorContext("create_opportunity", workflow_id="wf-123") as ctx:
            # Code that might fail
            ctx.add_info("status", 200)
    """

    def __init__(
        self,
        operation: str,
        workflow_id: Optional[str] = None,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize error context.

        Args:
            operation: Name of operation being performed
            workflow_id: ID of workflow
            log: Logger to report to; defaults to this module's logger
        """
        self.operation = operation
        self.workflow_id = workflow_id
        self.log = log or logger
        self.info: dict[str, Any] = {}
        self.start_time: Optional[float] = None
        self.duration = 0.0

    def __enter__(self):
        """Enter context, recording start time."""
        self.start_time = time.time()
        self.log.debug(f"Starting operation: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context, logging duration and any errors."""
        self.duration = time.time() - self.start_time if self.start_time else 0

        if exc_type is None:
            self.log.debug(
                f"Operation '{self.operation}' completed successfully in {self.duration:.2f}s"
            )
        else:
            self.log.error(
                f"Operation '{self.operation}' failed after {self.duration:.2f}s: {exc_val}",
                extra={"extra_fields": self._fields()},
            )

        # Don't suppress the exception
        return False

    def _fields(self) -> dict[str, Any]:
        return {"workflow_id": self.workflow_id, "operation": self.operation, **self.info}

    def add_info(self, key: str, value: Any):
        """Add contextual information.

        Args:
            key: Information key
            value: Information value
        """
        self.info[key] = value


__all__ = [
    "WorkflowError",
    "StepExecutionError",
    "StepValidationError",
    "StepExtractionError",
    "StateValidationError",
    "WorkflowDefinitionError",
    "ErrorContext",
]

"""Workflow state definitions.

WorkflowState is the one mutable object threaded through a workflow run.
It holds the reference identifiers captured from responses (``refs``) and a
record per executed step. One instance belongs to one run; nothing is shared
between runs.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_serializer

from src.workflow.error_handling import StateValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkflowStatus(str, Enum):
    """Workflow execution status.

    Attributes:
        PENDING: Workflow created but not started
        RUNNING: A step is executing
        COMPLETED: Every step succeeded
        ABORTED: A step failed; later steps were not run
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class StepStatus(str, Enum):
    """Per-step lifecycle: pending -> executing -> succeeded | failed."""

    PENDING = "pending"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class StepResult(BaseModel):
    """Outcome of one executed step.

    Attributes:
        name: Step name
        status: Final step status
        status_code: HTTP status returned, if a response arrived
        captured: References written by this step
        error: Error message if the step failed
        duration: Wall time in seconds
    """

    name: str
    status: StepStatus = StepStatus.PENDING
    status_code: Optional[int] = None
    captured: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    duration: float = 0.0


class WorkflowState(BaseModel):
    """Mutable state of one workflow run.

    Attributes:
        workflow_id: Unique identifier for this run
        name: Workflow (journey) name
        status: Current execution status
        current_step: Name of the step executing or last executed
        refs: Reference identifiers captured so far, keyed by slot name
        step_results: One record per step that started
        created_at: When this run was created (UTC)
        updated_at: When this run was last modified (UTC)
        error_message: Failure details if status is ABORTED
    """

    workflow_id: UUID = Field(default_factory=uuid4)
    name: str = "workflow"

    status: WorkflowStatus = WorkflowStatus.PENDING
    current_step: Optional[str] = None

    refs: Dict[str, Any] = Field(default_factory=dict)
    step_results: List[StepResult] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    error_message: Optional[str] = None

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def capture(self, slot: str, value: Any) -> Optional[Any]:
        """Write a reference slot. The latest write wins.

        Returns:
            The previous value, or None if the slot was empty
        """
        previous = self.refs.get(slot)
        self.refs[slot] = value
        self.touch()
        return previous

    def has_ref(self, slot: str) -> bool:
        return slot in self.refs

    def get_ref(self, slot: str, default: Any = None) -> Any:
        return self.refs.get(slot, default)

    def require_ref(self, slot: str, step_name: Optional[str] = None) -> Any:
        """Read a slot a step depends on.

        Raises:
            StateValidationError: If the slot was never captured
        """
        if slot not in self.refs:
            who = f"Step '{step_name}'" if step_name else "A step"
            raise StateValidationError(
                f"{who} requires reference '{slot}' which has not been captured",
                field=slot,
                workflow_id=str(self.workflow_id),
            )
        return self.refs[slot]

    def result_for(self, step_name: str) -> Optional[StepResult]:
        """Most recent record for a step name."""
        for result in reversed(self.step_results):
            if result.name == step_name:
                return result
        return None

    @field_serializer("workflow_id", when_used="json")
    def serialize_uuid(self, value: UUID) -> str:
        """Serialize UUID fields to strings for JSON."""
        return str(value)

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_datetime(self, value: datetime) -> str:
        """Serialize datetime fields to ISO format strings."""
        return value.isoformat()

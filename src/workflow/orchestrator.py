"""Sequential workflow runner.

Executes StepDescriptors one at a time against a signed partner client,
threading captured reference identifiers through a WorkflowState.

Design Principles:
- Explicit step sequence (no branching, no retry)
- Dependencies checked statically before the first request
- One client per run, closed whether the run succeeds or not
- First failure aborts the run and is re-raised to the caller

Status transitions:
    PENDING -> RUNNING -> COMPLETED
    PENDING -> RUNNING -> ABORTED (first failing step)
"""

import copy
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable, Iterable, Mapping, Optional

from src.integrations.dsp_client import DspClient
from src.integrations.exceptions import TransportError
from src.integrations.http_client import ApiResponse
from src.workflow.error_handling import (
    ErrorContext,
    StepExecutionError,
    StepExtractionError,
    WorkflowError,
)
from src.workflow.state import StepResult, StepStatus, WorkflowState, WorkflowStatus
from src.workflow.steps import StepDescriptor, check_dependencies
from src.workflow.validators import MISSING, ResponseValidator, get_nested_field

ClientFactory = Callable[[], AbstractAsyncContextManager[DspClient]]


class WorkflowRunner:
    """Run an ordered list of steps as one all-or-nothing workflow.

    Args:
        steps: Steps in execution order
        fixture: Static test data handed to every request builder (never mutated)
        client_factory: Zero-arg callable returning an async context manager
            that yields a DspClient; called once per run
        name: Workflow name used in state and logs
        initial_refs: Slots populated before the first step
        logger: Reporting sink; defaults to this module's logger

    Example:
        >>> runner = WorkflowRunner(steps, fixture, lambda: DspClient.from_settings())
        >>> state = await runner.run()
        >>> state.refs["opportunityId"]
        'OPP-1'
    """

    def __init__(
        self,
        steps: Iterable[StepDescriptor],
        fixture: Mapping[str, Any],
        client_factory: ClientFactory,
        *,
        name: str = "workflow",
        initial_refs: Optional[Mapping[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.steps = list(steps)
        self.fixture = copy.deepcopy(dict(fixture))
        self.client_factory = client_factory
        self.name = name
        self.initial_refs = dict(initial_refs or {})
        self.logger = logger or logging.getLogger(__name__)

    def new_state(self) -> WorkflowState:
        return WorkflowState(name=self.name, refs=dict(self.initial_refs))

    async def run(self, state: Optional[WorkflowState] = None) -> WorkflowState:
        """Execute every step in order.

        Args:
            state: State to continue from; a fresh one is created if omitted

        Returns:
            The same WorkflowState, COMPLETED

        Raises:
            WorkflowDefinitionError: If the step list fails the dependency check
            StepValidationError: On a status or body mismatch
            StepExtractionError: On a missing mandatory reference
            TransportError: On a network failure
            StepExecutionError: On any other failure inside a step
            SigningInputError: If the client cannot be built (e.g. no secret key)
        """
        state = state or self.new_state()
        check_dependencies(self.steps, initial=state.refs.keys())

        wf_id = str(state.workflow_id)
        state.status = WorkflowStatus.RUNNING
        state.touch()
        self.logger.info(f"[{wf_id}] Starting workflow '{self.name}' ({len(self.steps)} steps)")

        try:
            async with self.client_factory() as client:
                for position, step in enumerate(self.steps, start=1):
                    self.logger.info(
                        f"[{wf_id}] Step {position}/{len(self.steps)}: {step.name}"
                    )
                    await self.execute_step(client, step, state)
        except Exception as e:
            # Client open/close failures; step failures are already recorded
            if state.status != WorkflowStatus.ABORTED:
                self._mark_aborted(state, e, where="client setup")
            raise

        state.status = WorkflowStatus.COMPLETED
        state.touch()
        self.logger.info(f"[{wf_id}] Workflow '{self.name}' completed; refs={state.refs}")
        return state

    async def execute_step(
        self, client: DspClient, step: StepDescriptor, state: WorkflowState
    ) -> ApiResponse:
        """Build, sign, send, validate and extract for one step.

        On failure the step is recorded as FAILED, the state is ABORTED and
        the error is re-raised.
        """
        wf_id = str(state.workflow_id)
        result = StepResult(name=step.name, status=StepStatus.EXECUTING)
        state.step_results.append(result)
        state.current_step = step.name
        state.touch()

        try:
            with ErrorContext(step.name, workflow_id=wf_id, log=self.logger) as ctx:
                endpoint = step.resolve_endpoint(state)
                body = step.build_body(state, copy.deepcopy(self.fixture))
                ctx.add_info("endpoint", endpoint)

                response = await client.signed_request(
                    step.method, endpoint, body, params=step.query_params or None
                )
                result.status_code = response.status
                ctx.add_info("status", response.status)

                self.validate(step, response, state)
                result.captured = self.extract(step, response, state)
        except (WorkflowError, TransportError) as e:
            self._abort(state, result, e, ctx.duration)
            raise
        except Exception as e:
            error = StepExecutionError(
                f"Step '{step.name}' failed: {type(e).__name__}: {e}",
                step_name=step.name,
                workflow_id=wf_id,
            )
            self._abort(state, result, error, ctx.duration)
            raise error from e

        result.status = StepStatus.SUCCEEDED
        result.duration = ctx.duration
        state.touch()
        return response

    def validate(self, step: StepDescriptor, response: ApiResponse, state: WorkflowState) -> None:
        """Apply every response expectation declared on the step."""
        ResponseValidator.validate_status(response, step.expected_status, step.name)
        for field_path in step.required_fields:
            ResponseValidator.validate_field(response, field_path, step_name=step.name)
        for field_path, expected in step.expected_values.items():
            ResponseValidator.validate_field(response, field_path, expected, step_name=step.name)
        for field_path, items in step.expected_contains.items():
            ResponseValidator.validate_contains(response, field_path, items, step_name=step.name)
        for field_path, slot in step.expected_refs.items():
            expected = state.require_ref(slot, step.name)
            ResponseValidator.validate_field(response, field_path, expected, step_name=step.name)

    def extract(
        self, step: StepDescriptor, response: ApiResponse, state: WorkflowState
    ) -> dict[str, Any]:
        """Capture declared reference identifiers into state.

        Returns:
            The slots written by this step

        Raises:
            StepExtractionError: If a mandatory field is absent or null
        """
        wf_id = str(state.workflow_id)

        # Check every mandatory field before writing any
        values: dict[str, Any] = {}
        for field_path, slot in step.extractors.items():
            value = get_nested_field(response.body, field_path)
            if value is MISSING or value is None:
                raise StepExtractionError(
                    step.name, field_path, slot, body=response.body, workflow_id=wf_id
                )
            values[slot] = value

        for field_path, slot in step.optional_extractors.items():
            value = get_nested_field(response.body, field_path)
            if value is MISSING or value is None:
                self.logger.info(f"[{wf_id}] {step.name}: optional '{field_path}' not returned")
                continue
            values[slot] = value

        for slot, value in values.items():
            previous = state.capture(slot, value)
            if previous is not None and previous != value:
                self.logger.info(
                    f"[{wf_id}] {step.name}: '{slot}' superseded {previous!r} -> {value!r}"
                )
            else:
                self.logger.info(f"[{wf_id}] {step.name}: captured {slot}={value!r}")
        return values

    def _abort(
        self, state: WorkflowState, result: StepResult, error: Exception, duration: float
    ) -> None:
        result.status = StepStatus.FAILED
        result.error = str(error)
        result.duration = duration
        self._mark_aborted(state, error, where=f"'{result.name}'")

    def _mark_aborted(self, state: WorkflowState, error: Exception, where: str) -> None:
        state.status = WorkflowStatus.ABORTED
        state.error_message = str(error)
        state.touch()
        # WorkflowError.__str__ already carries the workflow id prefix
        detail = Exception.__str__(error) if isinstance(error, WorkflowError) else str(error)
        self.logger.error(
            f"[{state.workflow_id}] Workflow '{self.name}' aborted at {where}: {detail}"
        )

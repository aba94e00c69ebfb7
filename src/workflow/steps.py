"""Step descriptors.

A StepDescriptor declares everything the runner needs for one HTTP call:
how to build the body from state and fixture, which references it reads,
what the response must look like, and which fields to capture.

Example:
    >>> create_opportunity = StepDescriptor(
    ...     name="create_opportunity",
    ...     method="POST",
    ...     endpoint="/los/api/v1/opportunity",
    ...     build_request=lambda state, fixture: {"pan": fixture["pan"]},
    ...     required_fields=["opportunityId"],
    ...     extractors={"opportunityId": "opportunityId"},
    ... )
    >>> create_opportunity.produces
    ('opportunityId',)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from src.integrations.dsp_auth import NO_BODY
from src.integrations.http_client import HttpMethod
from src.utils.testdata import replace_path_params
from src.workflow.error_handling import WorkflowDefinitionError
from src.workflow.state import WorkflowState

RequestBuilder = Callable[[WorkflowState, dict], Any]


@dataclass(frozen=True)
class StepDescriptor:
    """Declarative description of one workflow step.

    Attributes:
        name: Unique step name
        method: HTTP method
        endpoint: Path, may contain ``{placeholder}`` segments
        build_request: ``(state, fixture) -> body``; None means no body
        path_params: placeholder -> reference slot
        query_params: Static query parameters
        expected_status: Status the response must have
        required_fields: Dot paths that must exist in the response body
        expected_values: Dot path -> exact expected value
        expected_contains: Dot path -> items the list must contain
        expected_refs: Dot path -> slot whose captured value it must equal
        extractors: Dot path -> slot; absence is a hard failure
        optional_extractors: Dot path -> slot; captured only if present
        requires: Extra slots read by ``build_request``
    """

    name: str
    method: HttpMethod
    endpoint: str
    build_request: Optional[RequestBuilder] = None
    path_params: dict[str, str] = field(default_factory=dict)
    query_params: dict[str, Any] = field(default_factory=dict)
    expected_status: int = 200
    required_fields: tuple[str, ...] = ()
    expected_values: dict[str, Any] = field(default_factory=dict)
    expected_contains: dict[str, list] = field(default_factory=dict)
    expected_refs: dict[str, str] = field(default_factory=dict)
    extractors: dict[str, str] = field(default_factory=dict)
    optional_extractors: dict[str, str] = field(default_factory=dict)
    requires: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "required_fields", tuple(self.required_fields))
        object.__setattr__(self, "requires", tuple(self.requires))

    @property
    def inputs(self) -> tuple[str, ...]:
        """Every slot this step reads, in first-seen order."""
        slots = [*self.requires, *self.path_params.values(), *self.expected_refs.values()]
        return tuple(dict.fromkeys(slots))

    @property
    def produces(self) -> tuple[str, ...]:
        """Slots this step always writes on success."""
        return tuple(dict.fromkeys(self.extractors.values()))

    @property
    def may_produce(self) -> tuple[str, ...]:
        """Slots this step writes only when the response carries them."""
        return tuple(dict.fromkeys(self.optional_extractors.values()))

    def resolve_endpoint(self, state: WorkflowState) -> str:
        """Endpoint with path placeholders filled from state."""
        if not self.path_params:
            return self.endpoint
        values = {
            placeholder: state.require_ref(slot, self.name)
            for placeholder, slot in self.path_params.items()
        }
        return replace_path_params(self.endpoint, values)

    def build_body(self, state: WorkflowState, fixture: dict) -> Any:
        """Request body, or NO_BODY when the step sends none."""
        for slot in self.requires:
            state.require_ref(slot, self.name)
        if self.build_request is None:
            return NO_BODY
        return self.build_request(state, fixture)


def check_dependencies(steps: Iterable[StepDescriptor], initial: Iterable[str] = ()) -> None:
    """Verify each step's inputs are guaranteed by an earlier step.

    Only mandatory extractors count as guarantees; an optional capture may
    overwrite a slot but cannot be the first producer of one.

    Args:
        steps: Steps in execution order
        initial: Slots populated before the first step

    Raises:
        WorkflowDefinitionError: On a missing producer or duplicate step name
    """
    available = set(initial)
    seen: set[str] = set()
    for position, step in enumerate(steps, start=1):
        if step.name in seen:
            raise WorkflowDefinitionError(f"Duplicate step name '{step.name}'")
        seen.add(step.name)

        missing = [slot for slot in step.inputs if slot not in available]
        if missing:
            raise WorkflowDefinitionError(
                f"Step {position} '{step.name}' requires {missing} "
                f"but no earlier step produces them",
                step=step.name,
                missing=missing,
            )
        available.update(step.produces)

"""End-to-end journeys built from workflow steps.

This module provides:
- Journey: a named step list plus its fixture
- JourneyRegistry: name -> journey factory registration and lookup
- run_journey: build a journey from settings and run it with a signed client

Example Usage:
    >>> from src.journeys import JourneyRegistry, run_journey
    >>> JourneyRegistry.list_journeys()
    ['loan_account_creation']
    >>> state = await run_journey("loan_account_creation")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import httpx

from src.integrations.dsp_client import DspClient
from src.utils.config import Settings, get_settings
from src.workflow.orchestrator import WorkflowRunner
from src.workflow.state import WorkflowState
from src.workflow.steps import StepDescriptor

logger = logging.getLogger(__name__)


@dataclass
class Journey:
    """A ready-to-run workflow definition.

    Attributes:
        name: Registry name
        steps: Steps in execution order
        fixture: Static data handed to request builders
        sourcing_channel_code: Overrides the configured channel code if set
    """

    name: str
    steps: list[StepDescriptor]
    fixture: dict[str, Any] = field(default_factory=dict)
    sourcing_channel_code: Optional[str] = None


JourneyFactory = Callable[[Settings], Journey]


class JourneyRegistry:
    """Registry for journey factories.

    Example:
        >>> @JourneyRegistry.register("smoke")
        ... def smoke(settings):
        ...     return Journey(name="smoke", steps=[])
        >>>
        >>> JourneyRegistry.get("smoke")(get_settings()).name
        'smoke'
    """

    _journeys: dict[str, JourneyFactory] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[JourneyFactory], JourneyFactory]:
        """Decorator to register a journey factory by name.

        Raises:
            ValueError: If a journey with the same name is already registered
        """

        def decorator(factory: JourneyFactory) -> JourneyFactory:
            if name in cls._journeys:
                raise ValueError(f"Journey '{name}' is already registered")

            cls._journeys[name] = factory
            logger.debug(f"Registered journey: {name} -> {factory.__name__}")
            return factory

        return decorator

    @classmethod
    def get(cls, name: str) -> JourneyFactory:
        """Get a registered journey factory by name.

        Raises:
            KeyError: If no journey with the given name is registered
        """
        if name not in cls._journeys:
            available = ", ".join(cls._journeys.keys()) or "none"
            raise KeyError(f"Journey '{name}' not registered. Available journeys: {available}")
        return cls._journeys[name]

    @classmethod
    def list_journeys(cls) -> list[str]:
        """Sorted list of registered journey names."""
        return sorted(cls._journeys.keys())

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove a journey. Useful for testing."""
        cls._journeys.pop(name, None)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._journeys


def build_runner(
    journey: Journey,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WorkflowRunner:
    """Wire a journey to a DspClient factory built from settings."""
    settings = settings or get_settings()
    if journey.sourcing_channel_code:
        settings = settings.model_copy(
            update={"SOURCING_CHANNEL_CODE": journey.sourcing_channel_code}
        )

    def client_factory() -> DspClient:
        return DspClient.from_settings(settings, transport=transport)

    return WorkflowRunner(
        journey.steps,
        journey.fixture,
        client_factory,
        name=journey.name,
        logger=logging.getLogger(f"los.{journey.name}"),
    )


async def run_journey(
    name: str,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WorkflowState:
    """Build the named journey and run it to completion.

    Raises:
        KeyError: If the journey is not registered
        WorkflowError: If any step fails (see WorkflowRunner.run)
    """
    settings = settings or get_settings()
    journey = JourneyRegistry.get(name)(settings)
    return await build_runner(journey, settings, transport).run()


# Import journey modules to trigger registration
# These imports must be at the bottom after class definitions to avoid circular imports
from src.journeys import loan_account_creation  # noqa: E402, F401

__all__ = [
    "Journey",
    "JourneyRegistry",
    "build_runner",
    "run_journey",
]

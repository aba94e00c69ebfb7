"""Run a registered journey against the configured partner environment.

Usage:
    python run_journey.py [journey_name]

Reads ENVIRONMENT, DSP_SECRET_KEY and friends from the environment or .env.
"""

import asyncio
import sys

from src.integrations.exceptions import SigningInputError, TransportError
from src.journeys import JourneyRegistry, run_journey
from src.utils.logging_config import setup_logging
from src.workflow.error_handling import WorkflowError


async def main(name: str) -> int:
    """Run one journey and print the captured references."""
    setup_logging()
    try:
        state = await run_journey(name)
    except (WorkflowError, TransportError, SigningInputError) as e:
        print(f"✗ {name} failed: {e}")
        return 1

    print(f"✓ {name} completed")
    for slot, value in state.refs.items():
        print(f"  {slot}: {value}")
    return 0


if __name__ == "__main__":
    journey = sys.argv[1] if len(sys.argv) > 1 else "loan_account_creation"
    if not JourneyRegistry.is_registered(journey):
        print(f"Unknown journey '{journey}'. Available: {', '.join(JourneyRegistry.list_journeys())}")
        sys.exit(2)
    sys.exit(asyncio.run(main(journey)))

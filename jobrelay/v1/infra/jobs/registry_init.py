"""
Job handler registration.

Builds the registry the processor dispatches on, one handler per job kind.
"""

from jobrelay.config.logging import get_logger
from jobrelay.config.settings import Settings
from jobrelay.v1.core.registries import JobHandlerRegistry
from jobrelay.v1.domain.agents import AgentCollaboration
from jobrelay.v1.domain.onboarding import Notifier, OnboardingSteps
from jobrelay.v1.infra.jobs.handlers import AgentRequestHandler, OnboardingHandler
from jobrelay.v1.infra.jobs.models import JobKind

logger = get_logger(__name__)


def build_job_registry(
    settings: Settings,
    collaboration: AgentCollaboration,
    onboarding_steps: OnboardingSteps,
    notifier: Notifier,
) -> JobHandlerRegistry:
    """Register a handler for every job kind."""
    registry = JobHandlerRegistry()

    registry.register(
        JobKind.ONBOARDING.value, OnboardingHandler(onboarding_steps, notifier)
    )
    registry.register(JobKind.AGENT_REQUEST.value, AgentRequestHandler(collaboration))

    # Freeze registries in non-development environments to prevent runtime modifications
    if settings.environment != "development":
        registry.freeze()

    logger.info("Job handlers registered", registered_handlers=registry.list())
    return registry

"""
Job handlers, one per job kind.

Handlers raise on failure; the processor turns the exception into the job's
stored error.
"""

from jobrelay.config.logging import get_logger
from jobrelay.v1.domain.agents import AgentCollaboration
from jobrelay.v1.domain.onboarding import Notifier, OnboardingSteps
from jobrelay.v1.infra.jobs.models import JobKind
from jobrelay.v1.infra.jobs.schemas import (
    AgentRequestPayload,
    AgentRequestResult,
    OnboardingPayload,
    OnboardingResult,
)

logger = get_logger(__name__)


class OnboardingHandler:
    """
    Runs the onboarding sequence for a new user.

    The welcome notification is the last step and its id is part of the
    result, so it fires at most once per job.
    """

    kind = JobKind.ONBOARDING.value

    def __init__(self, steps: OnboardingSteps, notifier: Notifier):
        self.steps = steps
        self.notifier = notifier

    async def handle(self, payload: OnboardingPayload) -> OnboardingResult:
        user_id = payload.user_id
        completed: list[str] = []

        goal_ids = await self.steps.create_initial_goals(user_id)
        completed.append(f"Created {len(goal_ids)} initial goals")

        competitors = await self.steps.setup_competitive_intelligence(user_id)
        completed.append(
            f"Set up competitive intelligence with {competitors} competitors"
        )

        agents = await self.steps.initialize_agents(user_id)
        completed.append(f"Initialized {len(agents)} AI agents")

        tasks_created = await self.steps.create_onboarding_tasks(user_id, goal_ids)
        completed.append(f"Created {tasks_created} onboarding tasks")

        if await self.steps.schedule_intelligence_briefing(user_id):
            completed.append("Intelligence briefing scheduled")

        await self.steps.mark_onboarding_complete(user_id)
        completed.append("User profile updated with onboarding completion")

        notification_id = await self.notifier.send_welcome(
            user_id, payload.email, payload.full_name
        )
        completed.append("Welcome email sent")

        logger.info("Onboarding finished", user_id=user_id, steps=len(completed))

        return OnboardingResult(
            steps=completed,
            goals_created=len(goal_ids),
            tasks_created=tasks_created,
            agents_initialized=agents,
            welcome_notification_id=notification_id,
        )


class AgentRequestHandler:
    """Sends a user message through the agent collaboration backend."""

    kind = JobKind.AGENT_REQUEST.value

    def __init__(self, collaboration: AgentCollaboration):
        self.collaboration = collaboration

    async def handle(self, payload: AgentRequestPayload) -> AgentRequestResult:
        reply = await self.collaboration.respond(
            payload.user_id,
            payload.message,
            preferred_agent=payload.preferred_agent,
            context=payload.context,
        )
        return AgentRequestResult(
            agent_id=reply.agent_id,
            agent_name=reply.agent_name,
            response=reply.response,
            collaborators=reply.collaborators,
        )

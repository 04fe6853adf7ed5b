"""
Onboarding steps and the welcome notification.

Both are external collaborators; the stub and logging implementations here
are what the service wires in when nothing else is supplied.
"""

import uuid
from typing import Protocol

from jobrelay.config.logging import get_logger
from jobrelay.v1.domain.agents import AGENT_ROSTER

logger = get_logger(__name__)


class OnboardingSteps(Protocol):
    """Protocol for the per-user onboarding operations."""

    async def create_initial_goals(self, user_id: str) -> list[str]: ...

    async def setup_competitive_intelligence(self, user_id: str) -> int: ...

    async def initialize_agents(self, user_id: str) -> list[str]: ...

    async def create_onboarding_tasks(self, user_id: str, goal_ids: list[str]) -> int: ...

    async def schedule_intelligence_briefing(self, user_id: str) -> bool: ...

    async def mark_onboarding_complete(self, user_id: str) -> None: ...


class Notifier(Protocol):
    """Protocol for user-facing notifications (email, push)."""

    async def send_welcome(
        self, user_id: str, email: str | None, full_name: str | None
    ) -> str:
        """Send the welcome message and return its notification id."""
        ...


class StubOnboardingSteps:
    """In-process onboarding that produces deterministic counts."""

    INITIAL_GOALS = ("define-offer", "first-customer", "weekly-review")
    TASKS_PER_GOAL = 2

    async def create_initial_goals(self, user_id: str) -> list[str]:
        return [f"{user_id}:{goal}" for goal in self.INITIAL_GOALS]

    async def setup_competitive_intelligence(self, user_id: str) -> int:
        return 0

    async def initialize_agents(self, user_id: str) -> list[str]:
        return list(AGENT_ROSTER)

    async def create_onboarding_tasks(self, user_id: str, goal_ids: list[str]) -> int:
        return len(goal_ids) * self.TASKS_PER_GOAL

    async def schedule_intelligence_briefing(self, user_id: str) -> bool:
        return True

    async def mark_onboarding_complete(self, user_id: str) -> None:
        logger.info("Onboarding marked complete", user_id=user_id)


class LoggingNotifier:
    """Notifier that records the welcome message in the log."""

    async def send_welcome(
        self, user_id: str, email: str | None, full_name: str | None
    ) -> str:
        notification_id = str(uuid.uuid4())
        logger.info(
            "Welcome notification sent",
            user_id=user_id,
            email=email,
            full_name=full_name,
            notification_id=notification_id,
        )
        return notification_id

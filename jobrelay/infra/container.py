"""
Process-wide dependencies, built once at startup and handed to the app.
"""

from dataclasses import dataclass

import httpx
from fastapi import Request

from jobrelay.config.settings import Settings
from jobrelay.infra.database import Database
from jobrelay.v1.core.signing import SignatureVerifier
from jobrelay.v1.domain.agents import AgentCollaboration, StubAgentCollaboration
from jobrelay.v1.domain.onboarding import (
    LoggingNotifier,
    Notifier,
    OnboardingSteps,
    StubOnboardingSteps,
)
from jobrelay.v1.infra.jobs.enqueuer import JobEnqueuer
from jobrelay.v1.infra.jobs.processor import JobProcessor
from jobrelay.v1.infra.jobs.queue import QueuePublisher
from jobrelay.v1.infra.jobs.registry_init import build_job_registry
from jobrelay.v1.infra.jobs.store import JobStore


@dataclass
class Services:
    settings: Settings
    database: Database
    store: JobStore
    publisher: QueuePublisher
    enqueuer: JobEnqueuer
    verifier: SignatureVerifier
    processor: JobProcessor

    async def aclose(self) -> None:
        await self.publisher.aclose()
        await self.database.close()


def build_services(
    settings: Settings,
    collaboration: AgentCollaboration | None = None,
    onboarding_steps: OnboardingSteps | None = None,
    notifier: Notifier | None = None,
    queue_transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    """Wire the job system from settings; collaborators default to the stubs."""
    database = Database(settings)
    store = JobStore(database)
    publisher = QueuePublisher(
        settings.queue_url,
        settings.queue_token,
        timeout=settings.queue_publish_timeout_s,
        max_retries=settings.queue_max_retries,
        transport=queue_transport,
    )
    registry = build_job_registry(
        settings,
        collaboration or StubAgentCollaboration(),
        onboarding_steps or StubOnboardingSteps(),
        notifier or LoggingNotifier(),
    )

    return Services(
        settings=settings,
        database=database,
        store=store,
        publisher=publisher,
        enqueuer=JobEnqueuer(settings, store, publisher),
        verifier=SignatureVerifier(
            settings.queue_current_signing_key,
            settings.queue_next_signing_key,
            clock_tolerance_s=settings.signature_clock_tolerance_s,
        ),
        processor=JobProcessor(store, registry),
    )


def get_services(request: Request) -> Services:
    """Dependency injection function for the app's services."""
    return request.app.state.services

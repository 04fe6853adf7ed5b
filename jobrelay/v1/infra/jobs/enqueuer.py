"""
Enqueuer: turns a domain request into a stored job plus a push-queue message.
"""

import uuid
from typing import Any

from pydantic import BaseModel

from jobrelay.config.logging import get_logger
from jobrelay.config.settings import Settings
from jobrelay.v1.core.exceptions import ConfigurationError
from jobrelay.v1.infra.jobs.queue import QueuePublisher
from jobrelay.v1.infra.jobs.schemas import (
    AgentRequestPayload,
    EnqueueReceipt,
    OnboardingPayload,
)
from jobrelay.v1.infra.jobs.store import JobStore

logger = get_logger(__name__)


class JobEnqueuer:
    """Creates jobs and dispatches them to the worker webhook via the queue."""

    def __init__(self, settings: Settings, store: JobStore, publisher: QueuePublisher):
        self.settings = settings
        self.store = store
        self.publisher = publisher

    def _require_config(self) -> tuple[str, str]:
        """Token and callback URL, or ConfigurationError naming what is missing."""
        missing = []
        if not self.settings.queue_token:
            missing.append("QUEUE_TOKEN")
        callback_url = self.settings.callback_url
        if not callback_url:
            missing.append("APP_BASE_URL or WORKER_CALLBACK_URL")
        if missing:
            raise ConfigurationError(
                "Push-queue is not configured", details={"missing": missing}
            )
        return self.settings.queue_token, callback_url

    async def enqueue(
        self, payload: BaseModel, request_id: str | None = None
    ) -> EnqueueReceipt:
        """
        Store a ``queued`` job and publish its id to the push-queue.

        Args:
            payload: Kind-tagged payload (``OnboardingPayload``, ``AgentRequestPayload``)
            request_id: Request ID for tracing

        Returns:
            Receipt with the job id; the job runs later

        Raises:
            ConfigurationError: Queue token or callback URL missing; nothing is stored
            InfrastructureError: Store or queue unavailable; a stored job stays queued
        """
        _, callback_url = self._require_config()

        # The id goes into both the record and the message
        job_id = uuid.uuid4()
        job = await self.store.create(payload, job_id=job_id, request_id=request_id)

        message: dict[str, Any] = {"jobId": str(job.id), "kind": job.kind}
        user_id = getattr(payload, "user_id", None)
        if user_id is not None:
            message["userId"] = user_id

        try:
            receipt = await self.publisher.publish(callback_url, message)
        except Exception:
            logger.error(
                "Job stored but not dispatched",
                job_id=str(job.id),
                kind=job.kind,
            )
            raise

        logger.info(
            "Job enqueued",
            job_id=str(job.id),
            kind=job.kind,
            message_id=receipt.message_id,
        )
        return EnqueueReceipt(
            job_id=job.id, status=job.status, message_id=receipt.message_id
        )

    async def enqueue_onboarding(
        self,
        user_id: str,
        email: str | None = None,
        full_name: str | None = None,
        request_id: str | None = None,
    ) -> EnqueueReceipt:
        """Enqueue the onboarding sequence for a user."""
        payload = OnboardingPayload(user_id=user_id, email=email, full_name=full_name)
        return await self.enqueue(payload, request_id=request_id)

    async def enqueue_agent_request(
        self,
        user_id: str,
        message: str,
        preferred_agent: str | None = None,
        context: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> EnqueueReceipt:
        """Enqueue a custom agent request."""
        payload = AgentRequestPayload(
            user_id=user_id,
            message=message,
            preferred_agent=preferred_agent,
            context=context or {},
        )
        return await self.enqueue(payload, request_id=request_id)

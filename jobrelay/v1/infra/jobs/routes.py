"""
Job API endpoints.

- Enqueue endpoints for each job kind
- The signed webhook the push-queue calls back
- Job status lookup
"""

from typing import Any
from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends, Request, status

from jobrelay.config.logging import get_logger
from jobrelay.infra.container import Services, get_services
from jobrelay.v1.core.exceptions import (
    AuthenticationError,
    JobNotFoundError,
    ValidationError,
    create_success_response,
)
from jobrelay.v1.infra.jobs.schemas import (
    AgentRequestEnqueueRequest,
    OnboardingEnqueueRequest,
    WorkerDelivery,
    WorkerResponse,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/onboarding", status_code=status.HTTP_202_ACCEPTED)
async def enqueue_onboarding(
    body: OnboardingEnqueueRequest,
    request: Request,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Enqueue the onboarding sequence for a user."""
    receipt = await services.enqueuer.enqueue_onboarding(
        body.user_id,
        email=body.email,
        full_name=body.full_name,
        request_id=getattr(request.state, "request_id", None),
    )
    return receipt.model_dump(mode="json", by_alias=True)


@router.post("/agent-requests", status_code=status.HTTP_202_ACCEPTED)
async def enqueue_agent_request(
    body: AgentRequestEnqueueRequest,
    request: Request,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Enqueue a custom agent request."""
    receipt = await services.enqueuer.enqueue_agent_request(
        body.user_id,
        body.message,
        preferred_agent=body.preferred_agent,
        context=body.context,
        request_id=getattr(request.state, "request_id", None),
    )
    return receipt.model_dump(mode="json", by_alias=True)


@router.post("/worker")
async def receive_worker_delivery(
    request: Request,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """
    Webhook the push-queue calls for every published job message.

    The signature is checked over the exact raw bytes before the body is
    parsed. A duplicate delivery for a finished job answers 200 with the
    stored status and does nothing else.
    """
    settings = services.settings
    body = await request.body()

    signature = request.headers.get(settings.queue_signature_header)
    if not signature:
        raise AuthenticationError("Missing queue signature")

    services.verifier.verify(
        signature=signature,
        body=body,
        url=settings.callback_url or str(request.url),
    )

    try:
        delivery = WorkerDelivery.model_validate_json(body)
    except pydantic.ValidationError as e:
        errors = e.errors(
            include_url=False, include_context=False, include_input=False
        )
        raise ValidationError(
            "Invalid worker payload", details={"errors": errors}
        ) from e

    logger.info(
        "Worker delivery received",
        job_id=str(delivery.job_id),
        kind=delivery.kind.value if delivery.kind else None,
        retried=request.headers.get("Upstash-Retried"),
    )

    job = await services.processor.process(delivery.job_id)

    return WorkerResponse(job_id=job.id, status=job.status).model_dump(
        mode="json", by_alias=True
    )


@router.get("/{job_id}")
async def get_job(
    job_id: UUID,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Current state of a job."""
    job = await services.store.get(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return create_success_response(data=job.model_dump(mode="json"))

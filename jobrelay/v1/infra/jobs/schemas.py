"""
Job system Pydantic schemas.
"""

from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from jobrelay.v1.infra.jobs.models import JobKind, JobStatus


# Payloads: immutable input captured at enqueue time, tagged by kind


class OnboardingPayload(BaseModel):
    """Input for the new-user onboarding sequence."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["onboarding"] = JobKind.ONBOARDING.value
    user_id: str = Field(..., min_length=1)
    email: str | None = None
    full_name: str | None = None


class AgentRequestPayload(BaseModel):
    """Input for a custom AI agent request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["agent-request"] = JobKind.AGENT_REQUEST.value
    user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    preferred_agent: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)


JobPayload = Annotated[
    OnboardingPayload | AgentRequestPayload, Field(discriminator="kind")
]
job_payload_adapter: TypeAdapter[JobPayload] = TypeAdapter(JobPayload)


# Results stored on completed jobs


class OnboardingResult(BaseModel):
    steps: list[str]
    goals_created: int
    tasks_created: int
    agents_initialized: list[str]
    welcome_notification_id: str


class AgentRequestResult(BaseModel):
    agent_id: str
    agent_name: str
    response: str
    collaborators: list[str] = Field(default_factory=list)


# Job snapshots


class JobRecord(BaseModel):
    """Immutable snapshot of a job row as returned by the job store."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    kind: str
    payload: dict[str, Any]
    status: JobStatus
    attempts: int
    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    request_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_terminal(self) -> bool:
        """Check if job is completed or failed."""
        return self.status in JobStatus.terminal()

    def typed_payload(self) -> OnboardingPayload | AgentRequestPayload:
        """Validate the stored payload into its kind-specific model."""
        return job_payload_adapter.validate_python(self.payload)


class JobUpdate(BaseModel):
    """Partial update applied by the job store."""

    status: JobStatus | None = None
    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None


# Webhook delivery


class WorkerDelivery(BaseModel):
    """Body the push-queue delivers to the worker webhook."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    job_id: UUID = Field(..., alias="jobId")
    kind: JobKind | None = None
    user_id: str | None = Field(default=None, alias="userId")


class WorkerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    job_id: UUID = Field(..., serialization_alias="jobId")
    status: JobStatus


# Enqueue API


class OnboardingEnqueueRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    email: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")


class AgentRequestEnqueueRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    message: str = Field(..., min_length=1)
    preferred_agent: str | None = Field(default=None, alias="preferredAgent")
    context: dict[str, Any] = Field(default_factory=dict)


class EnqueueReceipt(BaseModel):
    """What the caller gets back: the job id to poll, not the job outcome."""

    job_id: UUID = Field(..., serialization_alias="jobId")
    status: JobStatus
    message_id: str | None = Field(default=None, serialization_alias="messageId")

"""
Job record for push-queue background processing.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, TIMESTAMP, CheckConstraint, Index, Integer, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from jobrelay.infra.database import Base


class JobStatus(str, Enum):
    """Job status enumeration."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def terminal(cls) -> tuple["JobStatus", ...]:
        return (cls.COMPLETED, cls.FAILED)

    @classmethod
    def claimable(cls) -> tuple["JobStatus", ...]:
        return (cls.QUEUED, cls.PROCESSING)


class JobKind(str, Enum):
    """Kinds of background work the processor knows how to run."""

    ONBOARDING = "onboarding"
    AGENT_REQUEST = "agent-request"


class Job(Base):
    """
    One unit of background work and its lifecycle.

    - Created ``queued`` with zero attempts by the enqueuer
    - Claimed into ``processing`` with ``attempts + 1`` by the processor
    - Finished as ``completed`` (with ``result``) or ``failed`` (with ``error``)
    """

    __tablename__ = "background_jobs"

    # Core fields
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    kind: Mapped[str] = mapped_column(
        Text, nullable=False, comment="Job kind: onboarding|agent-request"
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, comment="Input captured at enqueue time"
    )

    # Job state
    status: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=JobStatus.QUEUED.value,
        comment="Job status: queued|processing|completed|failed",
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Number of processing attempts"
    )

    # Outcome
    result: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True, comment="Handler output, set only when completed"
    )
    error: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True, comment="{name, message, stack, kind}, set only when failed"
    )

    # Tracing
    request_id: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Request ID that enqueued the job"
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('queued', 'processing', 'completed', 'failed')",
            name="background_jobs_status_check",
        ),
        CheckConstraint("attempts >= 0", name="background_jobs_attempts_check"),
        Index("ix_background_jobs_status", "status"),
        Index("ix_background_jobs_created_at", "created_at"),
    )

"""
Durable job store.

Every method opens its own session so the store can be shared by concurrent
webhook invocations. Status transitions are single conditional UPDATE
statements: the database, not the caller, decides which of two racing
invocations wins.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from jobrelay.config.logging import get_logger
from jobrelay.infra.database import Database
from jobrelay.v1.core.exceptions import InfrastructureError
from jobrelay.v1.infra.jobs.models import Job, JobStatus
from jobrelay.v1.infra.jobs.schemas import JobRecord, JobUpdate

logger = get_logger(__name__)


class JobStore:
    """Job records addressable by id."""

    def __init__(self, database: Database):
        self.database = database

    async def create(
        self,
        payload: BaseModel,
        job_id: UUID | None = None,
        request_id: str | None = None,
    ) -> JobRecord:
        """
        Persist a new ``queued`` job with zero attempts.

        Args:
            payload: Kind-tagged payload model (``OnboardingPayload``, ...)
            job_id: Identifier chosen by the caller; a fresh UUID otherwise
            request_id: Request ID for tracing

        Raises:
            InfrastructureError: The job could not be persisted
        """
        data = payload.model_dump(mode="json")
        now = datetime.now(UTC)
        job = Job(
            id=job_id or uuid4(),
            kind=data["kind"],
            payload=data,
            status=JobStatus.QUEUED.value,
            attempts=0,
            request_id=request_id,
            created_at=now,
            updated_at=now,
        )
        job_key = str(job.id)

        try:
            async with self.database.SessionLocal() as session:
                session.add(job)
                await session.commit()
                await session.refresh(job)
                record = JobRecord.model_validate(job)
        except SQLAlchemyError as e:
            logger.error("Job create failed", job_id=job_key, error=str(e))
            raise InfrastructureError(
                "Failed to create job", details={"job_id": job_key}
            ) from e

        logger.info("Job created", job_id=str(record.id), kind=record.kind)
        return record

    async def get(self, job_id: UUID) -> JobRecord | None:
        """Return the current record, or None if the id is unknown."""
        try:
            async with self.database.SessionLocal() as session:
                job = await session.get(Job, job_id)
                return JobRecord.model_validate(job) if job else None
        except SQLAlchemyError as e:
            raise InfrastructureError(
                "Failed to load job", details={"job_id": str(job_id)}
            ) from e

    async def update(
        self,
        job_id: UUID,
        changes: JobUpdate,
        only_if_status: Iterable[JobStatus] | None = None,
        increment_attempts: bool = False,
    ) -> JobRecord | None:
        """
        Apply a partial update atomically and refresh ``updated_at``.

        Only fields explicitly set on ``changes`` are written, so
        ``JobUpdate(result=None)`` clears a result while ``JobUpdate()``
        leaves it alone.

        Returns:
            The updated record, or None when no row matched (unknown id, or
            the job's status is not in ``only_if_status``)
        """
        values: dict[str, Any] = changes.model_dump(mode="json", exclude_unset=True)
        values["updated_at"] = datetime.now(UTC)
        if increment_attempts:
            values["attempts"] = Job.attempts + 1

        stmt = update(Job).where(Job.id == job_id)
        if only_if_status is not None:
            stmt = stmt.where(Job.status.in_([s.value for s in only_if_status]))
        stmt = stmt.values(**values).returning(Job)

        try:
            async with self.database.SessionLocal() as session:
                result = await session.execute(
                    stmt, execution_options={"synchronize_session": False}
                )
                job = result.scalar_one_or_none()
                await session.commit()
                return JobRecord.model_validate(job) if job else None
        except SQLAlchemyError as e:
            logger.error("Job update failed", job_id=str(job_id), error=str(e))
            raise InfrastructureError(
                "Failed to update job", details={"job_id": str(job_id)}
            ) from e

    async def claim(self, job_id: UUID) -> JobRecord | None:
        """Move a queued or processing job to processing and count the attempt."""
        return await self.update(
            job_id,
            JobUpdate(status=JobStatus.PROCESSING),
            only_if_status=JobStatus.claimable(),
            increment_attempts=True,
        )

    async def complete(self, job_id: UUID, result: dict[str, Any]) -> JobRecord | None:
        """Record a successful outcome unless the job is already terminal."""
        return await self.update(
            job_id,
            JobUpdate(status=JobStatus.COMPLETED, result=result, error=None),
            only_if_status=[JobStatus.PROCESSING],
        )

    async def fail(self, job_id: UUID, error: dict[str, Any]) -> JobRecord | None:
        """Record a failed outcome unless the job is already terminal."""
        return await self.update(
            job_id,
            JobUpdate(status=JobStatus.FAILED, error=error, result=None),
            only_if_status=[JobStatus.PROCESSING],
        )

    async def count_by_status(self) -> dict[str, int]:
        """Number of jobs in each status."""
        try:
            async with self.database.SessionLocal() as session:
                result = await session.execute(
                    select(Job.status, func.count(Job.id)).group_by(Job.status)
                )
                counts = dict(result.all())
        except SQLAlchemyError as e:
            raise InfrastructureError("Failed to count jobs") from e

        return {status.value: counts.get(status.value, 0) for status in JobStatus}

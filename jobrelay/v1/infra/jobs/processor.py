"""
Job processor: runs one job to a terminal state per webhook delivery.

The push-queue delivers at least once, possibly out of order and possibly
concurrently for the same job. The processor is idempotent with respect to
that: a job that is already completed or failed is returned untouched, and
the terminal write only lands on a job that is still ``processing``.
"""

import time
import traceback
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from jobrelay.config.logging import get_logger
from jobrelay.v1.core.exceptions import DomainExecutionError, JobNotFoundError
from jobrelay.v1.core.registries import JobHandlerRegistry
from jobrelay.v1.infra.jobs.schemas import JobRecord
from jobrelay.v1.infra.jobs.store import JobStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class Success:
    result: dict[str, Any]


@dataclass(frozen=True)
class Failure:
    error: DomainExecutionError


ExecutionOutcome = Success | Failure


class JobProcessor:
    """Loads, claims, executes and finalizes jobs by id."""

    def __init__(self, store: JobStore, registry: JobHandlerRegistry):
        self.store = store
        self.registry = registry

    async def process(self, job_id: UUID) -> JobRecord:
        """
        Execute a job to a terminal state.

        Returns:
            The terminal job record. For a job that was already terminal this
            is the stored record, unchanged.

        Raises:
            JobNotFoundError: No job has this id
            InfrastructureError: The job store is unavailable
        """
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        job_logger = logger.bind(job_id=str(job_id), kind=job.kind)

        if job.is_terminal:
            job_logger.info("Duplicate delivery for finished job", status=job.status.value)
            return job

        claimed = await self.store.claim(job_id)
        if claimed is None:
            # Another invocation finished it between our read and claim
            return await self._current(job_id)

        job_logger.info("Processing job started", attempts=claimed.attempts)
        start = time.monotonic()

        outcome = await self._execute(claimed)

        if isinstance(outcome, Success):
            finished = await self.store.complete(job_id, outcome.result)
            job_logger.info(
                "Processing job completed",
                attempts=claimed.attempts,
                duration_s=round(time.monotonic() - start, 3),
            )
        else:
            finished = await self.store.fail(job_id, outcome.error.to_record())
            job_logger.warning(
                "Processing job failed",
                attempts=claimed.attempts,
                error=outcome.error.message,
                error_name=outcome.error.cause.__class__.__name__,
            )

        if finished is None:
            job_logger.info("Terminal write lost to a concurrent delivery")
            return await self._current(job_id)
        return finished

    async def _execute(self, job: JobRecord) -> ExecutionOutcome:
        """Run the handler for the job's kind; never raises."""
        try:
            handler = self.registry.get(job.kind)
            payload = job.typed_payload()
            result = await handler.handle(payload)
            return Success(result=result.model_dump(mode="json"))
        except Exception as e:
            stack = "".join(traceback.format_exception(e))
            return Failure(error=DomainExecutionError(e, stack=stack))

    async def _current(self, job_id: UUID) -> JobRecord:
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

"""Job service - work orders and their status history."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext
from fieldsmart.models import Job, JobStatusHistory
from fieldsmart.models.enums import JobStatus
from fieldsmart.models.mixins import as_utc, new_id, utcnow
from fieldsmart.storage.repositories import (
    LIKE_ESCAPE,
    contains_pattern,
    fetch_page,
    require_active_tenant,
    require_address,
    require_customer,
    require_scoped,
    resolve_author,
)
from fieldsmart.storage.sequences import insert_numbered
from fieldsmart.validation.payload import ensure_window

logger = logging.getLogger(__name__)


def apply_status(job: Job, new_status: str, now: datetime, reason: str | None = None) -> None:
    """Set the status and stamp the timestamps that go with it."""
    job.status = new_status
    if new_status == JobStatus.DISPATCHED.value:
        job.dispatched_at = now
    elif new_status == JobStatus.COMPLETED.value:
        job.completed_at = now
        if job.actual_end is None:
            job.actual_end = now
    elif new_status == JobStatus.CANCELLED.value:
        job.cancelled_at = now
        if reason is not None:
            job.cancellation_reason = reason


class JobService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _record_transition(
        self, job_id: str, from_status: str | None, to_status: str, changed_by_id: str | None, notes: str | None
    ) -> None:
        self.db.add(
            JobStatusHistory(
                job_id=job_id,
                from_status=from_status,
                to_status=to_status,
                changed_by_id=changed_by_id,
                notes=notes,
            )
        )

    async def create(self, tenant: TenantContext, data: dict[str, Any]) -> Job:
        """Create a job numbered JOB-NNNNNN; scheduled if a start time is given."""
        tenant_id = tenant.tenant_id
        await require_active_tenant(self.db, tenant_id)
        await require_customer(self.db, tenant_id, data["customer_id"])
        await require_address(self.db, tenant_id, data["address_id"], data["customer_id"])
        author_id = await resolve_author(self.db, tenant_id, tenant.user_id)
        status = JobStatus.SCHEDULED.value if data.get("scheduled_start") else JobStatus.UNSCHEDULED.value
        fields = {name: value for name, value in data.items() if value is not None}
        job_id = new_id()

        async def build(number: str) -> Job:
            job = Job(
                id=job_id,
                tenant_id=tenant_id,
                job_number=number,
                status=status,
                created_by_id=author_id,
                **fields,
            )
            self.db.add(job)
            # History rows reference the job row
            await self.db.flush()
            self._record_transition(job_id, None, status, author_id, "Job created")
            return job

        job = await insert_numbered(self.db, tenant_id, "job", build)
        logger.info("Created job %s (%s) for tenant %s", job_id, job.job_number, tenant_id)
        return await self.get(tenant, job_id)

    async def get(self, tenant: TenantContext, job_id: str) -> Job:
        return await require_scoped(self.db, Job, job_id, tenant.tenant_id, "Job")

    async def list_jobs(
        self,
        tenant: TenantContext,
        limit: int,
        offset: int,
        statuses: list[str] | None = None,
        customer_id: str | None = None,
        start_from: datetime | None = None,
        start_to: datetime | None = None,
        q: str | None = None,
    ) -> tuple[list[Job], int]:
        stmt = select(Job).where(Job.tenant_id == tenant.tenant_id)
        if statuses:
            stmt = stmt.where(Job.status.in_(statuses))
        if customer_id:
            stmt = stmt.where(Job.customer_id == customer_id)
        if start_from is not None:
            stmt = stmt.where(Job.scheduled_start >= as_utc(start_from))
        if start_to is not None:
            stmt = stmt.where(Job.scheduled_start <= as_utc(start_to))
        if q and q.strip():
            pattern = contains_pattern(q)
            stmt = stmt.where(
                or_(Job.job_number.ilike(pattern, escape=LIKE_ESCAPE), Job.title.ilike(pattern, escape=LIKE_ESCAPE))
            )
        stmt = stmt.order_by(Job.created_at.desc(), Job.job_number.desc())
        return await fetch_page(self.db, stmt, limit, offset)

    async def update(self, tenant: TenantContext, job_id: str, patch: dict[str, Any]) -> Job:
        """Partial update. A status change stamps its timestamp and appends a history row."""
        job = await self.get(tenant, job_id)
        patch = dict(patch)
        new_status = patch.pop("status", None)
        ensure_window(
            patch.get("scheduled_start", job.scheduled_start),
            patch.get("scheduled_end", job.scheduled_end),
        )
        for name, value in patch.items():
            setattr(job, name, value)
        if new_status is not None and new_status != job.status:
            previous = job.status
            author_id = await resolve_author(self.db, tenant.tenant_id, tenant.user_id)
            reason = patch.get("cancellation_reason")
            apply_status(job, new_status, utcnow(), reason)
            self._record_transition(job_id, previous, new_status, author_id, reason)
            logger.info("Job %s status %s -> %s (tenant %s)", job_id, previous, new_status, tenant.tenant_id)
        await self.db.commit()
        logger.info("Updated job %s for tenant %s", job_id, tenant.tenant_id)
        return await self.get(tenant, job_id)

    async def history(self, tenant: TenantContext, job_id: str) -> list[JobStatusHistory]:
        """Status transitions of a job, oldest first."""
        await self.get(tenant, job_id)
        result = await self.db.execute(
            select(JobStatusHistory)
            .where(JobStatusHistory.job_id == job_id)
            .order_by(JobStatusHistory.created_at, JobStatusHistory.id)
        )
        return list(result.scalars().all())

"""Job endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody, PageDep, to_page
from fieldsmart.auth.middleware import TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.common import Page
from fieldsmart.schemas.job import JobCreate, JobResponse, JobStatusHistoryResponse, JobUpdate
from fieldsmart.services.jobs import JobService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.get("/jobs", response_model=Page[JobResponse])
async def list_jobs(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    job_status: Annotated[str | None, Query(alias="status")] = None,
    customer_id: Annotated[str | None, Query(alias="customerId")] = None,
    start_from: Annotated[datetime | None, Query(alias="from")] = None,
    start_to: Annotated[datetime | None, Query(alias="to")] = None,
    q: str | None = None,
):
    """List jobs, newest first. ``status`` takes a comma-separated list."""
    statuses = [part.strip().upper() for part in job_status.split(",") if part.strip()] if job_status else None
    records, total = await JobService(db).list_jobs(
        tenant,
        page.limit,
        page.offset,
        statuses=statuses,
        customer_id=customer_id,
        start_from=start_from,
        start_to=start_to,
        q=q,
    )
    return to_page(JobResponse, records, total, page)


@router.post("/jobs", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    data = validate_patch(body, JobCreate)
    return await JobService(db).create(tenant, data)


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await JobService(db).get(tenant, job_id)


@router.put("/jobs/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Partial update; status changes are recorded in the job's history."""
    patch = validate_patch(body, JobUpdate)
    return await JobService(db).update(tenant, job_id, patch)


@router.get("/jobs/{job_id}/history", response_model=list[JobStatusHistoryResponse])
async def get_job_history(
    job_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await JobService(db).history(tenant, job_id)

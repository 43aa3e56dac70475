"""Appointment endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody, PageDep, to_page
from fieldsmart.auth.middleware import TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentUpdate
from fieldsmart.schemas.common import Page
from fieldsmart.services.appointments import AppointmentService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.get("/appointments", response_model=Page[AppointmentResponse])
async def list_appointments(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    appointment_status: Annotated[str | None, Query(alias="status")] = None,
    customer_id: Annotated[str | None, Query(alias="customerId")] = None,
    assigned_to_id: Annotated[str | None, Query(alias="assignedToId")] = None,
    start_from: Annotated[datetime | None, Query(alias="from")] = None,
    start_to: Annotated[datetime | None, Query(alias="to")] = None,
):
    """List appointments ordered by scheduled start."""
    records, total = await AppointmentService(db).list_appointments(
        tenant,
        page.limit,
        page.offset,
        status=appointment_status.upper() if appointment_status else None,
        customer_id=customer_id,
        assigned_to_id=assigned_to_id,
        start_from=start_from,
        start_to=start_to,
    )
    return to_page(AppointmentResponse, records, total, page)


@router.post("/appointments", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    data = validate_patch(body, AppointmentCreate)
    return await AppointmentService(db).create(tenant, data)


@router.get("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await AppointmentService(db).get(tenant, appointment_id)


@router.put("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Partial update: omitted fields are left as they are."""
    patch = validate_patch(body, AppointmentUpdate)
    return await AppointmentService(db).update(tenant, appointment_id, patch)


@router.delete("/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    await AppointmentService(db).delete(tenant, appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

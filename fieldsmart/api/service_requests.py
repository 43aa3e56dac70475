"""Service request endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody, PageDep, to_page
from fieldsmart.auth.middleware import TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.common import Page
from fieldsmart.schemas.service_request import (
    ServiceRequestCreate,
    ServiceRequestResponse,
    ServiceRequestUpdate,
)
from fieldsmart.services.service_requests import ServiceRequestService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.get("/service-requests", response_model=Page[ServiceRequestResponse])
async def list_service_requests(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    request_status: Annotated[str | None, Query(alias="status")] = None,
    created_source: Annotated[str | None, Query(alias="createdSource")] = None,
    customer_id: Annotated[str | None, Query(alias="customerId")] = None,
    q: str | None = None,
):
    records, total = await ServiceRequestService(db).list_service_requests(
        tenant,
        page.limit,
        page.offset,
        status=request_status.upper() if request_status else None,
        created_source=created_source.upper() if created_source else None,
        customer_id=customer_id,
        q=q,
    )
    return to_page(ServiceRequestResponse, records, total, page)


@router.post("/service-requests", response_model=ServiceRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_service_request(
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    data = validate_patch(body, ServiceRequestCreate)
    return await ServiceRequestService(db).create(tenant, data)


@router.get("/service-requests/{request_id}", response_model=ServiceRequestResponse)
async def get_service_request(
    request_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await ServiceRequestService(db).get(tenant, request_id)


@router.put("/service-requests/{request_id}", response_model=ServiceRequestResponse)
async def update_service_request(
    request_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    patch = validate_patch(body, ServiceRequestUpdate)
    return await ServiceRequestService(db).update(tenant, request_id, patch)


@router.delete("/service-requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service_request(
    request_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Voice agent requests are refused with 403."""
    await ServiceRequestService(db).delete(tenant, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Estimate endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody, PageDep, to_page
from fieldsmart.auth.middleware import TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.common import Page
from fieldsmart.schemas.estimate import EstimateCreate, EstimateResponse, EstimateUpdate
from fieldsmart.services.estimates import EstimateService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.get("/estimates", response_model=Page[EstimateResponse])
async def list_estimates(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    estimate_status: Annotated[str | None, Query(alias="status")] = None,
    customer_id: Annotated[str | None, Query(alias="customerId")] = None,
    q: str | None = None,
):
    records, total = await EstimateService(db).list_estimates(
        tenant,
        page.limit,
        page.offset,
        status=estimate_status.upper() if estimate_status else None,
        customer_id=customer_id,
        q=q,
    )
    return to_page(EstimateResponse, records, total, page)


@router.post("/estimates", response_model=EstimateResponse, status_code=status.HTTP_201_CREATED)
async def create_estimate(
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create an estimate; totals are derived from the line items."""
    data = validate_patch(body, EstimateCreate)
    return await EstimateService(db).create(tenant, data)


@router.get("/estimates/{estimate_id}", response_model=EstimateResponse)
async def get_estimate(
    estimate_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await EstimateService(db).get(tenant, estimate_id)


@router.put("/estimates/{estimate_id}", response_model=EstimateResponse)
async def update_estimate(
    estimate_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    patch = validate_patch(body, EstimateUpdate)
    return await EstimateService(db).update(tenant, estimate_id, patch)


@router.delete("/estimates/{estimate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_estimate(
    estimate_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    await EstimateService(db).delete(tenant, estimate_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Customer endpoints - customers and addresses."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody, PageDep, to_page
from fieldsmart.auth.middleware import TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.common import Page
from fieldsmart.schemas.customer import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
    normalize_customer_type,
)
from fieldsmart.services.customers import CustomerService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.get("/customers", response_model=Page[CustomerResponse])
async def list_customers(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    include_archived: Annotated[bool, Query(alias="includeArchived")] = False,
):
    """List customers, newest first."""
    records, total = await CustomerService(db).list_customers(tenant, page.limit, page.offset, include_archived)
    return to_page(CustomerResponse, records, total, page)


@router.post("/customers", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a customer. Inline address fields create its primary service address."""
    data = validate_patch(body, CustomerCreate)
    return await CustomerService(db).create(tenant, data)


@router.get("/customers/search", response_model=Page[CustomerResponse])
async def search_customers(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    q: str | None = None,
    customer_type: Annotated[str | None, Query(alias="type")] = None,
):
    """Search by name, email, phone or customer number."""
    if customer_type:
        customer_type = normalize_customer_type(customer_type)
    records, total = await CustomerService(db).search_customers(tenant, q, customer_type, page.limit, page.offset)
    return to_page(CustomerResponse, records, total, page)


@router.get("/customers/by-number/{customer_number}", response_model=CustomerResponse)
async def get_customer_by_number(
    customer_number: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get customer by business number (CUST-000001)."""
    return await CustomerService(db).get_by_number(tenant, customer_number)


@router.get("/customers/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await CustomerService(db).get(tenant, customer_id)


@router.put("/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Partial update: omitted fields are left as they are."""
    patch = validate_patch(body, CustomerUpdate)
    return await CustomerService(db).update(tenant, customer_id, patch)


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Archive a customer."""
    await CustomerService(db).delete(tenant, customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/customers/{customer_id}/addresses",
    response_model=AddressResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_address(
    customer_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    data = validate_patch(body, AddressCreate)
    return await CustomerService(db).add_address(tenant, customer_id, data)


@router.put("/customers/{customer_id}/addresses/{address_id}", response_model=AddressResponse)
async def update_address(
    customer_id: str,
    address_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    patch = validate_patch(body, AddressUpdate)
    return await CustomerService(db).update_address(tenant, customer_id, address_id, patch)


@router.delete("/customers/{customer_id}/addresses/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    customer_id: str,
    address_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    await CustomerService(db).delete_address(tenant, customer_id, address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Invoice endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody, PageDep, to_page
from fieldsmart.auth.middleware import TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.common import Page
from fieldsmart.schemas.invoice import InvoiceCreate, InvoiceResponse, InvoiceUpdate, PaymentCreate
from fieldsmart.services.invoices import InvoiceService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.get("/invoices", response_model=Page[InvoiceResponse])
async def list_invoices(
    tenant: TenantDep,
    page: PageDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    invoice_status: Annotated[str | None, Query(alias="status")] = None,
    customer_id: Annotated[str | None, Query(alias="customerId")] = None,
    q: str | None = None,
):
    records, total = await InvoiceService(db).list_invoices(
        tenant,
        page.limit,
        page.offset,
        status=invoice_status.upper() if invoice_status else None,
        customer_id=customer_id,
        q=q,
    )
    return to_page(InvoiceResponse, records, total, page)


@router.post("/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a draft invoice; totals are derived from the line items."""
    data = validate_patch(body, InvoiceCreate)
    return await InvoiceService(db).create(tenant, data)


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    tenant: TenantDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await InvoiceService(db).get(tenant, invoice_id)


@router.put("/invoices/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    patch = validate_patch(body, InvoiceUpdate)
    return await InvoiceService(db).update(tenant, invoice_id, patch)


@router.post(
    "/invoices/{invoice_id}/payments",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_payment(
    invoice_id: str,
    tenant: TenantDep,
    body: JsonBody,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Record a payment and return the updated invoice."""
    data = validate_patch(body, PaymentCreate)
    return await InvoiceService(db).add_payment(tenant, invoice_id, data)

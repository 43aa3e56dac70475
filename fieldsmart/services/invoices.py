"""Invoice service - invoices, line items, payments."""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext
from fieldsmart.errors import ValidationError
from fieldsmart.models import Customer, Invoice, InvoiceLineItem, Job, JobStatusHistory, Payment
from fieldsmart.models.enums import InvoiceStatus, JobStatus, PaymentTerms
from fieldsmart.models.mixins import new_id, utcnow
from fieldsmart.storage.repositories import (
    LIKE_ESCAPE,
    contains_pattern,
    fetch_page,
    require_active_tenant,
    require_customer,
    require_scoped,
    resolve_author,
)
from fieldsmart.storage.sequences import insert_numbered

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

TERMS_DAYS = {
    PaymentTerms.DUE_ON_RECEIPT.value: 0,
    PaymentTerms.NET_7.value: 7,
    PaymentTerms.NET_15.value: 15,
    PaymentTerms.NET_30.value: 30,
    PaymentTerms.NET_60.value: 60,
}

CLOSED_STATUSES = {InvoiceStatus.VOID.value, InvoiceStatus.REFUNDED.value}


def to_cents(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def due_date_for(issue_date: datetime, terms: str) -> datetime:
    return issue_date + timedelta(days=TERMS_DAYS[terms])


def compute_totals(lines: Iterable[tuple[Decimal, bool]], tax_rate: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """
    (line total, taxable) pairs -> (subtotal, tax, total).

    Tax applies to taxable lines only and is rounded to cents.
    """
    subtotal = Decimal("0")
    taxable = Decimal("0")
    for line_total, is_taxable in lines:
        subtotal += line_total
        if is_taxable:
            taxable += line_total
    tax = to_cents(taxable * Decimal(tax_rate) / Decimal("100"))
    subtotal = to_cents(subtotal)
    return subtotal, tax, subtotal + tax


class InvoiceService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, tenant: TenantContext, data: dict[str, Any]) -> Invoice:
        """Create a DRAFT invoice numbered INV-NNNNNN with its line items."""
        tenant_id = tenant.tenant_id
        await require_active_tenant(self.db, tenant_id)
        await require_customer(self.db, tenant_id, data["customer_id"])
        if data.get("job_id"):
            await require_scoped(self.db, Job, data["job_id"], tenant_id, "Job")
        author_id = await resolve_author(self.db, tenant_id, tenant.user_id)

        data = dict(data)
        line_inputs = data.pop("line_items", None) or []
        issue_date = utcnow()
        if data.get("due_date") is None:
            data["due_date"] = due_date_for(issue_date, data["terms"])
        tax_rate = Decimal(data.get("tax_rate") or 0)
        lines = []
        for position, line in enumerate(line_inputs):
            total = to_cents(Decimal(line["quantity"]) * Decimal(line["unit_price"]))
            lines.append({**line, "total": total, "sort_order": position})
        subtotal, tax_amount, total = compute_totals(((line["total"], line["is_taxable"]) for line in lines), tax_rate)
        fields = {name: value for name, value in data.items() if value is not None}
        invoice_id = new_id()

        async def build(number: str) -> Invoice:
            invoice = Invoice(
                id=invoice_id,
                tenant_id=tenant_id,
                invoice_number=number,
                status=InvoiceStatus.DRAFT.value,
                issue_date=issue_date,
                created_by_id=author_id,
                subtotal=subtotal,
                tax_amount=tax_amount,
                total=total,
                amount_paid=Decimal("0"),
                **fields,
            )
            for line in lines:
                invoice.line_items.append(InvoiceLineItem(tenant_id=tenant_id, **line))
            self.db.add(invoice)
            return invoice

        invoice = await insert_numbered(self.db, tenant_id, "invoice", build)
        logger.info("Created invoice %s (%s) for tenant %s", invoice_id, invoice.invoice_number, tenant_id)
        return await self.get(tenant, invoice_id)

    async def get(self, tenant: TenantContext, invoice_id: str) -> Invoice:
        return await require_scoped(self.db, Invoice, invoice_id, tenant.tenant_id, "Invoice")

    async def list_invoices(
        self,
        tenant: TenantContext,
        limit: int,
        offset: int,
        status: str | None = None,
        customer_id: str | None = None,
        q: str | None = None,
    ) -> tuple[list[Invoice], int]:
        stmt = select(Invoice).where(Invoice.tenant_id == tenant.tenant_id)
        if status:
            stmt = stmt.where(Invoice.status == status)
        if customer_id:
            stmt = stmt.where(Invoice.customer_id == customer_id)
        if q and q.strip():
            pattern = contains_pattern(q)
            stmt = stmt.join(Customer, Customer.id == Invoice.customer_id).where(
                or_(
                    Invoice.invoice_number.ilike(pattern, escape=LIKE_ESCAPE),
                    Invoice.po_number.ilike(pattern, escape=LIKE_ESCAPE),
                    Customer.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Customer.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Customer.company_name.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        stmt = stmt.order_by(Invoice.created_at.desc(), Invoice.invoice_number.desc())
        return await fetch_page(self.db, stmt, limit, offset)

    async def update(self, tenant: TenantContext, invoice_id: str, patch: dict[str, Any]) -> Invoice:
        """Partial update with status timestamps; a tax rate change recomputes totals."""
        invoice = await self.get(tenant, invoice_id)
        patch = dict(patch)
        new_status = patch.pop("status", None)
        for name, value in patch.items():
            setattr(invoice, name, value)
        if "tax_rate" in patch:
            self._recompute(invoice)
        if new_status is not None and new_status != invoice.status:
            now = utcnow()
            if new_status == InvoiceStatus.SENT.value and invoice.sent_at is None:
                invoice.sent_at = now
            elif new_status == InvoiceStatus.VIEWED.value and invoice.viewed_at is None:
                invoice.viewed_at = now
            elif new_status == InvoiceStatus.PAID.value and invoice.paid_at is None:
                invoice.paid_at = now
            elif new_status == InvoiceStatus.VOID.value:
                invoice.voided_at = now
            logger.info("Invoice %s status %s -> %s (tenant %s)", invoice_id, invoice.status, new_status, tenant.tenant_id)
            invoice.status = new_status
        await self.db.commit()
        logger.info("Updated invoice %s for tenant %s", invoice_id, tenant.tenant_id)
        return await self.get(tenant, invoice_id)

    def _recompute(self, invoice: Invoice) -> None:
        invoice.subtotal, invoice.tax_amount, invoice.total = compute_totals(
            ((item.total, item.is_taxable) for item in invoice.line_items), invoice.tax_rate
        )

    async def add_payment(self, tenant: TenantContext, invoice_id: str, data: dict[str, Any]) -> Invoice:
        """
        Record a payment against an invoice.

        Fully paid invoices become PAID and move their job to PAID; anything
        less leaves the invoice PARTIAL.
        """
        invoice = await self.get(tenant, invoice_id)
        if invoice.status in CLOSED_STATUSES:
            raise ValidationError(f"Cannot record a payment on a {invoice.status.lower()} invoice")
        author_id = await resolve_author(self.db, tenant.tenant_id, tenant.user_id)
        amount = to_cents(data["amount"])
        fields = {name: value for name, value in data.items() if value is not None and name != "amount"}
        self.db.add(
            Payment(
                tenant_id=tenant.tenant_id,
                invoice_id=invoice_id,
                amount=amount,
                collected_by_id=author_id,
                **fields,
            )
        )
        invoice.amount_paid = to_cents(Decimal(invoice.amount_paid) + amount)
        now = utcnow()
        if invoice.amount_paid >= Decimal(invoice.total):
            invoice.status = InvoiceStatus.PAID.value
            invoice.paid_at = invoice.paid_at or now
            if invoice.job_id:
                await self._mark_job_paid(tenant, invoice.job_id, author_id)
        else:
            invoice.status = InvoiceStatus.PARTIAL.value
        await self.db.commit()
        logger.info(
            "Recorded payment of %s on invoice %s (tenant %s), status %s",
            amount,
            invoice_id,
            tenant.tenant_id,
            invoice.status,
        )
        return await self.get(tenant, invoice_id)

    async def _mark_job_paid(self, tenant: TenantContext, job_id: str, author_id: str | None) -> None:
        job = await require_scoped(self.db, Job, job_id, tenant.tenant_id, "Job")
        if job.status == JobStatus.PAID.value:
            return
        self.db.add(
            JobStatusHistory(
                job_id=job_id,
                from_status=job.status,
                to_status=JobStatus.PAID.value,
                changed_by_id=author_id,
                notes="Invoice paid in full",
            )
        )
        job.status = JobStatus.PAID.value

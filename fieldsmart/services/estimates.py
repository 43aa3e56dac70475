"""Estimate service - quotes with priced line items."""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext
from fieldsmart.errors import ConflictError
from fieldsmart.models import Estimate, EstimateLineItem, ServiceRequest
from fieldsmart.models.enums import EstimateStatus
from fieldsmart.models.mixins import new_id, utcnow
from fieldsmart.services.invoices import compute_totals, to_cents
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

logger = logging.getLogger(__name__)

# status -> timestamp column stamped the first time the estimate reaches it
STATUS_STAMPS = {
    EstimateStatus.SENT.value: "sent_at",
    EstimateStatus.VIEWED.value: "viewed_at",
    EstimateStatus.APPROVED.value: "approved_at",
    EstimateStatus.DECLINED.value: "declined_at",
    EstimateStatus.EXPIRED.value: "expired_at",
}


def price_lines(tenant_id: str, line_inputs: list[dict[str, Any]]) -> list[EstimateLineItem]:
    items = []
    for position, line in enumerate(line_inputs):
        total = to_cents(Decimal(line["quantity"]) * Decimal(line["unit_price"]))
        items.append(EstimateLineItem(tenant_id=tenant_id, total=total, sort_order=position, **line))
    return items


def stamp_status(estimate: Estimate, new_status: str) -> None:
    column = STATUS_STAMPS.get(new_status)
    if column and getattr(estimate, column) is None:
        setattr(estimate, column, utcnow())
    estimate.status = new_status


class EstimateService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _recompute(self, estimate: Estimate) -> None:
        subtotal, tax_amount, _ = compute_totals(
            ((item.total, item.is_taxable) for item in estimate.line_items), estimate.tax_rate
        )
        discount = Decimal(estimate.discount_amount or 0)
        estimate.subtotal = subtotal
        estimate.tax_amount = tax_amount
        estimate.total = subtotal - discount + tax_amount

    async def create(self, tenant: TenantContext, data: dict[str, Any]) -> Estimate:
        """Create an estimate numbered EST-NNNNNN for one of the customer's addresses."""
        tenant_id = tenant.tenant_id
        await require_active_tenant(self.db, tenant_id)
        await require_customer(self.db, tenant_id, data["customer_id"])
        await require_address(self.db, tenant_id, data["address_id"], data["customer_id"])
        author_id = await resolve_author(self.db, tenant_id, tenant.user_id)

        data = dict(data)
        line_inputs = data.pop("line_items")
        status = data.pop("status", EstimateStatus.DRAFT.value)
        fields = {name: value for name, value in data.items() if value is not None}
        estimate_id = new_id()

        async def build(number: str) -> Estimate:
            estimate = Estimate(
                id=estimate_id,
                tenant_id=tenant_id,
                estimate_number=number,
                created_by_id=author_id,
                discount_amount=Decimal("0"),
                **fields,
            )
            estimate.line_items.extend(price_lines(tenant_id, line_inputs))
            stamp_status(estimate, status)
            self._recompute(estimate)
            self.db.add(estimate)
            return estimate

        estimate = await insert_numbered(self.db, tenant_id, "estimate", build)
        logger.info("Created estimate %s (%s) for tenant %s", estimate_id, estimate.estimate_number, tenant_id)
        return await self.get(tenant, estimate_id)

    async def get(self, tenant: TenantContext, estimate_id: str) -> Estimate:
        return await require_scoped(self.db, Estimate, estimate_id, tenant.tenant_id, "Estimate")

    async def list_estimates(
        self,
        tenant: TenantContext,
        limit: int,
        offset: int,
        status: str | None = None,
        customer_id: str | None = None,
        q: str | None = None,
    ) -> tuple[list[Estimate], int]:
        stmt = select(Estimate).where(Estimate.tenant_id == tenant.tenant_id)
        if status:
            stmt = stmt.where(Estimate.status == status)
        if customer_id:
            stmt = stmt.where(Estimate.customer_id == customer_id)
        if q and q.strip():
            pattern = contains_pattern(q)
            stmt = stmt.where(
                or_(
                    Estimate.estimate_number.ilike(pattern, escape=LIKE_ESCAPE),
                    Estimate.title.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        stmt = stmt.order_by(Estimate.created_at.desc(), Estimate.estimate_number.desc())
        return await fetch_page(self.db, stmt, limit, offset)

    async def update(self, tenant: TenantContext, estimate_id: str, patch: dict[str, Any]) -> Estimate:
        """Partial update. New line items replace the old ones; totals follow lines and tax rate."""
        estimate = await self.get(tenant, estimate_id)
        patch = dict(patch)
        new_status = patch.pop("status", None)
        line_inputs = patch.pop("line_items", None)
        for name, value in patch.items():
            setattr(estimate, name, value)
        if line_inputs is not None:
            estimate.line_items.clear()
            await self.db.flush()
            estimate.line_items.extend(price_lines(tenant.tenant_id, line_inputs))
        if line_inputs is not None or "tax_rate" in patch:
            self._recompute(estimate)
        if new_status is not None and new_status != estimate.status:
            logger.info("Estimate %s status %s -> %s (tenant %s)", estimate_id, estimate.status, new_status, tenant.tenant_id)
            stamp_status(estimate, new_status)
        await self.db.commit()
        logger.info("Updated estimate %s for tenant %s", estimate_id, tenant.tenant_id)
        return await self.get(tenant, estimate_id)

    async def delete(self, tenant: TenantContext, estimate_id: str) -> None:
        """Hard delete, refused while service requests still point at the estimate."""
        estimate = await self.get(tenant, estimate_id)
        linked = await self.db.scalar(
            select(func.count()).select_from(ServiceRequest).where(ServiceRequest.estimate_id == estimate_id)
        )
        if linked:
            raise ConflictError(f"Estimate is linked to {linked} service request(s); unlink them first")
        await self.db.delete(estimate)
        await self.db.commit()
        logger.info("Deleted estimate %s for tenant %s", estimate_id, tenant.tenant_id)

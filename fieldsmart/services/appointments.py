"""Appointment service."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext
from fieldsmart.models import Appointment
from fieldsmart.models.mixins import as_utc, new_id
from fieldsmart.storage.repositories import (
    fetch_page,
    require_active_tenant,
    require_address,
    require_customer,
    require_scoped,
    require_user,
    resolve_author,
)
from fieldsmart.validation.payload import ensure_window

logger = logging.getLogger(__name__)


class AppointmentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _check_references(self, tenant_id: str, customer_id: str, data: dict[str, Any]) -> None:
        """Referenced customer, address and assignee must belong to the tenant."""
        await require_customer(self.db, tenant_id, customer_id)
        if data.get("address_id"):
            await require_address(self.db, tenant_id, data["address_id"], customer_id)
        if data.get("assigned_to_id"):
            await require_user(self.db, tenant_id, data["assigned_to_id"])

    async def create(self, tenant: TenantContext, data: dict[str, Any]) -> Appointment:
        await require_active_tenant(self.db, tenant.tenant_id)
        await self._check_references(tenant.tenant_id, data["customer_id"], data)
        appointment_id = new_id()
        fields = {name: value for name, value in data.items() if value is not None}
        self.db.add(
            Appointment(
                id=appointment_id,
                tenant_id=tenant.tenant_id,
                created_by_id=await resolve_author(self.db, tenant.tenant_id, tenant.user_id),
                **fields,
            )
        )
        await self.db.commit()
        logger.info("Created appointment %s for tenant %s", appointment_id, tenant.tenant_id)
        return await self.get(tenant, appointment_id)

    async def get(self, tenant: TenantContext, appointment_id: str) -> Appointment:
        return await require_scoped(self.db, Appointment, appointment_id, tenant.tenant_id, "Appointment")

    async def list_appointments(
        self,
        tenant: TenantContext,
        limit: int,
        offset: int,
        status: str | None = None,
        customer_id: str | None = None,
        assigned_to_id: str | None = None,
        start_from: datetime | None = None,
        start_to: datetime | None = None,
    ) -> tuple[list[Appointment], int]:
        """Appointments ordered by scheduled start, optionally filtered."""
        stmt = select(Appointment).where(Appointment.tenant_id == tenant.tenant_id)
        if status:
            stmt = stmt.where(Appointment.status == status)
        if customer_id:
            stmt = stmt.where(Appointment.customer_id == customer_id)
        if assigned_to_id:
            stmt = stmt.where(Appointment.assigned_to_id == assigned_to_id)
        if start_from is not None:
            stmt = stmt.where(Appointment.scheduled_start >= as_utc(start_from))
        if start_to is not None:
            stmt = stmt.where(Appointment.scheduled_start <= as_utc(start_to))
        stmt = stmt.order_by(Appointment.scheduled_start, Appointment.id)
        return await fetch_page(self.db, stmt, limit, offset)

    async def update(self, tenant: TenantContext, appointment_id: str, patch: dict[str, Any]) -> Appointment:
        """Partial update; fields absent from the patch keep their stored values."""
        appointment = await self.get(tenant, appointment_id)
        customer_id = patch.get("customer_id") or appointment.customer_id
        references = dict(patch)
        if "customer_id" in patch and "address_id" not in patch:
            # A kept address must belong to the new customer
            references["address_id"] = appointment.address_id
        if "customer_id" in patch or patch.get("address_id") or patch.get("assigned_to_id"):
            await self._check_references(tenant.tenant_id, customer_id, references)
        ensure_window(
            patch.get("scheduled_start", appointment.scheduled_start),
            patch.get("scheduled_end", appointment.scheduled_end),
        )
        for name, value in patch.items():
            setattr(appointment, name, value)
        await self.db.commit()
        logger.info("Updated appointment %s for tenant %s: %s", appointment_id, tenant.tenant_id, sorted(patch))
        return await self.get(tenant, appointment_id)

    async def delete(self, tenant: TenantContext, appointment_id: str) -> None:
        appointment = await self.get(tenant, appointment_id)
        await self.db.delete(appointment)
        await self.db.commit()
        logger.info("Deleted appointment %s for tenant %s", appointment_id, tenant.tenant_id)

"""Service request service - intake requests awaiting triage, estimate or dispatch."""

import logging
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext
from fieldsmart.errors import ForbiddenError
from fieldsmart.models import Estimate, ServiceRequest
from fieldsmart.models.enums import RequestSource
from fieldsmart.models.mixins import new_id, utcnow
from fieldsmart.storage.repositories import (
    LIKE_ESCAPE,
    contains_pattern,
    fetch_page,
    require_active_tenant,
    require_address,
    require_customer,
    require_scoped,
    require_user,
    resolve_author,
)
from fieldsmart.storage.sequences import insert_numbered

logger = logging.getLogger(__name__)


class ServiceRequestService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _check_references(self, tenant_id: str, customer_id: str, data: dict[str, Any]) -> None:
        await require_customer(self.db, tenant_id, customer_id)
        if data.get("service_address_id"):
            await require_address(self.db, tenant_id, data["service_address_id"], customer_id)
        if data.get("assigned_to_id"):
            await require_user(self.db, tenant_id, data["assigned_to_id"])
        if data.get("estimate_id"):
            await require_scoped(self.db, Estimate, data["estimate_id"], tenant_id, "Estimate")

    async def create(self, tenant: TenantContext, data: dict[str, Any]) -> ServiceRequest:
        """Create a request numbered SR-NNNNNN."""
        tenant_id = tenant.tenant_id
        await require_active_tenant(self.db, tenant_id)
        await self._check_references(tenant_id, data["customer_id"], data)
        author_id = await resolve_author(self.db, tenant_id, tenant.user_id)
        fields = {name: value for name, value in data.items() if value is not None}
        if fields.get("assigned_to_id"):
            fields["assigned_at"] = utcnow()
        request_id = new_id()

        async def build(number: str) -> ServiceRequest:
            record = ServiceRequest(
                id=request_id,
                tenant_id=tenant_id,
                request_number=number,
                created_by_id=author_id,
                **fields,
            )
            self.db.add(record)
            return record

        record = await insert_numbered(self.db, tenant_id, "service_request", build)
        logger.info("Created service request %s (%s) for tenant %s", request_id, record.request_number, tenant_id)
        return await self.get(tenant, request_id)

    async def get(self, tenant: TenantContext, request_id: str) -> ServiceRequest:
        return await require_scoped(self.db, ServiceRequest, request_id, tenant.tenant_id, "Service request")

    async def list_service_requests(
        self,
        tenant: TenantContext,
        limit: int,
        offset: int,
        status: str | None = None,
        created_source: str | None = None,
        customer_id: str | None = None,
        q: str | None = None,
    ) -> tuple[list[ServiceRequest], int]:
        """Newest first."""
        stmt = select(ServiceRequest).where(ServiceRequest.tenant_id == tenant.tenant_id)
        if status:
            stmt = stmt.where(ServiceRequest.status == status)
        if created_source:
            stmt = stmt.where(ServiceRequest.created_source == created_source)
        if customer_id:
            stmt = stmt.where(ServiceRequest.customer_id == customer_id)
        if q and q.strip():
            pattern = contains_pattern(q)
            stmt = stmt.where(
                or_(
                    ServiceRequest.request_number.ilike(pattern, escape=LIKE_ESCAPE),
                    ServiceRequest.title.ilike(pattern, escape=LIKE_ESCAPE),
                    ServiceRequest.problem_type.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        stmt = stmt.order_by(ServiceRequest.created_at.desc(), ServiceRequest.request_number.desc())
        return await fetch_page(self.db, stmt, limit, offset)

    async def update(self, tenant: TenantContext, request_id: str, patch: dict[str, Any]) -> ServiceRequest:
        """
        Partial update.

        A status change stamps ``status_changed_at``; assigning a user stamps
        ``assigned_at``. Moving the request to another customer re-checks the
        kept service address against that customer.
        """
        record = await self.get(tenant, request_id)
        customer_id = patch.get("customer_id") or record.customer_id
        references = dict(patch)
        if "customer_id" in patch and "service_address_id" not in patch:
            references["service_address_id"] = record.service_address_id
        if any(patch.get(name) for name in ("customer_id", "service_address_id", "assigned_to_id", "estimate_id")):
            await self._check_references(tenant.tenant_id, customer_id, references)
        now = utcnow()
        if patch.get("status") and patch["status"] != record.status:
            record.status_changed_at = now
        if patch.get("assigned_to_id") and patch["assigned_to_id"] != record.assigned_to_id:
            record.assigned_at = now
        for name, value in patch.items():
            setattr(record, name, value)
        await self.db.commit()
        logger.info("Updated service request %s for tenant %s: %s", request_id, tenant.tenant_id, sorted(patch))
        return await self.get(tenant, request_id)

    async def delete(self, tenant: TenantContext, request_id: str) -> None:
        """Hard delete. Requests taken by the voice agent are kept as call records."""
        record = await self.get(tenant, request_id)
        if record.created_source == RequestSource.VOICE_AGENT.value:
            raise ForbiddenError("Voice Agent service requests cannot be deleted")
        await self.db.delete(record)
        await self.db.commit()
        logger.info("Deleted service request %s for tenant %s", request_id, tenant.tenant_id)

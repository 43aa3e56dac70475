"""Tenant-scoped lookup functions shared by the services."""

from typing import Any, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.errors import InactiveTenantError, NotFoundError
from fieldsmart.models import Address, Customer, Tenant, User
from fieldsmart.models.enums import TenantStatus

M = TypeVar("M")

INACTIVE_STATUSES = {TenantStatus.SUSPENDED.value, TenantStatus.CANCELLED.value}

LIKE_ESCAPE = "\\"


async def get_tenant(db: AsyncSession, tenant_id: str) -> Tenant | None:
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalar_one_or_none()


async def require_active_tenant(db: AsyncSession, tenant_id: str) -> Tenant:
    """Tenant must exist and be neither suspended nor cancelled."""
    tenant = await get_tenant(db, tenant_id)
    if tenant is None or tenant.status in INACTIVE_STATUSES:
        raise InactiveTenantError()
    return tenant


async def get_scoped(db: AsyncSession, model: type[M], record_id: str, tenant_id: str) -> M | None:
    """Get a row by ID (tenant-scoped). Reloads relationships already in the identity map."""
    result = await db.execute(
        select(model)
        .where(model.id == record_id, model.tenant_id == tenant_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def require_scoped(db: AsyncSession, model: type[M], record_id: str, tenant_id: str, label: str) -> M:
    record = await get_scoped(db, model, record_id, tenant_id)
    if record is None:
        raise NotFoundError(f"{label} not found")
    return record


async def require_customer(
    db: AsyncSession, tenant_id: str, customer_id: str, include_archived: bool = False
) -> Customer:
    customer = await get_scoped(db, Customer, customer_id, tenant_id)
    if customer is None or (customer.is_archived and not include_archived):
        raise NotFoundError("Customer not found")
    return customer


async def require_address(
    db: AsyncSession, tenant_id: str, address_id: str, customer_id: str | None = None
) -> Address:
    address = await get_scoped(db, Address, address_id, tenant_id)
    if address is None or (customer_id is not None and address.customer_id != customer_id):
        raise NotFoundError("Address not found")
    return address


async def require_user(db: AsyncSession, tenant_id: str, user_id: str) -> User:
    user = await get_scoped(db, User, user_id, tenant_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def resolve_author(db: AsyncSession, tenant_id: str, user_id: str | None) -> str | None:
    """User id to record as author, or None when the header names no active user of the tenant."""
    if not user_id:
        return None
    user = await get_scoped(db, User, user_id, tenant_id)
    if user is None or not user.is_active:
        return None
    return user.id


async def count_rows(db: AsyncSession, stmt: Select[Any]) -> int:
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    return total or 0


async def fetch_page(db: AsyncSession, stmt: Select[Any], limit: int, offset: int) -> tuple[list[Any], int]:
    """One page of results plus the unpaginated total."""
    total = await count_rows(db, stmt)
    result = await db.execute(stmt.limit(limit).offset(offset))
    return list(result.scalars().all()), total


def contains_pattern(q: str) -> str:
    """LIKE pattern matching ``q`` literally anywhere; pair with ``escape=LIKE_ESCAPE``."""
    escaped = q.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

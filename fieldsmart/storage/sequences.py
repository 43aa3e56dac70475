"""Per-tenant business numbers (CUST-000001, JOB-000001, INV-000001, ...)."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.errors import ConflictError
from fieldsmart.models import Customer, Estimate, Invoice, Job, SequenceCounter, ServiceRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")

# kind -> (prefix, number column of the numbered table)
SEQUENCES = {
    "customer": ("CUST", Customer.customer_number),
    "job": ("JOB", Job.job_number),
    "invoice": ("INV", Invoice.invoice_number),
    "service_request": ("SR", ServiceRequest.request_number),
    "estimate": ("EST", Estimate.estimate_number),
}

MAX_ATTEMPTS = 2


def format_business_number(prefix: str, value: int) -> str:
    return f"{prefix}-{value:06d}"


def parse_business_number(prefix: str, number: str | None) -> int:
    """"INV-000042" -> 42; anything not in the prefix's format -> 0."""
    if not number or not number.startswith(f"{prefix}-"):
        return 0
    digits = number[len(prefix) + 1:]
    return int(digits) if digits.isdigit() else 0


async def _highest_issued(db: AsyncSession, tenant_id: str, kind: str) -> int:
    prefix, column = SEQUENCES[kind]
    model = column.class_
    # Zero-padded numbers sort lexically
    highest = await db.scalar(
        select(func.max(column)).where(model.tenant_id == tenant_id, column.like(f"{prefix}-%"))
    )
    return parse_business_number(prefix, highest)


async def next_business_number(db: AsyncSession, tenant_id: str, kind: str, resync: bool = False) -> str:
    """
    Reserve the next number for (tenant, kind).

    The counter row is locked for the rest of the transaction. On first use it
    is seeded from the number of existing records so tenants with data created
    before the counter existed keep counting upward. ``resync`` moves the
    counter past the highest number already stored.
    """
    prefix, column = SEQUENCES[kind]
    model = column.class_
    result = await db.execute(
        select(SequenceCounter)
        .where(SequenceCounter.tenant_id == tenant_id, SequenceCounter.kind == kind)
        .with_for_update()
    )
    counter = result.scalar_one_or_none()
    if counter is None:
        existing = await db.scalar(select(func.count()).select_from(model).where(model.tenant_id == tenant_id))
        counter = SequenceCounter(tenant_id=tenant_id, kind=kind, last_value=existing or 0)
        db.add(counter)
    if resync:
        counter.last_value = max(counter.last_value, await _highest_issued(db, tenant_id, kind))
    counter.last_value += 1
    await db.flush()
    return format_business_number(prefix, counter.last_value)


async def insert_numbered(
    db: AsyncSession,
    tenant_id: str,
    kind: str,
    build: Callable[[str], Awaitable[T]],
) -> T:
    """
    Reserve a number, let ``build`` add the record(s) and commit as one unit.

    A uniqueness failure is retried once with a number derived past the highest
    stored one; a second failure raises ConflictError. ``build`` must not rely
    on objects loaded before the call since a rollback expires them.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            number = await next_business_number(db, tenant_id, kind, resync=attempt > 1)
            record = await build(number)
            await db.commit()
            return record
        except IntegrityError:
            await db.rollback()
            if attempt >= MAX_ATTEMPTS:
                logger.warning("Business number collision persisted for %s (tenant %s)", kind, tenant_id)
                raise ConflictError(f"Could not allocate a unique {kind.replace('_', ' ')} number, please retry") from None
            logger.warning("Business number collision for %s (tenant %s), retrying", kind, tenant_id)

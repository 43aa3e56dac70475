"""Customer service - customers and their addresses."""

import logging
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext
from fieldsmart.errors import NotFoundError
from fieldsmart.models import Address, Customer
from fieldsmart.models.enums import AddressType
from fieldsmart.models.mixins import new_id, utcnow
from fieldsmart.storage.repositories import (
    LIKE_ESCAPE,
    contains_pattern,
    fetch_page,
    require_active_tenant,
    require_address,
    require_customer,
)
from fieldsmart.storage.sequences import insert_numbered

logger = logging.getLogger(__name__)

# Inline address fields accepted on customer create
INLINE_ADDRESS_FIELDS = ("street", "street_line2", "city", "state", "zip", "country")

SEARCH_COLUMNS = (
    Customer.first_name,
    Customer.last_name,
    Customer.company_name,
    Customer.email,
    Customer.mobile_phone,
    Customer.home_phone,
    Customer.work_phone,
    Customer.customer_number,
)


def split_display_name(display_name: str) -> tuple[str, str | None]:
    """"Mary Ann Smith" -> ("Mary", "Ann Smith")."""
    first, _, rest = display_name.strip().partition(" ")
    return first, rest.strip() or None


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, tenant: TenantContext, data: dict[str, Any]) -> Customer:
        """Create a customer, plus a primary service address when a street is given."""
        await require_active_tenant(self.db, tenant.tenant_id)
        tenant_id = tenant.tenant_id
        address_data = {name: data.pop(name) for name in INLINE_ADDRESS_FIELDS if name in data}
        fields = {name: value for name, value in data.items() if value is not None}
        customer_id = new_id()

        async def build(number: str) -> Customer:
            customer = Customer(id=customer_id, tenant_id=tenant_id, customer_number=number, **fields)
            self.db.add(customer)
            if address_data.get("street"):
                self.db.add(
                    Address(
                        tenant_id=tenant_id,
                        customer=customer,
                        type=AddressType.SERVICE.value,
                        street=address_data["street"],
                        street_line2=address_data.get("street_line2"),
                        city=address_data.get("city") or "",
                        state=address_data.get("state") or "",
                        zip=address_data.get("zip") or "",
                        country=address_data.get("country") or "US",
                        is_primary=True,
                    )
                )
            return customer

        customer = await insert_numbered(self.db, tenant_id, "customer", build)
        logger.info("Created customer %s (%s) for tenant %s", customer_id, customer.customer_number, tenant_id)
        return await self.get(tenant, customer_id)

    async def get(self, tenant: TenantContext, customer_id: str) -> Customer:
        return await require_customer(self.db, tenant.tenant_id, customer_id)

    async def get_by_number(self, tenant: TenantContext, customer_number: str) -> Customer:
        result = await self.db.execute(
            select(Customer).where(
                Customer.tenant_id == tenant.tenant_id,
                Customer.customer_number == customer_number.strip().upper(),
                Customer.is_archived.is_(False),
            )
        )
        customer = result.scalar_one_or_none()
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    async def list_customers(
        self,
        tenant: TenantContext,
        limit: int,
        offset: int,
        include_archived: bool = False,
    ) -> tuple[list[Customer], int]:
        stmt = select(Customer).where(Customer.tenant_id == tenant.tenant_id)
        if not include_archived:
            stmt = stmt.where(Customer.is_archived.is_(False))
        stmt = stmt.order_by(Customer.created_at.desc(), Customer.customer_number.desc())
        return await fetch_page(self.db, stmt, limit, offset)

    async def search_customers(
        self,
        tenant: TenantContext,
        q: str | None,
        customer_type: str | None,
        limit: int,
        offset: int,
    ) -> tuple[list[Customer], int]:
        """Case-insensitive substring match over names, email, phones and number."""
        stmt = select(Customer).where(
            Customer.tenant_id == tenant.tenant_id,
            Customer.is_archived.is_(False),
        )
        if q and q.strip():
            pattern = contains_pattern(q)
            stmt = stmt.where(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in SEARCH_COLUMNS)))
        if customer_type:
            stmt = stmt.where(Customer.type == customer_type)
        stmt = stmt.order_by(Customer.last_name, Customer.first_name, Customer.customer_number)
        return await fetch_page(self.db, stmt, limit, offset)

    async def update(self, tenant: TenantContext, customer_id: str, patch: dict[str, Any]) -> Customer:
        """Apply a partial update. Only keys present in the patch are touched."""
        customer = await require_customer(self.db, tenant.tenant_id, customer_id)
        patch = dict(patch)
        display_name = patch.pop("display_name", None)
        if display_name and "first_name" not in patch and "last_name" not in patch:
            patch["first_name"], patch["last_name"] = split_display_name(display_name)
        for name, value in patch.items():
            setattr(customer, name, value)
        await self.db.commit()
        logger.info("Updated customer %s for tenant %s: %s", customer_id, tenant.tenant_id, sorted(patch))
        return await self.get(tenant, customer_id)

    async def delete(self, tenant: TenantContext, customer_id: str) -> None:
        """Archive the customer. Archived customers disappear from get, list and search."""
        customer = await require_customer(self.db, tenant.tenant_id, customer_id)
        customer.is_archived = True
        customer.archived_at = utcnow()
        await self.db.commit()
        logger.info("Archived customer %s for tenant %s", customer_id, tenant.tenant_id)

    async def _unset_other_primaries(self, tenant_id: str, customer_id: str, keep_id: str) -> None:
        await self.db.execute(
            update(Address)
            .where(
                Address.tenant_id == tenant_id,
                Address.customer_id == customer_id,
                Address.id != keep_id,
            )
            .values(is_primary=False)
        )

    async def add_address(self, tenant: TenantContext, customer_id: str, data: dict[str, Any]) -> Address:
        """Add an address. It becomes primary if asked to or if the customer has none."""
        customer = await require_customer(self.db, tenant.tenant_id, customer_id)
        has_primary = any(address.is_primary for address in customer.addresses)
        make_primary = bool(data.pop("is_primary", False)) or not has_primary
        address_id = new_id()
        if make_primary:
            await self._unset_other_primaries(tenant.tenant_id, customer_id, address_id)
        fields = {name: value for name, value in data.items() if value is not None}
        self.db.add(
            Address(
                id=address_id,
                tenant_id=tenant.tenant_id,
                customer_id=customer_id,
                is_primary=make_primary,
                **fields,
            )
        )
        await self.db.commit()
        logger.info("Added address %s to customer %s (tenant %s)", address_id, customer_id, tenant.tenant_id)
        return await require_address(self.db, tenant.tenant_id, address_id, customer_id)

    async def update_address(
        self, tenant: TenantContext, customer_id: str, address_id: str, patch: dict[str, Any]
    ) -> Address:
        await require_customer(self.db, tenant.tenant_id, customer_id)
        address = await require_address(self.db, tenant.tenant_id, address_id, customer_id)
        if patch.get("is_primary"):
            await self._unset_other_primaries(tenant.tenant_id, customer_id, address_id)
        for name, value in patch.items():
            setattr(address, name, value)
        await self.db.commit()
        logger.info("Updated address %s of customer %s (tenant %s)", address_id, customer_id, tenant.tenant_id)
        return await require_address(self.db, tenant.tenant_id, address_id, customer_id)

    async def delete_address(self, tenant: TenantContext, customer_id: str, address_id: str) -> None:
        """Delete an address; the oldest remaining one is promoted if the primary goes."""
        await require_customer(self.db, tenant.tenant_id, customer_id)
        address = await require_address(self.db, tenant.tenant_id, address_id, customer_id)
        was_primary = address.is_primary
        await self.db.delete(address)
        await self.db.flush()
        if was_primary:
            result = await self.db.execute(
                select(Address)
                .where(Address.tenant_id == tenant.tenant_id, Address.customer_id == customer_id)
                .order_by(Address.created_at)
                .limit(1)
            )
            successor = result.scalar_one_or_none()
            if successor is not None:
                successor.is_primary = True
        await self.db.commit()
        logger.info("Deleted address %s of customer %s (tenant %s)", address_id, customer_id, tenant.tenant_id)

"""Demo data for a tenant: users and a handful of customers."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import TenantContext, hash_secret
from fieldsmart.errors import ValidationError
from fieldsmart.models import Customer, Tenant, User
from fieldsmart.models.enums import TenantStatus, UserRole
from fieldsmart.services.customers import CustomerService
from fieldsmart.services.tenants import slugify
from fieldsmart.storage.repositories import get_tenant

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "changeme123"

DEMO_USERS = [
    {"email": "admin@{slug}.example.com", "first_name": "Admin", "last_name": "User", "role": UserRole.ADMIN},
    {"email": "tech1@{slug}.example.com", "first_name": "John", "last_name": "Tech", "role": UserRole.TECHNICIAN},
    {"email": "tech2@{slug}.example.com", "first_name": "Jane", "last_name": "Tech", "role": UserRole.TECHNICIAN},
]

DEMO_CUSTOMERS = [
    {
        "type": "RESIDENTIAL",
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah.johnson@example.com",
        "mobile_phone": "555-0101",
        "street": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
    },
    {
        "type": "RESIDENTIAL",
        "first_name": "Michael",
        "last_name": "Brown",
        "email": "michael.brown@example.com",
        "mobile_phone": "555-0102",
        "street": "456 Oak Ave",
        "city": "Springfield",
        "state": "IL",
        "zip": "62702",
    },
    {
        "type": "COMMERCIAL",
        "company_name": "Riverside Property Management",
        "first_name": "Linda",
        "last_name": "Garcia",
        "email": "linda@riverside.example.com",
        "work_phone": "555-0103",
        "street": "789 River Rd",
        "city": "Springfield",
        "state": "IL",
        "zip": "62703",
    },
]

MAX_TENANT_ID_LENGTH = 36


class SeedService:
    def __init__(self, db: AsyncSession, password_salt: str):
        self.db = db
        self.password_salt = password_salt

    async def _ensure_tenant(self, tenant_id: str) -> Tenant:
        tenant = await get_tenant(self.db, tenant_id)
        if tenant is not None:
            return tenant
        if len(tenant_id) > MAX_TENANT_ID_LENGTH:
            raise ValidationError(f"Tenant ID must be at most {MAX_TENANT_ID_LENGTH} characters")
        tenant = Tenant(
            id=tenant_id,
            name=f"Demo Company {tenant_id}",
            slug=f"demo-{slugify(tenant_id) or 'tenant'}",
            status=TenantStatus.ACTIVE.value,
        )
        self.db.add(tenant)
        await self.db.commit()
        logger.info("Created demo tenant %s", tenant_id)
        return tenant

    async def _seed_users(self, tenant: Tenant) -> int:
        result = await self.db.execute(select(User.email).where(User.tenant_id == tenant.id))
        existing = set(result.scalars().all())
        created = 0
        for demo_user in DEMO_USERS:
            email = demo_user["email"].format(slug=tenant.slug)
            if email in existing:
                continue
            self.db.add(
                User(
                    tenant_id=tenant.id,
                    email=email,
                    password_hash=hash_secret(DEMO_PASSWORD, self.password_salt),
                    first_name=demo_user["first_name"],
                    last_name=demo_user["last_name"],
                    role=demo_user["role"].value,
                )
            )
            created += 1
        await self.db.commit()
        return created

    async def _seed_customers(self, tenant_id: str) -> int:
        count = await self.db.scalar(
            select(func.count()).select_from(Customer).where(Customer.tenant_id == tenant_id)
        )
        if count:
            return 0
        customers = CustomerService(self.db)
        context = TenantContext(tenant_id=tenant_id)
        for demo_customer in DEMO_CUSTOMERS:
            await customers.create(context, dict(demo_customer))
        return len(DEMO_CUSTOMERS)

    async def seed(self, tenant_id: str) -> tuple[Tenant, int, int]:
        """
        Seed the tenant, creating it first if needed.

        Each collection is skipped when it already has data, so re-running
        only fills in what is missing.
        """
        tenant = await self._ensure_tenant(tenant_id)
        users_created = await self._seed_users(tenant)
        customers_created = await self._seed_customers(tenant_id)
        tenant = await get_tenant(self.db, tenant_id)
        logger.info(
            "Seeded tenant %s: %d users, %d customers", tenant_id, users_created, customers_created
        )
        return tenant, users_created, customers_created

"""Tenant service - self-service registration and tenant lookup."""

import logging
import re
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import hash_secret
from fieldsmart.errors import ConflictError, InactiveTenantError, ValidationError
from fieldsmart.models import Tenant, User
from fieldsmart.models.enums import TenantStatus, UserRole
from fieldsmart.models.mixins import new_id
from fieldsmart.storage.repositories import get_tenant

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """"Acme Plumbing, LLC" -> "acme-plumbing-llc"."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


class TenantService:
    def __init__(self, db: AsyncSession, password_salt: str):
        self.db = db
        self.password_salt = password_salt

    async def register(self, data: dict[str, Any]) -> tuple[Tenant, User]:
        """Create a TRIAL tenant and its OWNER user in one transaction."""
        company = data["company"]
        admin = data["admin"]
        slug = slugify(company["name"])
        if not slug:
            raise ValidationError("Company name must contain letters or digits")
        existing = await self.db.execute(select(Tenant.id).where(Tenant.slug == slug))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("A company with this name is already registered")

        tenant = Tenant(
            id=new_id(),
            name=company["name"],
            slug=slug,
            status=TenantStatus.TRIAL.value,
            settings={key: company[key] for key in ("domain", "email", "phone") if company.get(key)},
        )
        user = User(
            id=new_id(),
            tenant_id=tenant.id,
            email=admin["email"].lower(),
            password_hash=hash_secret(admin["password"], self.password_salt),
            first_name=admin.get("first_name") or "",
            last_name=admin.get("last_name") or "",
            role=UserRole.OWNER.value,
        )
        self.db.add(tenant)
        await self.db.flush()
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("A company with this name is already registered") from None
        logger.info("Registered tenant %s (%s) with owner %s", tenant.id, slug, user.id)
        return tenant, user

    async def current(self, tenant_id: str) -> Tenant:
        tenant = await get_tenant(self.db, tenant_id)
        if tenant is None:
            raise InactiveTenantError("Tenant not found")
        return tenant

"""Admin endpoints - schema creation and demo data."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.auth.middleware import SettingsDep, TenantDep
from fieldsmart.database import Database, get_db
from fieldsmart.schemas.tenant import MigrateResponse, SeedResponse, TenantResponse
from fieldsmart.services.seed import SeedService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/migrate", response_model=MigrateResponse)
async def migrate(tenant: TenantDep, request: Request):
    """Create any missing tables."""
    database: Database = request.app.state.db
    tables = await database.create_schema()
    logger.info("Schema migration requested by tenant %s", tenant.tenant_id)
    return MigrateResponse(status="ok", tables=tables)


@router.post("/seed", response_model=SeedResponse)
async def seed(
    tenant: TenantDep,
    settings: SettingsDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Seed the header's tenant with demo users and customers, skipping what exists."""
    record, users_created, customers_created = await SeedService(db, settings.password_hash_salt).seed(
        tenant.tenant_id
    )
    return SeedResponse(
        tenant=TenantResponse.model_validate(record),
        users_created=users_created,
        customers_created=customers_created,
    )

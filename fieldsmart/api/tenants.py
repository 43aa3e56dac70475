"""Tenant endpoints - registration and current tenant."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fieldsmart.api.responses import JsonBody
from fieldsmart.auth.middleware import SettingsDep, TenantDep
from fieldsmart.database import get_db
from fieldsmart.schemas.tenant import RegisterRequest, RegisterResponse, TenantResponse, UserResponse
from fieldsmart.services.tenants import TenantService
from fieldsmart.validation.payload import validate_patch

router = APIRouter()


@router.post("/tenants/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_tenant(
    body: JsonBody,
    settings: SettingsDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Register a company and its owner account. No tenant header required."""
    data = validate_patch(body, RegisterRequest)
    tenant, user = await TenantService(db, settings.password_hash_salt).register(data)
    return RegisterResponse(
        message="Registration successful",
        tenant=TenantResponse.model_validate(tenant),
        user=UserResponse.model_validate(user),
    )


@router.get("/tenants/current", response_model=TenantResponse)
async def get_current_tenant(
    tenant: TenantDep,
    settings: SettingsDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Tenant named by the tenant header."""
    return await TenantService(db, settings.password_hash_salt).current(tenant.tenant_id)

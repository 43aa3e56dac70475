"""Tenant and user resolution from request headers."""

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from fieldsmart.config import Settings
from fieldsmart.errors import MissingTenantError, MissingUserError
from fieldsmart.utils.request_context import bind_tenant


@dataclass(frozen=True)
class TenantContext:
    """Identity resolved for one request."""

    tenant_id: str
    user_id: str | None = None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        # Plain dicts are case-sensitive; Starlette headers are not
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    if value is None:
        return None
    # Proxies occasionally fold a repeated header into "a, b"
    value = str(value).split(",")[0].strip()
    return value or None


def resolve_tenant_id(headers: Mapping[str, str], header_name: str = "X-Tenant-Id") -> str:
    """Extract the tenant identifier or fail with MissingTenantError."""
    tenant_id = _header(headers, header_name)
    if not tenant_id:
        raise MissingTenantError()
    return tenant_id


def resolve_user_id(headers: Mapping[str, str], header_name: str = "X-User-Id") -> str | None:
    return _header(headers, header_name)


def hash_secret(secret: str, salt: str) -> str:
    """Hash a password or key with salt for storage/lookup."""
    return hashlib.sha256(f"{salt}:{secret}".encode()).hexdigest()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_tenant_context(request: Request) -> TenantContext:
    """Resolve tenant (required) and user (optional) from headers."""
    settings = get_settings(request)
    tenant_id = resolve_tenant_id(request.headers, settings.tenant_header)
    bind_tenant(tenant_id)
    return TenantContext(
        tenant_id=tenant_id,
        user_id=resolve_user_id(request.headers, settings.user_header),
    )


async def get_user_context(
    tenant: Annotated[TenantContext, Depends(get_tenant_context)],
) -> TenantContext:
    """Tenant context that also requires a user header."""
    if not tenant.user_id:
        raise MissingUserError()
    return tenant


# Type aliases for dependency injection
TenantDep = Annotated[TenantContext, Depends(get_tenant_context)]
UserDep = Annotated[TenantContext, Depends(get_user_context)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

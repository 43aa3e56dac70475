"""Tenant registration and admin schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from fieldsmart.schemas.common import ResponseModel
from fieldsmart.validation.payload import NonBlankStr, OptionalStr, Payload


class CompanyInput(Payload):
    name: NonBlankStr
    domain: OptionalStr = ""
    email: OptionalStr = ""
    phone: OptionalStr = ""


class AdminInput(Payload):
    email: EmailStr
    password: NonBlankStr = Field(min_length=8)
    first_name: OptionalStr = ""
    last_name: OptionalStr = ""


class RegisterRequest(Payload):
    """POST /v1/tenants/register request."""

    company: CompanyInput
    admin: AdminInput


class TenantResponse(ResponseModel):
    id: str
    name: str
    slug: str
    status: str
    timezone: str
    locale: str
    currency: str
    created_at: datetime


class UserResponse(ResponseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str


class RegisterResponse(ResponseModel):
    message: str
    tenant: TenantResponse
    user: UserResponse


class MigrateResponse(ResponseModel):
    status: str
    tables: list[str]


class SeedResponse(ResponseModel):
    tenant: TenantResponse
    users_created: int
    customers_created: int

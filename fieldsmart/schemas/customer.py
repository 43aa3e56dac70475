"""Customer and address schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AliasChoices, BeforeValidator, EmailStr, Field, computed_field

from fieldsmart.models.enums import AddressType, CustomerType, VerificationStatus
from fieldsmart.schemas.common import ResponseModel
from fieldsmart.validation.payload import NonBlankStr, OptionalStr, Payload, PatchPayload, Upper

_TYPE_ALIASES = {"HOMEOWNER": "RESIDENTIAL", "BUSINESS": "COMMERCIAL"}


def normalize_customer_type(value):
    if isinstance(value, str):
        value = value.strip().upper()
        return _TYPE_ALIASES.get(value, value)
    return value


CustomerTypeField = Annotated[CustomerType, BeforeValidator(normalize_customer_type)]


class CustomerCreate(Payload):
    """POST /v1/customers request. Inline address fields create a primary address."""

    omit_blank = frozenset({"email"})

    type: CustomerTypeField = CustomerType.RESIDENTIAL
    first_name: OptionalStr | None = None
    last_name: OptionalStr | None = None
    company_name: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("companyName", "company_name", "company")
    )
    email: EmailStr | None = None
    mobile_phone: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("mobilePhone", "mobile_phone", "mobileNumber", "mobile_number", "phone")
    )
    home_phone: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("homePhone", "home_phone", "homeNumber", "home_number")
    )
    work_phone: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("workPhone", "work_phone", "workNumber", "work_number")
    )
    notifications_enabled: bool | None = None
    notes: OptionalStr | None = None
    street: OptionalStr | None = Field(None, validation_alias=AliasChoices("street", "address"))
    street_line2: OptionalStr | None = None
    city: OptionalStr | None = None
    state: OptionalStr | None = None
    zip: OptionalStr | None = Field(None, validation_alias=AliasChoices("zip", "zipCode", "zip_code"))
    country: OptionalStr | None = None


class CustomerUpdate(PatchPayload):
    """PUT /v1/customers/{id} request - partial."""

    omit_blank = frozenset({"email"})
    clearable = frozenset(
        {
            "first_name",
            "last_name",
            "company_name",
            "email",
            "mobile_phone",
            "home_phone",
            "work_phone",
            "notes",
            "do_not_service_reason",
        }
    )

    type: CustomerTypeField | None = None
    first_name: OptionalStr | None = None
    last_name: OptionalStr | None = None
    display_name: OptionalStr | None = None
    company_name: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("companyName", "company_name", "company")
    )
    email: EmailStr | None = None
    mobile_phone: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("mobilePhone", "mobile_phone", "mobileNumber", "mobile_number", "phone")
    )
    home_phone: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("homePhone", "home_phone", "homeNumber", "home_number")
    )
    work_phone: OptionalStr | None = Field(
        None, validation_alias=AliasChoices("workPhone", "work_phone", "workNumber", "work_number")
    )
    notes: OptionalStr | None = None
    do_not_service: bool | None = None
    do_not_service_reason: OptionalStr | None = None
    notifications_enabled: bool | None = None
    verification_status: Annotated[VerificationStatus, Upper] | None = None


class AddressCreate(Payload):
    """POST /v1/customers/{id}/addresses request."""

    type: Annotated[AddressType, Upper] = AddressType.SERVICE
    name: OptionalStr | None = None
    street: NonBlankStr
    street_line2: OptionalStr | None = None
    city: NonBlankStr
    state: NonBlankStr
    zip: NonBlankStr = Field(validation_alias=AliasChoices("zip", "zipCode", "zip_code"))
    country: OptionalStr = "US"
    access_notes: OptionalStr | None = None
    gate_code: OptionalStr | None = None
    is_primary: bool = False


class AddressUpdate(PatchPayload):
    """PUT /v1/customers/{id}/addresses/{address_id} request - partial."""

    clearable = frozenset({"name", "street_line2", "access_notes", "gate_code"})

    type: Annotated[AddressType, Upper] | None = None
    name: OptionalStr | None = None
    street: NonBlankStr | None = None
    street_line2: OptionalStr | None = None
    city: NonBlankStr | None = None
    state: NonBlankStr | None = None
    zip: NonBlankStr | None = Field(None, validation_alias=AliasChoices("zip", "zipCode", "zip_code"))
    country: OptionalStr | None = None
    access_notes: OptionalStr | None = None
    gate_code: OptionalStr | None = None
    is_primary: bool | None = None


class AddressResponse(ResponseModel):
    id: str
    customer_id: str
    type: str
    name: str | None
    street: str
    street_line2: str | None
    city: str
    state: str
    zip: str
    country: str
    access_notes: str | None
    gate_code: str | None
    is_primary: bool
    created_at: datetime
    updated_at: datetime


class CustomerResponse(ResponseModel):
    id: str
    tenant_id: str
    customer_number: str
    type: str
    first_name: str | None
    last_name: str | None
    company_name: str | None
    email: str | None
    mobile_phone: str | None
    home_phone: str | None
    work_phone: str | None
    notes: str | None
    do_not_service: bool
    do_not_service_reason: str | None
    notifications_enabled: bool
    verification_status: str
    created_source: str
    is_archived: bool
    archived_at: datetime | None
    addresses: list[AddressResponse] = []
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="displayName")
    @property
    def display_name(self) -> str:
        if self.company_name:
            return self.company_name
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

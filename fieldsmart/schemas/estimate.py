"""Estimate schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator

from fieldsmart.models.enums import EstimateStatus, LineItemType
from fieldsmart.schemas.common import AddressSummary, CustomerSummary, ResponseModel
from fieldsmart.schemas.invoice import LineItemInput
from fieldsmart.validation.payload import (
    Money,
    NonBlankStr,
    OptionalStr,
    Payload,
    PatchPayload,
    Percentage,
    Timestamp,
    Upper,
)


class EstimateLineItemInput(LineItemInput):
    type: Annotated[LineItemType, Upper] = LineItemType.SERVICE
    unit_cost: Money = Decimal("0")
    is_optional: bool = False


def _require_lines(value: list[EstimateLineItemInput]) -> list[EstimateLineItemInput]:
    if not value:
        raise ValueError("At least one line item is required")
    return value


LineItems = Annotated[list[EstimateLineItemInput], AfterValidator(_require_lines)]


class EstimateCreate(Payload):
    """POST /v1/estimates request. Needs at least one line item."""

    customer_id: NonBlankStr
    address_id: NonBlankStr
    line_items: LineItems
    title: OptionalStr | None = None
    message: OptionalStr | None = None
    terms_and_conditions: OptionalStr | None = None
    expiration_date: Timestamp | None = None
    valid_until: Timestamp | None = None
    customer_can_approve: bool = True
    multiple_options_allowed: bool = False
    status: Annotated[EstimateStatus, Upper] = EstimateStatus.DRAFT
    tax_rate: Percentage = Decimal("0")


class EstimateUpdate(PatchPayload):
    """PUT /v1/estimates/{id} request - partial. ``lineItems`` replaces every line."""

    clearable = frozenset({"title", "message", "terms_and_conditions", "expiration_date", "valid_until"})

    title: OptionalStr | None = None
    message: OptionalStr | None = None
    terms_and_conditions: OptionalStr | None = None
    expiration_date: Timestamp | None = None
    valid_until: Timestamp | None = None
    customer_can_approve: bool | None = None
    multiple_options_allowed: bool | None = None
    status: Annotated[EstimateStatus, Upper] | None = None
    tax_rate: Percentage | None = None
    line_items: LineItems | None = None


class EstimateLineItemResponse(ResponseModel):
    id: str
    type: str
    name: str
    description: str | None
    quantity: Decimal
    unit_price: Decimal
    unit_cost: Decimal
    total: Decimal
    is_taxable: bool
    is_optional: bool
    sort_order: int


class EstimateResponse(ResponseModel):
    id: str
    tenant_id: str
    estimate_number: str
    customer_id: str
    address_id: str
    created_by_id: str | None
    status: str
    title: str | None
    message: str | None
    terms_and_conditions: str | None
    expiration_date: datetime | None
    valid_until: datetime | None
    customer_can_approve: bool
    multiple_options_allowed: bool
    subtotal: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    sent_at: datetime | None
    viewed_at: datetime | None
    approved_at: datetime | None
    declined_at: datetime | None
    expired_at: datetime | None
    customer: CustomerSummary
    address: AddressSummary
    line_items: list[EstimateLineItemResponse] = []
    created_at: datetime
    updated_at: datetime

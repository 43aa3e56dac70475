"""Invoice schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import Field

from fieldsmart.models.enums import InvoiceStatus, PaymentMethod, PaymentTerms
from fieldsmart.schemas.common import CustomerSummary, ResponseModel
from fieldsmart.validation.payload import (
    Money,
    NonBlankStr,
    OptionalStr,
    Payload,
    PatchPayload,
    Percentage,
    Quantity,
    Timestamp,
    Upper,
)


class LineItemInput(Payload):
    name: NonBlankStr
    description: OptionalStr | None = None
    quantity: Quantity = Decimal("1")
    unit_price: Money
    is_taxable: bool = True


class InvoiceCreate(Payload):
    """POST /v1/invoices request. Due date defaults from the payment terms."""

    omit_blank = frozenset({"job_id"})

    customer_id: NonBlankStr
    job_id: str | None = None
    due_date: Timestamp | None = None
    terms: Annotated[PaymentTerms, Upper] = PaymentTerms.DUE_ON_RECEIPT
    po_number: OptionalStr | None = None
    message: OptionalStr | None = None
    footer_notes: OptionalStr | None = None
    tax_rate: Percentage = Decimal("0")
    line_items: list[LineItemInput] = Field(default_factory=list)


class InvoiceUpdate(PatchPayload):
    """PUT /v1/invoices/{id} request - partial."""

    clearable = frozenset({"po_number", "message", "footer_notes", "void_reason"})

    status: Annotated[InvoiceStatus, Upper] | None = None
    due_date: Timestamp | None = None
    terms: Annotated[PaymentTerms, Upper] | None = None
    po_number: OptionalStr | None = None
    message: OptionalStr | None = None
    footer_notes: OptionalStr | None = None
    tax_rate: Percentage | None = None
    void_reason: OptionalStr | None = None


class PaymentCreate(Payload):
    """POST /v1/invoices/{id}/payments request."""

    amount: Annotated[Money, Field(gt=0)]
    method: Annotated[PaymentMethod, Upper]
    transaction_id: OptionalStr | None = None
    check_number: OptionalStr | None = None
    notes: OptionalStr | None = None


class LineItemResponse(ResponseModel):
    id: str
    name: str
    description: str | None
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    is_taxable: bool
    sort_order: int


class PaymentResponse(ResponseModel):
    id: str
    invoice_id: str
    amount: Decimal
    method: str
    status: str
    transaction_id: str | None
    check_number: str | None
    collected_by_id: str | None
    notes: str | None
    processed_at: datetime


class JobReference(ResponseModel):
    id: str
    job_number: str
    title: str


class InvoiceResponse(ResponseModel):
    id: str
    tenant_id: str
    invoice_number: str
    customer_id: str
    job_id: str | None
    created_by_id: str | None
    status: str
    issue_date: datetime
    due_date: datetime
    terms: str
    po_number: str | None
    message: str | None
    footer_notes: str | None
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    amount_paid: Decimal
    sent_at: datetime | None
    viewed_at: datetime | None
    paid_at: datetime | None
    voided_at: datetime | None
    void_reason: str | None
    customer: CustomerSummary
    job: JobReference | None = None
    line_items: list[LineItemResponse] = []
    payments: list[PaymentResponse] = []
    created_at: datetime
    updated_at: datetime

"""Job schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import Field, model_validator

from fieldsmart.models.enums import JobSource, JobStatus, Priority
from fieldsmart.schemas.common import AddressSummary, CustomerSummary, ResponseModel
from fieldsmart.validation.payload import (
    NonBlankStr,
    OptionalStr,
    Payload,
    PatchPayload,
    Timestamp,
    Upper,
    check_window,
)


class JobCreate(Payload):
    """POST /v1/jobs request."""

    customer_id: NonBlankStr
    address_id: NonBlankStr
    title: NonBlankStr
    description: OptionalStr | None = None
    internal_notes: OptionalStr | None = None
    priority: Annotated[Priority, Upper] = Priority.NORMAL
    source: Annotated[JobSource, Upper] = JobSource.MANUAL
    scheduled_start: Timestamp | None = None
    scheduled_end: Timestamp | None = None
    estimated_duration: int = Field(60, gt=0)

    @model_validator(mode="after")
    def _window(self):
        check_window(self.scheduled_start, self.scheduled_end)
        return self


class JobUpdate(PatchPayload):
    """PUT /v1/jobs/{id} request - partial."""

    clearable = frozenset({"description", "internal_notes", "cancellation_reason"})

    title: NonBlankStr | None = None
    description: OptionalStr | None = None
    internal_notes: OptionalStr | None = None
    status: Annotated[JobStatus, Upper] | None = None
    priority: Annotated[Priority, Upper] | None = None
    scheduled_start: Timestamp | None = None
    scheduled_end: Timestamp | None = None
    actual_start: Timestamp | None = None
    actual_end: Timestamp | None = None
    cancellation_reason: OptionalStr | None = None

    @model_validator(mode="after")
    def _window(self):
        check_window(self.scheduled_start, self.scheduled_end)
        return self


class JobStatusHistoryResponse(ResponseModel):
    id: str
    job_id: str
    from_status: str | None
    to_status: str
    changed_by_id: str | None
    notes: str | None
    created_at: datetime


class JobResponse(ResponseModel):
    id: str
    tenant_id: str
    job_number: str
    customer_id: str
    address_id: str
    created_by_id: str | None
    title: str
    description: str | None
    internal_notes: str | None
    status: str
    priority: str
    source: str
    scheduled_start: datetime | None
    scheduled_end: datetime | None
    actual_start: datetime | None
    actual_end: datetime | None
    estimated_duration: int
    dispatched_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    customer: CustomerSummary
    address: AddressSummary
    created_at: datetime
    updated_at: datetime

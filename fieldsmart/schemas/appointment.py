"""Appointment schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import Field, model_validator

from fieldsmart.models.enums import AppointmentStatus, Priority
from fieldsmart.schemas.common import CustomerSummary, ResponseModel, UserSummary
from fieldsmart.validation.payload import (
    NonBlankStr,
    OptionalStr,
    Payload,
    PatchPayload,
    Timestamp,
    Upper,
    check_window,
)


class AppointmentCreate(Payload):
    """POST /v1/appointments request."""

    omit_blank = frozenset({"address_id", "assigned_to_id"})

    title: NonBlankStr
    customer_id: NonBlankStr
    scheduled_start: Timestamp
    scheduled_end: Timestamp
    description: OptionalStr | None = None
    appointment_type: OptionalStr | None = None
    address_id: str | None = None
    assigned_to_id: str | None = None
    duration: int = Field(60, gt=0, le=24 * 60)
    status: Annotated[AppointmentStatus, Upper] = AppointmentStatus.SCHEDULED
    priority: Annotated[Priority, Upper] = Priority.NORMAL
    notes: OptionalStr | None = None

    @model_validator(mode="after")
    def _window(self):
        check_window(self.scheduled_start, self.scheduled_end)
        return self


class AppointmentUpdate(PatchPayload):
    """PUT /v1/appointments/{id} request - partial."""

    omit_blank = frozenset({"address_id", "assigned_to_id"})
    clearable = frozenset({"description", "appointment_type", "address_id", "assigned_to_id", "notes"})

    title: NonBlankStr | None = None
    customer_id: NonBlankStr | None = None
    scheduled_start: Timestamp | None = None
    scheduled_end: Timestamp | None = None
    description: OptionalStr | None = None
    appointment_type: OptionalStr | None = None
    address_id: str | None = None
    assigned_to_id: str | None = None
    duration: int | None = Field(None, gt=0, le=24 * 60)
    status: Annotated[AppointmentStatus, Upper] | None = None
    priority: Annotated[Priority, Upper] | None = None
    notes: OptionalStr | None = None

    @model_validator(mode="after")
    def _window(self):
        check_window(self.scheduled_start, self.scheduled_end)
        return self


class AppointmentResponse(ResponseModel):
    id: str
    tenant_id: str
    title: str
    description: str | None
    appointment_type: str | None
    customer_id: str
    address_id: str | None
    assigned_to_id: str | None
    created_by_id: str | None
    scheduled_start: datetime
    scheduled_end: datetime
    duration: int
    status: str
    priority: str
    notes: str | None
    customer: CustomerSummary
    assigned_to: UserSummary | None = None
    created_at: datetime
    updated_at: datetime

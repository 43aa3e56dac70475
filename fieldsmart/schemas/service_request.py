"""Service request schemas."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BeforeValidator

from fieldsmart.models.enums import RequestSource, ServiceRequestStatus, Urgency
from fieldsmart.schemas.common import AddressSummary, CustomerSummary, ResponseModel, UserSummary
from fieldsmart.validation.payload import NonBlankStr, OptionalStr, Payload, PatchPayload, Upper


def _map_critical(value: Any) -> Any:
    # Older clients send CRITICAL
    if isinstance(value, str) and value.strip().upper() == "CRITICAL":
        return Urgency.EMERGENCY.value
    return value


UrgencyLevel = Annotated[Urgency, Upper, BeforeValidator(_map_critical)]


class ServiceRequestCreate(Payload):
    """POST /v1/service-requests request."""

    omit_blank = frozenset({"service_address_id", "assigned_to_id", "estimate_id"})

    customer_id: NonBlankStr
    title: NonBlankStr
    description: NonBlankStr
    problem_type: NonBlankStr
    urgency: UrgencyLevel = Urgency.MEDIUM
    status: Annotated[ServiceRequestStatus, Upper] = ServiceRequestStatus.NEW
    created_source: Annotated[RequestSource, Upper] = RequestSource.WEB
    service_address_id: str | None = None
    assigned_to_id: str | None = None
    estimate_id: str | None = None
    notes: OptionalStr | None = None
    use_same_as_primary: bool = False


class ServiceRequestUpdate(PatchPayload):
    """PUT /v1/service-requests/{id} request - partial."""

    omit_blank = frozenset({"service_address_id", "assigned_to_id", "estimate_id"})
    clearable = frozenset({"service_address_id", "assigned_to_id", "estimate_id", "notes"})

    customer_id: NonBlankStr | None = None
    title: NonBlankStr | None = None
    description: NonBlankStr | None = None
    problem_type: NonBlankStr | None = None
    urgency: UrgencyLevel | None = None
    status: Annotated[ServiceRequestStatus, Upper] | None = None
    service_address_id: str | None = None
    assigned_to_id: str | None = None
    estimate_id: str | None = None
    notes: OptionalStr | None = None
    use_same_as_primary: bool | None = None


class EstimateReference(ResponseModel):
    id: str
    estimate_number: str
    status: str


class ServiceRequestResponse(ResponseModel):
    id: str
    tenant_id: str
    request_number: str
    customer_id: str
    service_address_id: str | None
    assigned_to_id: str | None
    estimate_id: str | None
    created_by_id: str | None
    title: str
    description: str
    problem_type: str
    urgency: str
    status: str
    created_source: str
    notes: str | None
    use_same_as_primary: bool
    status_changed_at: datetime | None
    assigned_at: datetime | None
    customer: CustomerSummary
    service_address: AddressSummary | None = None
    assigned_to: UserSummary | None = None
    estimate: EstimateReference | None = None
    created_at: datetime
    updated_at: datetime

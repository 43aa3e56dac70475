"""Service request model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fieldsmart.database import Base
from fieldsmart.models.customer import Address, Customer
from fieldsmart.models.enums import RequestSource, ServiceRequestStatus, Urgency
from fieldsmart.models.estimate import Estimate
from fieldsmart.models.mixins import TenantScopedMixin
from fieldsmart.models.tenant import User


class ServiceRequest(TenantScopedMixin, Base):
    """Inbound request for service (web form, API or voice agent), numbered SR-000001 per tenant."""

    __tablename__ = "service_requests"
    __table_args__ = (UniqueConstraint("tenant_id", "request_number", name="uq_service_requests_tenant_number"),)

    request_number: Mapped[str] = mapped_column(String(20), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    service_address_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("addresses.id"), nullable=True)
    assigned_to_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    estimate_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("estimates.id"), nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    problem_type: Mapped[str] = mapped_column(String(64), nullable=False)
    urgency: Mapped[str] = mapped_column(String(20), nullable=False, default=Urgency.MEDIUM.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ServiceRequestStatus.NEW.value)
    created_source: Mapped[str] = mapped_column(String(20), nullable=False, default=RequestSource.WEB.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    use_same_as_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    customer: Mapped[Customer] = relationship(lazy="selectin")
    service_address: Mapped[Address | None] = relationship(lazy="selectin")
    assigned_to: Mapped[User | None] = relationship(foreign_keys=[assigned_to_id], lazy="selectin")
    estimate: Mapped[Estimate | None] = relationship(lazy="selectin")

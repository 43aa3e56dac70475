"""Customer and address models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fieldsmart.database import Base
from fieldsmart.models.enums import AddressType, CustomerType, VerificationStatus
from fieldsmart.models.mixins import TenantScopedMixin


class Customer(TenantScopedMixin, Base):
    """Customers, numbered CUST-000001 per tenant. Archived rather than deleted."""

    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "customer_number", name="uq_customers_tenant_number"),
    )

    customer_number: Mapped[str] = mapped_column(String(20), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=CustomerType.RESIDENTIAL.value)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    company_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mobile_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    home_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    work_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    do_not_service: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    do_not_service_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VerificationStatus.VERIFIED.value
    )
    created_source: Mapped[str] = mapped_column(String(20), nullable=False, default="WEB")
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    addresses: Mapped[list["Address"]] = relationship(
        back_populates="customer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Address.created_at",
    )


class Address(TenantScopedMixin, Base):
    """Service/billing address owned by a customer."""

    __tablename__ = "addresses"

    customer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=AddressType.SERVICE.value)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    street: Mapped[str] = mapped_column(Text, nullable=False)
    street_line2: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str] = mapped_column(Text, nullable=False, default="")
    state: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    zip: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(2), nullable=False, default="US")
    access_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    gate_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    customer: Mapped[Customer] = relationship(back_populates="addresses")

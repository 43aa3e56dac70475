"""Appointment model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fieldsmart.database import Base
from fieldsmart.models.customer import Address, Customer
from fieldsmart.models.enums import AppointmentStatus, Priority
from fieldsmart.models.mixins import TenantScopedMixin
from fieldsmart.models.tenant import User


class Appointment(TenantScopedMixin, Base):
    """Scheduled visit to a customer. Hard-deleted."""

    __tablename__ = "appointments"

    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    address_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("addresses.id"), nullable=True)
    assigned_to_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    appointment_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scheduled_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    scheduled_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=Priority.NORMAL.value)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer: Mapped[Customer] = relationship(lazy="selectin")
    address: Mapped[Address | None] = relationship(lazy="selectin")
    assigned_to: Mapped[User | None] = relationship(foreign_keys=[assigned_to_id], lazy="selectin")

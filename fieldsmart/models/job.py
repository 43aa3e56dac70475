"""Job and job status history models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fieldsmart.database import Base
from fieldsmart.models.customer import Address, Customer
from fieldsmart.models.enums import JobSource, JobStatus, Priority
from fieldsmart.models.mixins import TenantScopedMixin, new_id, utcnow


class Job(TenantScopedMixin, Base):
    """Work order, numbered JOB-000001 per tenant."""

    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("tenant_id", "job_number", name="uq_jobs_tenant_number"),)

    job_number: Mapped[str] = mapped_column(String(20), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    address_id: Mapped[str] = mapped_column(String(36), ForeignKey("addresses.id"), nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=JobStatus.UNSCHEDULED.value)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=Priority.NORMAL.value)
    source: Mapped[str] = mapped_column(String(20), nullable=False, default=JobSource.MANUAL.value)
    scheduled_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scheduled_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    dispatched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer: Mapped[Customer] = relationship(lazy="selectin")
    address: Mapped[Address] = relationship(lazy="selectin")


class JobStatusHistory(Base):
    """Append-only log of job status transitions."""

    __tablename__ = "job_status_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    job_id: Mapped[str] = mapped_column(String(36), ForeignKey("jobs.id"), nullable=False, index=True)
    from_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

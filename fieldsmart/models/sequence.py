"""Per-tenant business number counters."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fieldsmart.database import Base


class SequenceCounter(Base):
    """Last issued value per (tenant, kind), e.g. ("t1", "customer") -> 42."""

    __tablename__ = "sequence_counters"

    tenant_id: Mapped[str] = mapped_column(String(36), ForeignKey("tenants.id"), primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

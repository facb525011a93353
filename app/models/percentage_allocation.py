import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Uuid,
    true,
)
from sqlalchemy.orm import relationship

from app.models.base import Base


class PercentageAllocation(Base):
    """Weight used by the percentage fallback stage.

    Weights are relative: active, rep-active rows are normalized against
    their actual sum, which does not have to be 100.
    """

    __tablename__ = "percentage_allocations"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sales_rep_id = Column(
        Uuid,
        ForeignKey("sales_reps.id", ondelete="CASCADE"),
        nullable=False,
    )
    percentage = Column(Float, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    sales_rep = relationship("SalesRep", back_populates="allocations")

    __table_args__ = (
        CheckConstraint("percentage >= 0", name="ck_allocation_percentage_nonneg"),
    )

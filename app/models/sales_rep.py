import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Uuid, true
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.models.base import Base


class SalesRep(Base):
    """Sales representative that leads are routed to.

    Rows are created and deactivated by the external admin process; the
    routing engine only reads ``is_active``.  ``email`` doubles as the
    calendar identifier for the booking flow.
    """

    __tablename__ = "sales_reps"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    routing_rules = relationship("RoutingRule", back_populates="sales_rep")
    allocations = relationship("PercentageAllocation", back_populates="sales_rep")

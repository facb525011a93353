import uuid

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.core.constants import ROUTING_METHOD_CHECK_CLAUSE
from app.models.base import Base


class RoutingLog(Base):
    """Append-only audit record of one routing decision.

    Stores a snapshot of the lead attributes the engine used, the method
    that resolved the decision and the matched criteria.  Percentage
    decisions also keep the random draw; the allocation set considered
    lives inside ``routing_criteria``.
    """

    __tablename__ = "routing_logs"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False)
    lead_email = Column(String(255))
    lead_city = Column(String(100))
    lead_source = Column(String(100))
    lead_status = Column(String(50))
    assigned_sales_rep_id = Column(
        Uuid, ForeignKey("sales_reps.id", ondelete="SET NULL")
    )
    routing_method = Column(String(20), nullable=False)
    routing_criteria = Column(JSON().with_variant(JSONB(), "postgresql"))
    random_value = Column(Float)

    sales_rep = relationship("SalesRep", lazy="joined")

    __table_args__ = (
        CheckConstraint(ROUTING_METHOD_CHECK_CLAUSE, name="ck_routing_log_method"),
        Index("ix_routing_logs_created_at", "created_at"),
    )

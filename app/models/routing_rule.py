import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
    true,
)
from sqlalchemy.orm import relationship

from app.core.constants import RULE_SCOPE_CHECK_CLAUSE
from app.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoutingRule(Base):
    """Admin-defined mapping from a (scope, value, status) to a representative.

    ``scope`` is ``source`` or ``city``; ``match_value`` and ``status``
    are stored lowercase.  A ``NULL`` status means "any status" and is
    only consulted after the status-exact pass has failed.  Duplicate
    rules are tolerated and resolved by (created_at, id).
    """

    __tablename__ = "routing_rules"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    scope = Column(String(20), nullable=False)
    match_value = Column(String(100), nullable=False)
    status = Column(String(50), nullable=True)
    sales_rep_id = Column(
        Uuid,
        ForeignKey("sales_reps.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    sales_rep = relationship("SalesRep", back_populates="routing_rules")

    __table_args__ = (
        CheckConstraint(RULE_SCOPE_CHECK_CLAUSE, name="ck_routing_rule_scope"),
        CheckConstraint(
            "match_value = lower(match_value)", name="ck_routing_rule_value_lower"
        ),
        Index("ix_routing_rules_scope_value", "scope", "match_value"),
    )

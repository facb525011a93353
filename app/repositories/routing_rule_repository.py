"""Routing-rule repository – read-only queries the routing engine relies on."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import contains_eager

from app.models.percentage_allocation import PercentageAllocation
from app.models.routing_rule import RoutingRule
from app.models.sales_rep import SalesRep
from app.repositories.base import BaseRepository
from app.schemas.common import RuleScope


class RoutingRuleRepository(BaseRepository):
    """Encapsulates queries against ``routing_rules`` and ``percentage_allocations``."""

    async def find_active_rules(
        self,
        scope: RuleScope,
        value: str,
        status: Optional[str] = None,
    ) -> List[RoutingRule]:
        """Return active rules for *scope*/*value* whose representative is active.

        ``status=None`` matches rules with a ``NULL`` status **only**; it
        is not a wildcard.  A given status matches that status only.
        Both comparisons are case-insensitive.  Rows come back in
        creation order so duplicate rules resolve deterministically.
        """
        query = (
            select(RoutingRule)
            .join(SalesRep, SalesRep.id == RoutingRule.sales_rep_id)
            .options(contains_eager(RoutingRule.sales_rep))
            .where(
                RoutingRule.scope == scope.value,
                RoutingRule.match_value == value.strip().lower(),
                RoutingRule.is_active.is_(True),
                SalesRep.is_active.is_(True),
            )
            .order_by(RoutingRule.created_at, RoutingRule.id)
        )
        if status is None:
            query = query.where(RoutingRule.status.is_(None))
        else:
            query = query.where(RoutingRule.status == status.strip().lower())

        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def list_active_percentage_allocations(self) -> List[PercentageAllocation]:
        """Return active allocation rows in creation order.

        Representative activity is **not** filtered here; the caller
        checks it against the rep registry.
        """
        result = await self._db.execute(
            select(PercentageAllocation)
            .where(PercentageAllocation.is_active.is_(True))
            .order_by(PercentageAllocation.created_at, PercentageAllocation.id)
        )
        return list(result.scalars().all())

"""Routing-log repository – insert-only audit trail plus admin read queries."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select

from app.models.routing_log import RoutingLog
from app.models.sales_rep import SalesRep
from app.repositories.base import BaseRepository
from app.schemas.common import RoutingMethod


class RoutingLogRepository(BaseRepository):
    """Encapsulates queries against the ``routing_logs`` table.

    Log rows are immutable once written; no update or delete is exposed.
    """

    async def create(self, **kwargs: Any) -> RoutingLog:
        """Insert a new routing log row."""
        log = RoutingLog(**kwargs)
        self._db.add(log)
        return log

    async def list_page(
        self,
        skip: int = 0,
        limit: int = 20,
        method: Optional[RoutingMethod] = None,
    ) -> Tuple[List[RoutingLog], int]:
        """Return one newest-first page of logs and the total row count."""
        filters = []
        if method is not None:
            filters.append(RoutingLog.routing_method == method.value)

        total = await self._db.scalar(
            select(func.count()).select_from(RoutingLog).where(*filters)
        )
        result = await self._db.execute(
            select(RoutingLog)
            .where(*filters)
            .order_by(RoutingLog.created_at.desc(), RoutingLog.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().unique().all()), total or 0

    async def count_by_method(self, since: datetime) -> Dict[str, int]:
        """Return ``{routing_method: count}`` for decisions since *since*."""
        result = await self._db.execute(
            select(RoutingLog.routing_method, func.count())
            .where(RoutingLog.created_at >= since)
            .group_by(RoutingLog.routing_method)
        )
        return {method: count for method, count in result.all()}

    async def count_percentage_by_rep(self, since: datetime) -> List[Dict[str, Any]]:
        """Return percentage-routed decision counts per representative.

        Sorted busiest first; logs whose representative has since been
        deleted are grouped under ``"Unknown"``.
        """
        count_col = func.count(RoutingLog.id).label("count")
        result = await self._db.execute(
            select(RoutingLog.assigned_sales_rep_id, SalesRep.name, count_col)
            .outerjoin(SalesRep, SalesRep.id == RoutingLog.assigned_sales_rep_id)
            .where(
                RoutingLog.created_at >= since,
                RoutingLog.routing_method == RoutingMethod.percentage.value,
            )
            .group_by(RoutingLog.assigned_sales_rep_id, SalesRep.name)
            .order_by(count_col.desc())
        )
        return [
            {"sales_rep_id": rep_id, "name": name or "Unknown", "count": count}
            for rep_id, name, count in result.all()
        ]

import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.cache import CacheService
from app.core.config import settings
from app.core.constants import STATS_CACHE_KEY_PREFIX, STATS_RANGE_WINDOWS
from app.repositories.routing_log_repository import RoutingLogRepository
from app.schemas.common import RoutingMethod, StatsRange
from app.schemas.routing_log import (
    RepRoutingCount,
    RoutingLogOut,
    RoutingLogPage,
    RoutingStatsResponse,
)
from app.services.audit_logger import RoutingAuditLogger

logger = logging.getLogger(__name__)


class RoutingInsightsService:
    """Read side of the audit log: paginated history and per-range stats.

    Stats snapshots are cached in Redis for a short TTL; the audit-gap
    count is always read fresh.
    """

    def __init__(
        self,
        log_repo: RoutingLogRepository,
        audit_logger: RoutingAuditLogger,
        cache: Optional[CacheService] = None,
        stats_ttl: Optional[int] = None,
    ) -> None:
        self._log_repo = log_repo
        self._audit_logger = audit_logger
        self._cache: CacheService = cache or CacheService()
        self._stats_ttl: int = (
            stats_ttl if stats_ttl is not None else settings.ROUTING_STATS_CACHE_TTL
        )

    async def list_logs(
        self,
        skip: int = 0,
        limit: int = 20,
        method: Optional[RoutingMethod] = None,
    ) -> RoutingLogPage:
        """Return one newest-first page of routing decisions."""
        rows, total = await self._log_repo.list_page(skip=skip, limit=limit, method=method)
        return RoutingLogPage(
            data=[RoutingLogOut.model_validate(row) for row in rows],
            total=total,
            skip=skip,
            limit=limit,
        )

    async def get_stats(self, stats_range: StatsRange) -> RoutingStatsResponse:
        """Decision counts per method and per rep (percentage only) for a range."""
        cache_key = f"{STATS_CACHE_KEY_PREFIX}:{stats_range.value}"

        cached = await self._cache.get_json(cache_key)
        if cached is not None:
            logger.debug("Routing stats cache hit for %s", stats_range.value)
            stats = RoutingStatsResponse.model_validate(cached)
        else:
            stats = await self._compute_stats(stats_range)
            await self._cache.set_json(
                cache_key, stats.model_dump(mode="json"), ttl=self._stats_ttl
            )

        return stats.model_copy(
            update={"audit_failures": await self._audit_logger.failure_count()}
        )

    async def _compute_stats(self, stats_range: StatsRange) -> RoutingStatsResponse:
        since = datetime.now(timezone.utc) - STATS_RANGE_WINDOWS[stats_range.value]
        method_counts = await self._log_repo.count_by_method(since)
        rep_counts = await self._log_repo.count_percentage_by_rep(since)
        return RoutingStatsResponse(
            range=stats_range,
            since=since,
            method_counts=method_counts,
            percentage_rep_counts=[RepRoutingCount(**row) for row in rep_counts],
        )

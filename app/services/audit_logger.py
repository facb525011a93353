import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.cache import CacheService
from app.core.constants import AUDIT_FAILURE_COUNTER_KEY
from app.core.exceptions import LoggingFailure
from app.repositories.routing_log_repository import RoutingLogRepository
from app.schemas.routing_log import RoutingLogEntry

logger = logging.getLogger(__name__)


class RoutingAuditLogger:
    """Append-only sink for routing decisions.

    Each entry is committed on its own.  Failed writes raise
    ``LoggingFailure`` and are never retried inline; callers report them
    through :meth:`report_failure` so audit gaps stay visible.  The gap
    counter lives in Redis and falls back to an in-process counter when
    Redis is unavailable.
    """

    # In-process fallback when Redis is unavailable
    _fallback_failures: int = 0

    def __init__(
        self,
        log_repo: RoutingLogRepository,
        cache: Optional[CacheService] = None,
    ) -> None:
        self._log_repo = log_repo
        self._cache: CacheService = cache or CacheService()

    async def record(self, entry: RoutingLogEntry) -> None:
        """Persist *entry*.

        Raises:
            LoggingFailure: If the database rejects the write.
        """
        try:
            await self._log_repo.create(
                created_at=entry.timestamp,
                lead_email=entry.lead_email,
                lead_city=entry.lead_city,
                lead_source=entry.lead_source,
                lead_status=entry.lead_status,
                assigned_sales_rep_id=entry.sales_rep_id,
                routing_method=entry.routing_method.value,
                routing_criteria=self._criteria_payload(entry),
                random_value=entry.random_value,
            )
            await self._log_repo.commit()
        except SQLAlchemyError as exc:
            await self._safe_rollback()
            raise LoggingFailure(f"Failed to record routing decision: {exc}") from exc

    async def report_failure(self) -> int:
        """Count one audit gap and return the running total."""
        counter = await self._cache.incr(AUDIT_FAILURE_COUNTER_KEY)
        if counter is not None:
            return counter + RoutingAuditLogger._fallback_failures

        RoutingAuditLogger._fallback_failures += 1
        return RoutingAuditLogger._fallback_failures

    async def failure_count(self) -> int:
        """Return the number of decisions that could not be audited.

        Gaps counted in-process while Redis was down are added to the
        Redis counter.
        """
        fallback = RoutingAuditLogger._fallback_failures
        if not self._cache.is_available:
            return fallback
        value = await self._cache.get_int(AUDIT_FAILURE_COUNTER_KEY)
        return (value or 0) + fallback

    @staticmethod
    def _criteria_payload(entry: RoutingLogEntry) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(entry.routing_criteria)
        if entry.allocations is not None:
            payload["allocations"] = [
                {
                    "salesRepId": str(allocation.sales_rep_id),
                    "percentage": allocation.percentage,
                }
                for allocation in entry.allocations
            ]
        return payload

    async def _safe_rollback(self) -> None:
        try:
            await self._log_repo.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after failed audit write also failed", exc_info=True)

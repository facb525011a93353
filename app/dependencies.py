import logging
from typing import Optional

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService
from app.core.config import settings
from app.core.database import get_db
from app.repositories.routing_log_repository import RoutingLogRepository
from app.repositories.routing_rule_repository import RoutingRuleRepository
from app.repositories.sales_rep_repository import SalesRepRepository
from app.services.audit_logger import RoutingAuditLogger
from app.services.lead_lookup import LeadLookupClient
from app.services.routing_engine import RoutingEngine
from app.services.routing_insights import RoutingInsightsService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> Optional[Redis]:
    """Get an async Redis client instance using connection pooling."""
    try:
        client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        await client.ping()
        return client
    except Exception:
        logger.warning("Redis unavailable – caching disabled for this request")
        return None


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
) -> CacheService:
    """Build a :class:`CacheService` backed by the shared Redis client."""
    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_rule_repo(
    db: AsyncSession = Depends(get_db),
) -> RoutingRuleRepository:
    return RoutingRuleRepository(db)


async def get_sales_rep_repo(
    db: AsyncSession = Depends(get_db),
) -> SalesRepRepository:
    return SalesRepRepository(db)


async def get_routing_log_repo(
    db: AsyncSession = Depends(get_db),
) -> RoutingLogRepository:
    return RoutingLogRepository(db)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_lead_lookup_client() -> LeadLookupClient:
    return LeadLookupClient()


async def get_audit_logger(
    log_repo: RoutingLogRepository = Depends(get_routing_log_repo),
    cache: CacheService = Depends(get_cache_service),
) -> RoutingAuditLogger:
    return RoutingAuditLogger(log_repo=log_repo, cache=cache)


async def get_routing_engine(
    rule_repo: RoutingRuleRepository = Depends(get_rule_repo),
    rep_registry: SalesRepRepository = Depends(get_sales_rep_repo),
    audit_logger: RoutingAuditLogger = Depends(get_audit_logger),
    lead_lookup: LeadLookupClient = Depends(get_lead_lookup_client),
) -> RoutingEngine:
    """Build a :class:`RoutingEngine` with injected dependencies."""
    return RoutingEngine(
        rule_repo=rule_repo,
        rep_registry=rep_registry,
        audit_logger=audit_logger,
        lead_lookup=lead_lookup,
    )


async def get_routing_insights_service(
    log_repo: RoutingLogRepository = Depends(get_routing_log_repo),
    audit_logger: RoutingAuditLogger = Depends(get_audit_logger),
    cache: CacheService = Depends(get_cache_service),
) -> RoutingInsightsService:
    """Build a :class:`RoutingInsightsService` with injected dependencies."""
    return RoutingInsightsService(
        log_repo=log_repo,
        audit_logger=audit_logger,
        cache=cache,
    )

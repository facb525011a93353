"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    # Repository factories
    get_rule_repo,
    get_sales_rep_repo,
    get_routing_log_repo,
    # Service factories
    get_lead_lookup_client,
    get_audit_logger,
    get_routing_engine,
    get_routing_insights_service,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_rule_repo",
    "get_sales_rep_repo",
    "get_routing_log_repo",
    "get_lead_lookup_client",
    "get_audit_logger",
    "get_routing_engine",
    "get_routing_insights_service",
    "get_redis_client",
    "get_cache_service",
]

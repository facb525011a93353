"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    RoutingMethod as RoutingMethod,
    RuleScope as RuleScope,
    StatsRange as StatsRange,
    ErrorDetail as ErrorDetail,
    ErrorResponse as ErrorResponse,
)

# Routing request/response schemas
from app.schemas.routing import (
    LeadAttributes as LeadAttributes,
    RouteRequest as RouteRequest,
    RouteResponse as RouteResponse,
    SalesRepOut as SalesRepOut,
)

# Audit log schemas
from app.schemas.routing_log import (
    AllocationSnapshot as AllocationSnapshot,
    RoutingLogEntry as RoutingLogEntry,
    RoutingLogOut as RoutingLogOut,
    RoutingLogPage as RoutingLogPage,
    RepRoutingCount as RepRoutingCount,
    RoutingStatsResponse as RoutingStatsResponse,
)

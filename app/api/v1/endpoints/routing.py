from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.config import settings
from app.core.constants import MAX_LOG_PAGE_SIZE
from app.core.rate_limit import limiter
from app.schemas.common import ErrorResponse, RoutingMethod, StatsRange
from app.schemas.routing import RouteRequest, RouteResponse
from app.schemas.routing_log import RoutingLogPage, RoutingStatsResponse
from app.services.routing_engine import RoutingEngine
from app.services.routing_insights import RoutingInsightsService
from app.api.deps import get_routing_engine, get_routing_insights_service

router = APIRouter(prefix="/routing", tags=["Routing"])


@router.post(
    "/sales-rep",
    response_model=RouteResponse,
    responses={
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.ROUTING_RATE_LIMIT)
async def route_lead(
    request: Request,
    request_body: RouteRequest,
    engine: RoutingEngine = Depends(get_routing_engine),
) -> RouteResponse:
    """Assign a lead to one sales representative.

    Called once per lead-capture event by the booking flow, which then
    schedules on the returned representative's calendar (keyed by email).
    Business logic is delegated to :class:`RoutingEngine`.
    """
    result = await engine.route(request_body.to_lead_attributes())
    return RouteResponse(
        sales_rep=result.sales_rep,
        routing_method=result.method,
        matched_criteria=result.matched_criteria,
    )


@router.get("/logs", response_model=RoutingLogPage)
async def list_routing_logs(
    skip: int = Query(0, ge=0, description="Number of rows to skip"),
    limit: int = Query(20, ge=1, le=MAX_LOG_PAGE_SIZE, description="Max rows to return"),
    method: Optional[RoutingMethod] = Query(None, description="Filter by routing method"),
    service: RoutingInsightsService = Depends(get_routing_insights_service),
) -> RoutingLogPage:
    """Routing decisions, newest first."""
    return await service.list_logs(skip=skip, limit=limit, method=method)


@router.get("/stats", response_model=RoutingStatsResponse)
async def routing_stats(
    stats_range: StatsRange = Query(StatsRange.last_24h, alias="range"),
    service: RoutingInsightsService = Depends(get_routing_insights_service),
) -> RoutingStatsResponse:
    """Decision counts per routing method and per representative."""
    return await service.get_stats(stats_range)

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.api.deps import get_routing_engine, get_routing_insights_service
from app.core.exceptions import ConfigurationError, NoEligibleRepresentativeError
from app.main import app
from app.schemas.common import RoutingMethod, StatsRange
from app.schemas.routing import SalesRepOut
from app.schemas.routing_log import RoutingLogPage, RoutingStatsResponse
from app.services.routing_engine import RoutingResult


def _make_rep():
    return SalesRepOut(id=uuid4(), name="Rep X", email="rep.x@example.com")


def _override_engine(**route_kwargs) -> AsyncMock:
    engine = AsyncMock()
    engine.route = AsyncMock(**route_kwargs)
    app.dependency_overrides[get_routing_engine] = lambda: engine
    return engine


class TestCORSMiddleware:
    """Verify that CORS headers are present on responses."""

    @pytest.mark.asyncio
    async def test_cors_headers_on_preflight(self, async_client):
        response = await async_client.options(
            "/api/v1/routing/sales-rep",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert "access-control-allow-origin" in response.headers

    @pytest.mark.asyncio
    async def test_cors_headers_on_get(self, async_client):
        response = await async_client.get(
            "/api/v1/health", headers={"Origin": "http://localhost:3000"}
        )
        assert response.status_code == 200
        assert (
            response.headers.get("access-control-allow-origin")
            == "http://localhost:3000"
        )


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_returns_ok(self, async_client):
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestRouteLeadEndpoint:
    """POST /api/v1/routing/sales-rep"""

    @pytest.mark.asyncio
    async def test_success_returns_camel_case_body(self, async_client):
        rep = _make_rep()
        engine = _override_engine(
            return_value=RoutingResult(
                sales_rep=rep,
                method=RoutingMethod.city,
                matched_criteria={"city": "austin", "leadStatus": "new"},
            )
        )

        response = await async_client.post(
            "/api/v1/routing/sales-rep",
            json={
                "email": "Lead@Example.com",
                "city": "Austin",
                "leadSource": "",
                "leadStatus": "New",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["salesRep"] == {
            "id": str(rep.id),
            "name": "Rep X",
            "email": "rep.x@example.com",
        }
        assert body["routingMethod"] == "city"
        assert body["matchedCriteria"] == {"city": "austin", "leadStatus": "new"}

        lead = engine.route.await_args.args[0]
        assert lead.email == "lead@example.com"
        assert lead.city == "austin"
        assert lead.lead_source is None
        assert lead.lead_status == "new"

    @pytest.mark.asyncio
    async def test_empty_body_is_routed(self, async_client):
        rep = _make_rep()
        _override_engine(
            return_value=RoutingResult(
                sales_rep=rep,
                method=RoutingMethod.percentage,
                matched_criteria={"randomValue": 12.0, "totalPercentage": 100.0},
                random_value=12.0,
            )
        )

        response = await async_client.post("/api/v1/routing/sales-rep", json={})

        assert response.status_code == 200
        assert response.json()["routingMethod"] == "percentage"

    @pytest.mark.asyncio
    async def test_no_eligible_rep_returns_422(self, async_client):
        _override_engine(side_effect=NoEligibleRepresentativeError())

        response = await async_client.post(
            "/api/v1/routing/sales-rep", json={"city": "nowhere"}
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "NO_ELIGIBLE_REPRESENTATIVE"
        assert error["message"]

    @pytest.mark.asyncio
    async def test_configuration_error_returns_500(self, async_client):
        _override_engine(side_effect=ConfigurationError("negative percentage"))

        response = await async_client.post("/api/v1/routing/sales-rep", json={})

        assert response.status_code == 500
        assert response.json()["error"] == {
            "message": "negative percentage",
            "code": "CONFIGURATION_ERROR",
        }

    @pytest.mark.asyncio
    async def test_invalid_email_returns_422(self, async_client):
        engine = _override_engine()

        response = await async_client.post(
            "/api/v1/routing/sales-rep", json={"email": "not-an-email"}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"]["code"] == "INVALID_REQUEST"
        assert body["errors"]
        engine.route.assert_not_awaited()


class TestRoutingLogsEndpoint:
    @pytest.mark.asyncio
    async def test_lists_logs(self, async_client):
        service = AsyncMock()
        service.list_logs = AsyncMock(
            return_value=RoutingLogPage(data=[], total=0, skip=0, limit=50)
        )
        app.dependency_overrides[get_routing_insights_service] = lambda: service

        response = await async_client.get(
            "/api/v1/routing/logs", params={"limit": 50, "method": "percentage"}
        )

        assert response.status_code == 200
        assert response.json()["limit"] == 50
        service.list_logs.assert_awaited_once_with(
            skip=0, limit=50, method=RoutingMethod.percentage
        )

    @pytest.mark.asyncio
    async def test_limit_above_maximum_rejected(self, async_client):
        app.dependency_overrides[get_routing_insights_service] = lambda: AsyncMock()

        response = await async_client.get("/api/v1/routing/logs", params={"limit": 500})

        assert response.status_code == 422


class TestRoutingStatsEndpoint:
    @pytest.mark.asyncio
    async def test_stats_for_range(self, async_client):
        service = AsyncMock()
        service.get_stats = AsyncMock(
            return_value=RoutingStatsResponse(
                range=StatsRange.last_3m,
                since=datetime(2026, 7, 21, tzinfo=timezone.utc),
                method_counts={"source": 4},
                audit_failures=0,
            )
        )
        app.dependency_overrides[get_routing_insights_service] = lambda: service

        response = await async_client.get("/api/v1/routing/stats", params={"range": "3m"})

        assert response.status_code == 200
        assert response.json()["method_counts"] == {"source": 4}
        service.get_stats.assert_awaited_once_with(StatsRange.last_3m)

    @pytest.mark.asyncio
    async def test_unknown_range_rejected(self, async_client):
        app.dependency_overrides[get_routing_insights_service] = lambda: AsyncMock()

        response = await async_client.get("/api/v1/routing/stats", params={"range": "2y"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

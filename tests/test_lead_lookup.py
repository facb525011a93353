"""Tests for the CRM lead lookup client using ``httpx.MockTransport``."""

import asyncio
import json

import httpx
import pytest

from app.core.exceptions import ExternalLookupError
from app.services.lead_lookup import LeadLookupClient, LookedUpLead

_BASE_URL = "https://crm.example.com/rest/v11"


def _client(handler, **kwargs) -> LeadLookupClient:
    kwargs.setdefault("token", "secret-token")
    kwargs.setdefault("timeout", 2.0)
    return LeadLookupClient(
        base_url=_BASE_URL, transport=httpx.MockTransport(handler), **kwargs
    )


class TestLeadFound:
    @pytest.mark.asyncio
    async def test_returns_normalized_source_and_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "records": [
                        {"email1": "a@b.com", "lead_source": " Commercial ", "status": "New"}
                    ]
                },
            )

        found = await _client(handler).get_lead_by_email("a@b.com")

        assert found == LookedUpLead(lead_source="commercial", lead_status="new")

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["method"] = request.method
            seen["token"] = request.headers.get("OAuth-Token")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"records": []})

        await _client(handler).get_lead_by_email("a@b.com")

        assert seen["method"] == "POST"
        assert seen["url"] == f"{_BASE_URL}/Leads/filter"
        assert seen["token"] == "secret-token"
        assert seen["body"] == {
            "filter": [{"email": "a@b.com"}],
            "fields": "email1,status,lead_source",
            "max_num": 1,
        }

    @pytest.mark.asyncio
    async def test_missing_fields_become_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"records": [{"email1": "a@b.com", "status": ""}]})

        found = await _client(handler).get_lead_by_email("a@b.com")

        assert found == LookedUpLead(lead_source=None, lead_status=None)


class TestLeadNotFound:
    @pytest.mark.asyncio
    async def test_empty_records_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"records": []})

        assert await _client(handler).get_lead_by_email("a@b.com") is None

    @pytest.mark.asyncio
    async def test_disabled_client_does_no_io(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = LeadLookupClient(base_url="", transport=httpx.MockTransport(handler))

        assert client.enabled is False
        assert await client.get_lead_by_email("a@b.com") is None


class TestLookupFailures:
    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "boom"})

        with pytest.raises(ExternalLookupError, match="500"):
            await _client(handler).get_lead_by_email("a@b.com")

    @pytest.mark.asyncio
    async def test_transport_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(ExternalLookupError, match="timed out"):
            await _client(handler).get_lead_by_email("a@b.com")

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalLookupError, match="unreachable"):
            await _client(handler).get_lead_by_email("a@b.com")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>maintenance</html>")

        with pytest.raises(ExternalLookupError, match="invalid JSON"):
            await _client(handler).get_lead_by_email("a@b.com")

    @pytest.mark.asyncio
    async def test_payload_without_records(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "invalid_grant"})

        with pytest.raises(ExternalLookupError, match="records"):
            await _client(handler).get_lead_by_email("a@b.com")

    @pytest.mark.asyncio
    async def test_overall_deadline_bounds_slow_responses(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json={"records": []})

        with pytest.raises(ExternalLookupError, match="timed out"):
            await _client(handler, timeout=0.05).get_lead_by_email("a@b.com")

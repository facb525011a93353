import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ExternalLookupError
from app.schemas.common import normalize_match_value

logger = logging.getLogger(__name__)

_LEAD_FILTER_PATH = "/Leads/filter"
_LEAD_FIELDS = "email1,status,lead_source"


@dataclass(frozen=True)
class LookedUpLead:
    """Lead attributes recovered from the CRM, already normalized."""

    lead_source: Optional[str] = None
    lead_status: Optional[str] = None


class LeadLookupClient:
    """Looks up a lead's source and status in the CRM by email.

    When no lookup URL is configured the client is disabled and every
    lookup returns ``None`` without doing any I/O.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url: str = (
            base_url if base_url is not None else settings.LEAD_LOOKUP_URL
        ).rstrip("/")
        self._token: str = token if token is not None else settings.LEAD_LOOKUP_TOKEN
        self._timeout: float = (
            timeout if timeout is not None else settings.LEAD_LOOKUP_TIMEOUT_SECONDS
        )
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._base_url)

    async def get_lead_by_email(self, email: str) -> Optional[LookedUpLead]:
        """Return the CRM's source/status for *email*, or ``None`` if unknown.

        The whole call is bounded by the configured timeout.

        Raises:
            ExternalLookupError: On timeout, transport failure, a non-2xx
                response or a payload without a ``records`` list.
        """
        if not self.enabled:
            return None
        try:
            return await asyncio.wait_for(self._fetch(email), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise ExternalLookupError(
                f"Lead lookup timed out after {self._timeout:g}s"
            )

    async def _fetch(self, email: str) -> Optional[LookedUpLead]:
        body = {
            "filter": [{"email": email}],
            "fields": _LEAD_FIELDS,
            "max_num": 1,
        }
        headers = {"OAuth-Token": self._token} if self._token else {}

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(_LEAD_FILTER_PATH, json=body, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException:
            logger.error("Lead lookup timed out: %s", self._base_url)
            raise ExternalLookupError("Lead lookup timed out")
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Lead lookup returned %s: %s",
                exc.response.status_code,
                self._base_url,
            )
            raise ExternalLookupError(
                f"Lead lookup returned {exc.response.status_code}"
            )
        except httpx.HTTPError as exc:
            logger.error("Lead lookup unreachable: %s (%s)", self._base_url, exc)
            raise ExternalLookupError("Lead lookup unreachable")
        except ValueError:
            raise ExternalLookupError("Lead lookup returned invalid JSON")

        records = payload.get("records") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise ExternalLookupError("Lead lookup response has no records list")
        if not records:
            logger.info("No CRM lead found for %s", email)
            return None

        record = records[0] if isinstance(records[0], dict) else {}
        return LookedUpLead(
            lead_source=normalize_match_value(record.get("lead_source")),
            lead_status=normalize_match_value(record.get("status")),
        )

"""Routing request/response schemas for the booking flow."""

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import RoutingMethod, normalize_match_value


# ---------------------------------------------------------------------------
# Engine input
# ---------------------------------------------------------------------------


class LeadAttributes(BaseModel):
    """Normalized lead attributes the routing cascade works on.

    Every value is lowercased and stripped on construction, so the
    engine can compare against stored rule values directly.
    """

    model_config = ConfigDict(frozen=True)

    email: Optional[str] = None
    city: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None

    @field_validator("email", "city", "lead_source", "lead_status", mode="before")
    @classmethod
    def _normalize(cls, value: Optional[str]) -> Optional[str]:
        return normalize_match_value(value)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RouteRequest(BaseModel):
    """Body for POST /api/v1/routing/sales-rep.

    Every field is optional; a request with none of them goes straight
    to percentage-based routing.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[EmailStr] = None
    city: Optional[str] = Field(None, max_length=100)
    lead_source: Optional[str] = Field(None, alias="leadSource", max_length=100)
    lead_status: Optional[str] = Field(None, alias="leadStatus", max_length=50)

    @field_validator("email", "city", "lead_source", "lead_status", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Booking forms post "" for untouched inputs
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_lead_attributes(self) -> LeadAttributes:
        return LeadAttributes(
            email=self.email,
            city=self.city,
            lead_source=self.lead_source,
            lead_status=self.lead_status,
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SalesRepOut(BaseModel):
    """Representative details handed to the calendar-scheduling step."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class RouteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sales_rep: SalesRepOut = Field(..., alias="salesRep")
    routing_method: RoutingMethod = Field(..., alias="routingMethod")
    matched_criteria: Dict[str, Any] = Field(
        default_factory=dict, alias="matchedCriteria"
    )

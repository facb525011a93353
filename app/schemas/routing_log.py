"""Audit-log schemas: the immutable decision record and its read models."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from app.schemas.common import RoutingMethod, StatsRange
from app.schemas.routing import SalesRepOut


class AllocationSnapshot(BaseModel):
    """One percentage allocation as it was seen by a routing decision."""

    model_config = ConfigDict(frozen=True)

    sales_rep_id: UUID
    percentage: float


class RoutingLogEntry(BaseModel):
    """A single routing decision, written once and never modified.

    ``random_value`` and ``allocations`` belong to percentage-based
    decisions only; rule-based decisions must leave them unset.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    lead_email: Optional[str] = None
    lead_city: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None
    routing_method: RoutingMethod
    sales_rep_id: UUID
    routing_criteria: Dict[str, Any] = Field(default_factory=dict)
    random_value: Optional[float] = None
    allocations: Optional[List[AllocationSnapshot]] = None

    @model_validator(mode="after")
    def validate_percentage_fields(self) -> Self:
        is_percentage = self.routing_method == RoutingMethod.percentage
        if is_percentage and (self.random_value is None or self.allocations is None):
            raise ValueError(
                "percentage decisions must record the random draw and the "
                "allocation set considered"
            )
        if not is_percentage and (
            self.random_value is not None or self.allocations is not None
        ):
            raise ValueError(
                f"{self.routing_method.value} decisions must not carry "
                "percentage-draw details"
            )
        return self


# ---------------------------------------------------------------------------
# Read models for the admin log / stats endpoints
# ---------------------------------------------------------------------------


class RoutingLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    lead_email: Optional[str] = None
    lead_city: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None
    routing_method: RoutingMethod
    assigned_sales_rep_id: Optional[UUID] = None
    routing_criteria: Optional[Dict[str, Any]] = None
    random_value: Optional[float] = None
    sales_rep: Optional[SalesRepOut] = None


class RoutingLogPage(BaseModel):
    data: List[RoutingLogOut] = Field(default_factory=list)
    total: int = Field(0, description="Total number of matching log entries")
    skip: int = Field(0, ge=0, description="Number of rows skipped")
    limit: int = Field(20, ge=1, description="Maximum rows returned")


class RepRoutingCount(BaseModel):
    sales_rep_id: Optional[UUID] = None
    name: str
    count: int


class RoutingStatsResponse(BaseModel):
    range: StatsRange
    since: datetime
    method_counts: Dict[str, int] = Field(default_factory=dict)
    percentage_rep_counts: List[RepRoutingCount] = Field(
        default_factory=list,
        description="Percentage-routed decisions per representative, busiest first",
    )
    audit_failures: Optional[int] = Field(
        None,
        description="Decisions that could not be written to the audit log "
        "(None when the counter store is unavailable)",
    )

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class RoutingMethod(str, Enum):
    """Cascade stage that resolved a routing decision."""

    source = "source"
    city = "city"
    percentage = "percentage"


class RuleScope(str, Enum):
    source = "source"
    city = "city"


class StatsRange(str, Enum):
    last_24h = "24h"
    last_7d = "7d"
    last_1m = "1m"
    last_3m = "3m"
    last_6m = "6m"


class ErrorDetail(BaseModel):
    message: str
    code: str


class ErrorResponse(BaseModel):
    """Error envelope returned by every routing endpoint."""

    error: ErrorDetail


def normalize_match_value(value: Optional[str]) -> Optional[str]:
    """Lowercase and strip a lead attribute; blank values become ``None``.

    Rule match values and statuses are stored in this form, so lead
    attributes must be passed through here before any rule lookup.
    """
    if value is None:
        return None
    cleaned = value.strip().lower()
    return cleaned or None

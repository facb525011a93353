from app.models.base import Base
from app.models.sales_rep import SalesRep
from app.models.routing_rule import RoutingRule
from app.models.percentage_allocation import PercentageAllocation
from app.models.routing_log import RoutingLog

__all__ = [
    "Base",
    "SalesRep",
    "RoutingRule",
    "PercentageAllocation",
    "RoutingLog",
]

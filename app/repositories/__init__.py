"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the routing engine
and the insights service only contain business logic.
"""

from app.repositories.routing_log_repository import RoutingLogRepository
from app.repositories.routing_rule_repository import RoutingRuleRepository
from app.repositories.sales_rep_repository import SalesRepRepository

__all__ = [
    "RoutingLogRepository",
    "RoutingRuleRepository",
    "SalesRepRepository",
]

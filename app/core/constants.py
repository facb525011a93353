from datetime import timedelta
from typing import Dict

from app.schemas.common import RoutingMethod, RuleScope, StatsRange

RULE_SCOPE_CHECK_CLAUSE: str = (
    f"scope IN ({', '.join(repr(s.value) for s in RuleScope)})"
)

ROUTING_METHOD_CHECK_CLAUSE: str = (
    f"routing_method IN ({', '.join(repr(m.value) for m in RoutingMethod)})"
)

# Look-back window for each stats range; months are approximated as 30 days
STATS_RANGE_WINDOWS: Dict[str, timedelta] = {
    StatsRange.last_24h.value: timedelta(hours=24),
    StatsRange.last_7d.value: timedelta(days=7),
    StatsRange.last_1m.value: timedelta(days=30),
    StatsRange.last_3m.value: timedelta(days=90),
    StatsRange.last_6m.value: timedelta(days=180),
}

# Redis keys
AUDIT_FAILURE_COUNTER_KEY: str = "routing:audit_failures"
STATS_CACHE_KEY_PREFIX: str = "routing:stats"

MAX_LOG_PAGE_SIZE: int = 100

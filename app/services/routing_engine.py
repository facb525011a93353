import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    ConfigurationError,
    ExternalLookupError,
    LoggingFailure,
    NoEligibleRepresentativeError,
)
from app.models.percentage_allocation import PercentageAllocation
from app.models.routing_rule import RoutingRule
from app.repositories.routing_rule_repository import RoutingRuleRepository
from app.repositories.sales_rep_repository import SalesRepRepository
from app.schemas.common import RoutingMethod, RuleScope
from app.schemas.routing import LeadAttributes, SalesRepOut
from app.schemas.routing_log import AllocationSnapshot, RoutingLogEntry
from app.services.audit_logger import RoutingAuditLogger
from app.services.lead_lookup import LeadLookupClient
from app.services.weighted_selection import RandomSource, pick_weighted

logger = logging.getLogger(__name__)


@dataclass
class RoutingResult:
    """Outcome of one routing decision.

    ``random_value`` and ``allocations`` are only set for percentage
    decisions; they go to the audit log, not to API clients.  ``sales_rep``
    is a detached snapshot taken when the representative is chosen, so it
    stays readable after the session is rolled back.
    """

    sales_rep: SalesRepOut
    method: RoutingMethod
    matched_criteria: Dict[str, Any] = field(default_factory=dict)
    random_value: Optional[float] = None
    allocations: Optional[List[AllocationSnapshot]] = None


class RoutingEngine:
    """Assigns a lead to exactly one sales representative.

    Stages run in a fixed order and the first one that resolves wins:

    1. **source**: rules scoped to the lead source.  The source (and
       status) may come from the CRM lead lookup when the caller did not
       supply one; lookup failures only skip this stage.
    2. **city**: rules scoped to the lead's city.
    3. **percentage**: weighted random pick over active allocations.

    Within stages 1 and 2 a rule for the lead's exact status beats a
    rule with no status.  The engine holds no state between calls: all
    rule data is read fresh for every decision.
    """

    def __init__(
        self,
        rule_repo: RoutingRuleRepository,
        rep_registry: SalesRepRepository,
        audit_logger: RoutingAuditLogger,
        lead_lookup: Optional[LeadLookupClient] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self._rule_repo = rule_repo
        self._rep_registry = rep_registry
        self._audit_logger = audit_logger
        self._lead_lookup = lead_lookup
        self._rng = rng

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def route(self, lead: LeadAttributes) -> RoutingResult:
        """Run the cascade for *lead* and audit the decision.

        Raises:
            NoEligibleRepresentativeError: If no rule matched and no
                active, rep-active allocation carries positive weight.
            ConfigurationError: If routing data cannot be read or is
                inconsistent.
        """
        lead = await self._resolve_lead_attributes(lead)

        try:
            result = (
                await self._route_by_source(lead)
                or await self._route_by_city(lead)
                or await self._route_by_percentage()
            )
        except SQLAlchemyError as exc:
            logger.error("Routing data could not be read: %s", exc)
            raise ConfigurationError("Routing rules could not be loaded") from exc

        logger.info(
            "Lead %s routed to %s via %s",
            lead.email or "<anonymous>",
            result.sales_rep.id,
            result.method.value,
        )
        await self._record_decision(lead, result)
        return result

    # ------------------------------------------------------------------
    # Stage 1 input: CRM lookup
    # ------------------------------------------------------------------

    async def _resolve_lead_attributes(self, lead: LeadAttributes) -> LeadAttributes:
        """Fill in source/status from the CRM when the caller gave no source."""
        if lead.lead_source or not lead.email or self._lead_lookup is None:
            return lead

        try:
            found = await self._lead_lookup.get_lead_by_email(lead.email)
        except ExternalLookupError as exc:
            logger.warning(
                "Lead lookup failed for %s, skipping source routing: %s",
                lead.email,
                exc.detail,
            )
            return lead

        if found is None or not found.lead_source:
            return lead

        return lead.model_copy(
            update={
                "lead_source": found.lead_source,
                "lead_status": lead.lead_status or found.lead_status,
            }
        )

    # ------------------------------------------------------------------
    # Stages 1 and 2: rule matching
    # ------------------------------------------------------------------

    async def _route_by_source(self, lead: LeadAttributes) -> Optional[RoutingResult]:
        if not lead.lead_source:
            return None
        rule = await self._match_rule(RuleScope.source, lead.lead_source, lead.lead_status)
        if rule is None:
            logger.debug("No source rule for %r/%r", lead.lead_source, lead.lead_status)
            return None
        return RoutingResult(
            sales_rep=SalesRepOut.model_validate(rule.sales_rep),
            method=RoutingMethod.source,
            matched_criteria={
                "leadSource": lead.lead_source,
                "leadStatus": rule.status,
                "ruleId": str(rule.id),
            },
        )

    async def _route_by_city(self, lead: LeadAttributes) -> Optional[RoutingResult]:
        if not lead.city:
            return None
        rule = await self._match_rule(RuleScope.city, lead.city, lead.lead_status)
        if rule is None:
            logger.debug("No city rule for %r/%r", lead.city, lead.lead_status)
            return None
        return RoutingResult(
            sales_rep=SalesRepOut.model_validate(rule.sales_rep),
            method=RoutingMethod.city,
            matched_criteria={
                "city": lead.city,
                "leadStatus": rule.status,
                "ruleId": str(rule.id),
            },
        )

    async def _match_rule(
        self, scope: RuleScope, value: str, status: Optional[str]
    ) -> Optional[RoutingRule]:
        """Two-pass lookup: exact (value, status) first, then (value, no status).

        The exact pass is skipped when the lead has no status.
        """
        passes = [status, None] if status else [None]
        for pass_status in passes:
            rules = await self._rule_repo.find_active_rules(scope, value, pass_status)
            if not rules:
                continue
            if len(rules) > 1:
                logger.warning(
                    "%d active %s rules match %r/%r; using the oldest (%s)",
                    len(rules),
                    scope.value,
                    value,
                    pass_status,
                    rules[0].id,
                )
            return rules[0]
        return None

    # ------------------------------------------------------------------
    # Stage 3: weighted fallback
    # ------------------------------------------------------------------

    async def _route_by_percentage(self) -> RoutingResult:
        allocations = await self._rule_repo.list_active_percentage_allocations()
        if not allocations:
            raise NoEligibleRepresentativeError(
                "No eligible sales representative: no routing rule matched and "
                "there are no active percentage allocations"
            )

        negative = [a for a in allocations if a.percentage < 0]
        if negative:
            raise ConfigurationError(
                f"Percentage allocation {negative[0].id} has a negative "
                f"percentage ({negative[0].percentage})"
            )

        active_rep_ids = await self._rep_registry.filter_active(
            a.sales_rep_id for a in allocations
        )
        eligible: List[PercentageAllocation] = [
            a for a in allocations if a.sales_rep_id in active_rep_ids and a.percentage > 0
        ]

        pick = pick_weighted(eligible, weight=lambda a: a.percentage, rng=self._rng)
        if pick is None:
            raise NoEligibleRepresentativeError(
                "No eligible sales representative: no routing rule matched and "
                "no active representative has a positive percentage allocation"
            )
        if pick.fell_back:
            logger.warning(
                "Random draw %.6f exceeded cumulative total %.6f; "
                "falling back to the last allocation",
                pick.draw,
                pick.total,
            )

        sales_rep = await self._rep_registry.get_by_id(pick.choice.sales_rep_id)
        if sales_rep is None:
            raise ConfigurationError(
                f"Percentage allocation {pick.choice.id} points at missing "
                f"representative {pick.choice.sales_rep_id}"
            )

        return RoutingResult(
            sales_rep=SalesRepOut.model_validate(sales_rep),
            method=RoutingMethod.percentage,
            matched_criteria={
                "randomValue": pick.draw,
                "totalPercentage": pick.total,
                "fallback": pick.fell_back,
            },
            random_value=pick.draw,
            allocations=[
                AllocationSnapshot(sales_rep_id=a.sales_rep_id, percentage=a.percentage)
                for a in eligible
            ],
        )

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    async def _record_decision(self, lead: LeadAttributes, result: RoutingResult) -> None:
        """Write the audit entry; a failed write is warned about and counted."""
        entry = RoutingLogEntry(
            timestamp=datetime.now(timezone.utc),
            lead_email=lead.email,
            lead_city=lead.city,
            lead_source=lead.lead_source,
            lead_status=lead.lead_status,
            routing_method=result.method,
            sales_rep_id=result.sales_rep.id,
            routing_criteria=result.matched_criteria,
            random_value=result.random_value,
            allocations=result.allocations,
        )
        try:
            await self._audit_logger.record(entry)
        except LoggingFailure as exc:
            gaps = await self._audit_logger.report_failure()
            logger.warning(
                "Routing decision for %s (%s -> %s) was not audited "
                "(%d audit gap(s) so far): %s",
                lead.email or "<anonymous>",
                result.method.value,
                result.sales_rep.id,
                gaps,
                exc.detail,
            )

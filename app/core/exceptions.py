class LeadRouterError(Exception):
    """Base class for all lead-router domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except LeadRouterError`` clause can catch any domain
    error.  ``code`` is the machine-readable value returned to API
    clients in ``{"error": {"message", "code"}}``.
    """

    code: str = "INTERNAL_ERROR"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class NoEligibleRepresentativeError(LeadRouterError):
    """Raised when the routing cascade is exhausted without a representative."""

    code = "NO_ELIGIBLE_REPRESENTATIVE"

    def __init__(
        self,
        detail: str = (
            "No eligible sales representative: no routing rule matched and "
            "no active percentage allocation is available"
        ),
    ):
        super().__init__(detail)


class ConfigurationError(LeadRouterError):
    """Raised when routing configuration is unreadable or inconsistent.

    Covers an unreachable rule store, negative allocation percentages and
    allocations whose representative disappeared mid-decision.
    """

    code = "CONFIGURATION_ERROR"

    def __init__(self, detail: str = "Routing configuration is invalid"):
        super().__init__(detail)


class ExternalLookupError(LeadRouterError):
    """Raised when the CRM lead lookup is unreachable or misbehaves.

    Never surfaced to API clients: the routing engine downgrades the
    source stage and continues with the city stage.
    """

    code = "LEAD_LOOKUP_ERROR"

    def __init__(self, detail: str = "Lead lookup service unavailable"):
        super().__init__(detail)


class LoggingFailure(LeadRouterError):
    """Raised when a routing decision could not be written to the audit log.

    Treated as a warning by the routing engine, never as a routing failure.
    """

    code = "AUDIT_LOG_FAILURE"

    def __init__(self, detail: str = "Failed to record routing decision"):
        super().__init__(detail)

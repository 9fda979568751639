"""Prometheus metrics for application volume, review outcomes and quotes"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
submission_counter = Counter(
    "credit_application_submitted_total",
    "Credit applications submitted",
)

transition_counter = Counter(
    "credit_application_transition_total",
    "Review and cancellation actions",
    ["action", "outcome"],  # outcome: applied | forbidden | illegal | conflict | invalid | not_found
)

transition_conflict_counter = Counter(
    "credit_application_transition_conflicts_total",
    "Transitions that lost a concurrent status update",
)

approved_amount_histogram = Histogram(
    "credit_approved_amount",
    "Approved loan amounts",
    buckets=[50_000, 100_000, 200_000, 300_000, 500_000, 750_000, 1_000_000],
)

# Simulator metrics
quote_counter = Counter(
    "credit_quote_total",
    "Quotes computed",
    ["computable"],  # true | false
)

# Listing API metrics
listing_fetch_failures_counter = Counter(
    "listing_fetch_failures_total",
    "Failed listing API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transition(action: str, outcome: str, approved_amount: float | None = None) -> None:
    """Record a transition attempt; approvals also feed the amount distribution"""
    transition_counter.labels(action=action, outcome=outcome).inc()
    if outcome == "conflict":
        transition_conflict_counter.inc()
    if approved_amount is not None:
        approved_amount_histogram.observe(approved_amount)


def record_quote(computable: bool) -> None:
    quote_counter.labels(computable=str(computable).lower()).inc()

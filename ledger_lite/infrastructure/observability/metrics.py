"""Prometheus metrics for cycle repairs, statement settlement and cache invalidation"""

from prometheus_client import Counter, Histogram

# Billing cycle metrics
cycles_started_counter = Counter(
    "ledger_cycles_started_total",
    "Billing cycles opened",
)

cycle_repairs_counter = Counter(
    "ledger_cycle_repairs_total",
    "Duplicate open cycles closed on read",
)

# Statement metrics
statement_payments_counter = Counter(
    "ledger_statement_payments_total",
    "Card statement payments recorded",
)

settled_charges_counter = Counter(
    "ledger_settled_charges_total",
    "Card charges marked paid by statement payments",
)

unapplied_payment_cents_counter = Counter(
    "ledger_unapplied_payment_cents_total",
    "Payment cents left over after FIFO settlement",
)

# Installment metrics
installment_groups_counter = Counter(
    "ledger_installment_groups_total",
    "Installment purchases written",
    ["operation"],  # create | update
)

# Period key migration
period_keys_migrated_counter = Counter(
    "ledger_period_keys_migrated_total",
    "Legacy recurring charges given a (month, year) key",
)

# Cache invalidation webhook metrics
invalidation_latency_histogram = Histogram(
    "invalidation_latency_seconds",
    "Cache invalidation webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

invalidation_failure_counter = Counter(
    "invalidation_failures_total",
    "Failed cache invalidation deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_statement_payment(settled_count: int, unapplied_cents: int) -> None:
    """Record one statement payment and how much of it was applied"""
    statement_payments_counter.inc()
    settled_charges_counter.inc(settled_count)
    if unapplied_cents > 0:
        unapplied_payment_cents_counter.inc(unapplied_cents)

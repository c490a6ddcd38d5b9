"""Prometheus metrics for monitoring payments, ledger drift and request latency"""

from prometheus_client import Counter, Histogram

# Payment metrics
payment_counter = Counter(
    "debt_ledger_payment_total",
    "Installment payment attempts by outcome",
    ["outcome"],  # succeeded | replayed | insufficient_funds | rejected | store_failure | partial_failure
)

payment_amount_counter = Counter(
    "debt_ledger_payment_amount_total",
    "Sum of installment amounts paid, in smallest currency units",
)

# Reconciliation metrics
reconciliation_issue_counter = Counter(
    "debt_ledger_reconciliation_issues_total",
    "Ledger drift found by reconciliation",
    ["kind"],  # counter_behind | duplicate_payment | orphan_payment | counter_overflow
)

reconciliation_repair_counter = Counter(
    "debt_ledger_reconciliation_repairs_total",
    "Debt counters corrected by reconciliation",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(outcome: str, amount: int = 0) -> None:
    """Record payment outcome; amount only counts when money moved"""
    payment_counter.labels(outcome=outcome).inc()
    if outcome == "succeeded":
        payment_amount_counter.inc(amount)


def record_reconciliation(issue_kinds: list, repaired: int) -> None:
    """Record drift by kind and the number of repaired counters"""
    for kind in issue_kinds:
        reconciliation_issue_counter.labels(kind=kind).inc()
    if repaired:
        reconciliation_repair_counter.inc(repaired)

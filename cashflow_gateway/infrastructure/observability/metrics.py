"""Prometheus metrics for monitoring projection outcomes and request latency"""

from prometheus_client import Counter, Histogram

from cashflow_gateway.domain.models import CashflowProjection

# Projection metrics
projection_counter = Counter(
    "cashflow_projection_total",
    "Total cashflow projections computed",
    ["outcome"],  # safe | at_risk | overdrawn | invalid
)

danger_days_histogram = Histogram(
    "cashflow_danger_days",
    "Days with a negative balance per projection",
    ["scenario"],  # optimistic | pessimistic
    buckets=[0, 1, 3, 7, 14, 30, 90],
)

validation_error_counter = Counter(
    "cashflow_validation_errors_total",
    "Projection requests rejected by input validation",
    ["code"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_projection(projection: CashflowProjection) -> None:
    """Record how many projections stay positive under each scenario"""
    optimistic = projection.optimistic.danger_day_count
    pessimistic = projection.pessimistic.danger_day_count

    # overdrawn: negative even if every income arrives
    # at_risk:   negative only when uncertain income falls through
    if optimistic > 0:
        outcome = "overdrawn"
    elif pessimistic > 0:
        outcome = "at_risk"
    else:
        outcome = "safe"

    projection_counter.labels(outcome=outcome).inc()
    danger_days_histogram.labels(scenario="optimistic").observe(optimistic)
    danger_days_histogram.labels(scenario="pessimistic").observe(pessimistic)


def record_validation_error(code: str) -> None:
    projection_counter.labels(outcome="invalid").inc()
    validation_error_counter.labels(code=code).inc()

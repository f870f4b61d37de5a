"""Prometheus metrics for recurring generation, insights and HTTP latency"""

from typing import Iterable
from prometheus_client import Counter, Histogram
from open_planner.domain.models import GenerateResult, Insight

# Recurring generation metrics
recurring_generation_counter = Counter(
    "open_planner_recurring_items_total",
    "Recurring items processed by generation runs",
    ["outcome"],  # generated | skipped | failed
)

recurring_generation_runs_counter = Counter(
    "open_planner_recurring_generation_runs_total",
    "Recurring generation runs",
)

# Insights metrics
insights_counter = Counter(
    "open_planner_insights_total",
    "Insights emitted",
    ["type", "severity"],
)

insights_degraded_counter = Counter(
    "open_planner_insights_previous_month_unavailable_total",
    "Insight requests computed without previous month data",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_generation(result: GenerateResult) -> None:
    """Record per-item outcomes of one generation run"""
    recurring_generation_runs_counter.inc()
    recurring_generation_counter.labels(outcome="generated").inc(result.generated_count)
    recurring_generation_counter.labels(outcome="skipped").inc(result.skipped_count)
    recurring_generation_counter.labels(outcome="failed").inc(result.failed_count)


def record_insights(insights: Iterable[Insight]) -> None:
    for insight in insights:
        insights_counter.labels(type=insight.type, severity=insight.severity).inc()

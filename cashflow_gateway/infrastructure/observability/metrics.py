"""Prometheus metrics for dashboard usage, alert volume and collection activity"""

from typing import List
from prometheus_client import Counter, Histogram

from cashflow_gateway.domain.models import Alert

# Dashboard metrics
dashboard_request_counter = Counter(
    "cashflow_dashboard_requests_total",
    "Dashboard operations served",
    ["operation"],  # summary | forecast | alerts | recent_invoices | top_clients
)

alert_counter = Counter(
    "cashflow_alerts_emitted_total",
    "Alerts returned to callers",
    ["action"],  # send_reminders | view_forecast | view_clients
)

forecast_points_histogram = Histogram(
    "cashflow_forecast_points",
    "Emitted points per forecast",
    buckets=[1, 2, 5, 10, 20, 40, 61],
)

# Record store metrics
snapshot_fetch_failures_counter = Counter(
    "snapshot_fetch_failures_total",
    "Failed record store reads",
)

# Collections metrics
payments_recorded_counter = Counter(
    "cashflow_payments_recorded_total",
    "Invoice payments recorded",
)

reminders_sent_counter = Counter(
    "cashflow_reminders_sent_total",
    "Payment reminders recorded",
)

records_written_counter = Counter(
    "cashflow_records_written_total",
    "Invoice and client records written through the API",
    ["entity", "action"],  # invoice | client x created | updated | deleted
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_dashboard_request(operation: str) -> None:
    dashboard_request_counter.labels(operation=operation).inc()


def record_alerts(alerts: List[Alert]) -> None:
    """Count emitted alerts by the action they point to"""
    for alert in alerts:
        alert_counter.labels(action=alert.action.value).inc()

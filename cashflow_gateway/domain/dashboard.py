"""Dashboard operations - fetch a user's snapshot and reduce it with the pure engines"""

from datetime import date
from typing import List, Protocol, Sequence

from cashflow_gateway.domain.alerts import DEFAULT_LOOKAHEAD_DAYS, SLOW_PAYER_THRESHOLD_DAYS, build_alerts
from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.forecast import DEFAULT_HORIZON_DAYS, MAX_HORIZON_DAYS, generate_forecast
from cashflow_gateway.domain.kpis import calculate_summary
from cashflow_gateway.domain.models import (
    Alert,
    Client,
    DashboardSummary,
    ForecastPoint,
    Invoice,
    InvoiceStatus,
    PaymentHistoryEntry,
    RankedClient,
)
from cashflow_gateway.domain.ranking import DEFAULT_LIMIT, rank_clients


class InvoiceSnapshotSource(Protocol):
    """Read-only record store queries the dashboard depends on"""

    def get_invoices(self, user_id: str) -> List[Invoice]: ...

    def get_outstanding_invoices(self, user_id: str) -> List[Invoice]: ...

    def get_outstanding_invoices_for_clients(self, user_id: str, client_ids: Sequence[str]) -> List[Invoice]: ...

    def get_recent_invoices(self, user_id: str, limit: int) -> List[Invoice]: ...

    def get_payment_history(self, invoice_ids: Sequence[str]) -> List[PaymentHistoryEntry]: ...

    def get_clients(self, user_id: str) -> List[Client]: ...

    def get_top_clients(self, user_id: str, limit: int) -> List[Client]: ...


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}")


class DashboardService:
    """
    Transport-agnostic dashboard operations.

    Every call re-reads the snapshot; nothing is cached between calls. Store
    failures propagate unchanged from the accessor.
    """

    def __init__(
        self,
        source: InvoiceSnapshotSource,
        alert_lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
        slow_payer_threshold_days: int = SLOW_PAYER_THRESHOLD_DAYS,
        max_horizon_days: int = MAX_HORIZON_DAYS,
    ):
        self.source = source
        self.alert_lookahead_days = alert_lookahead_days
        self.slow_payer_threshold_days = slow_payer_threshold_days
        self.max_horizon_days = max_horizon_days

    def get_summary(self, user_id: str, today: date) -> DashboardSummary:
        invoices = self.source.get_invoices(user_id)
        paid_ids = [inv.id for inv in invoices if inv.status == InvoiceStatus.PAID and inv.actual_payment_date]
        history = self.source.get_payment_history(paid_ids)
        return calculate_summary(invoices, history, today)

    def get_forecast(self, user_id: str, today: date, horizon_days: int = DEFAULT_HORIZON_DAYS) -> List[ForecastPoint]:
        _require_non_negative("horizon_days", horizon_days)
        if horizon_days > self.max_horizon_days:
            raise ValidationError(f"horizon_days must be <= {self.max_horizon_days}, got {horizon_days}")
        invoices = self.source.get_outstanding_invoices(user_id)
        return generate_forecast(invoices, today, horizon_days, self.max_horizon_days)

    def get_alerts(self, user_id: str, today: date) -> List[Alert]:
        invoices = self.source.get_outstanding_invoices(user_id)
        clients = self.source.get_clients(user_id)
        lookahead = generate_forecast(invoices, today, self.alert_lookahead_days)
        return build_alerts(invoices, lookahead, clients, today, self.slow_payer_threshold_days)

    def get_recent_invoices(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[Invoice]:
        _require_non_negative("limit", limit)
        if limit == 0:
            return []
        return self.source.get_recent_invoices(user_id, limit)

    def get_top_clients(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[RankedClient]:
        _require_non_negative("limit", limit)
        if limit == 0:
            return []
        clients = self.source.get_top_clients(user_id, limit)
        outstanding = self.source.get_outstanding_invoices_for_clients(user_id, [c.id for c in clients])
        return rank_clients(clients, outstanding, limit)

"""Alert engine - turns KPIs, forecast and client behaviour into actionable warnings"""

from datetime import date
from typing import List, Optional

from cashflow_gateway.domain.kpis import is_overdue
from cashflow_gateway.domain.models import (
    Alert,
    AlertAction,
    AlertPriority,
    AlertType,
    Client,
    ForecastPoint,
    Invoice,
    RelatedInvoice,
)
from cashflow_gateway.utils.money import sum_amounts, to_money

DEFAULT_LOOKAHEAD_DAYS = 30
SLOW_PAYER_THRESHOLD_DAYS = 45
MAX_RELATED_INVOICES = 3
MAX_SLOW_PAYERS_REPORTED = 3


def overdue_alert(invoices: List[Invoice], today: date) -> Optional[Alert]:
    """One urgent alert summarising every overdue invoice, oldest first"""
    overdue = sorted((inv for inv in invoices if is_overdue(inv, today)), key=lambda inv: inv.due_date)
    if not overdue:
        return None

    total = to_money(sum_amounts(inv.amount for inv in overdue))
    return Alert(
        type=AlertType.URGENT,
        priority=AlertPriority.HIGH,
        title=f"{len(overdue)} overdue invoices",
        message=f"Total of ${total} is overdue",
        action=AlertAction.SEND_REMINDERS,
        action_label="Send Payment Reminders",
        related_invoices=[
            RelatedInvoice(
                id=inv.id,
                client=inv.client_name,
                amount=to_money(inv.amount),
                due_date=inv.due_date,
            )
            for inv in overdue[:MAX_RELATED_INVOICES]
        ],
    )


def cash_shortfall_alert(forecast: List[ForecastPoint]) -> Optional[Alert]:
    """Warn when the projected balance dips below zero at any forecast point"""
    negative_days = sum(1 for point in forecast if point.projected_balance < 0)
    if negative_days == 0:
        return None

    return Alert(
        type=AlertType.WARNING,
        priority=AlertPriority.HIGH,
        title="Cash flow warning",
        message=f"Potential cash shortfall detected in {negative_days} days",
        action=AlertAction.VIEW_FORECAST,
        action_label="View Cash Flow Forecast",
    )


def slow_payer_alert(
    clients: List[Client],
    threshold_days: int = SLOW_PAYER_THRESHOLD_DAYS,
) -> Optional[Alert]:
    """Flag clients whose average payment time exceeds the threshold"""
    slow = sorted(
        (c for c in clients if c.average_payment_days > threshold_days),
        key=lambda c: c.average_payment_days,
        reverse=True,
    )
    if not slow:
        return None

    worst_days = max(c.average_payment_days for c in slow[:MAX_SLOW_PAYERS_REPORTED])
    return Alert(
        type=AlertType.INFO,
        priority=AlertPriority.MEDIUM,
        title="Slow-paying clients detected",
        message=f"{len(slow)} clients averaging {worst_days}+ days to pay",
        action=AlertAction.VIEW_CLIENTS,
        action_label="Review Client Payment Terms",
    )


def build_alerts(
    invoices: List[Invoice],
    forecast: List[ForecastPoint],
    clients: List[Client],
    today: date,
    slow_payer_threshold_days: int = SLOW_PAYER_THRESHOLD_DAYS,
) -> List[Alert]:
    """
    Evaluate alert rules in fixed order: overdue, cash shortfall, slow payers.

    Rules are independent; each contributes at most one alert.
    """
    candidates = [
        overdue_alert(invoices, today),
        cash_shortfall_alert(forecast),
        slow_payer_alert(clients, slow_payer_threshold_days),
    ]
    return [alert for alert in candidates if alert is not None]

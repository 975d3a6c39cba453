"""Dashboard KPI calculator - outstanding, overdue, expected and realised revenue"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from cashflow_gateway.domain.models import (
    DashboardSummary,
    Invoice,
    InvoiceStatus,
    Kpi,
    PaymentHistoryEntry,
)
from cashflow_gateway.utils.date_utils import month_bounds, next_month_bounds
from cashflow_gateway.utils.money import sum_amounts, to_money

DEFAULT_AVG_PAYMENT_DAYS = 30
EXPECTED_WINDOW_DAYS = 7


def _kpi(invoices: List[Invoice]) -> Kpi:
    return Kpi(amount=to_money(sum_amounts(inv.amount for inv in invoices)), count=len(invoices))


def is_overdue(invoice: Invoice, today: date) -> bool:
    """Outstanding invoice whose due date has passed (date-only comparison)"""
    return invoice.is_outstanding and invoice.due_date < today


def average_payment_days(
    invoices: Iterable[Invoice],
    payment_history: Iterable[PaymentHistoryEntry],
) -> int:
    """
    Mean days-to-payment across history rows of paid invoices.

    Rows without a recorded day count contribute 0 but still count toward the
    mean. Falls back to 30 days when nothing has been paid yet.
    """
    paid_ids = {
        inv.id
        for inv in invoices
        if inv.status == InvoiceStatus.PAID and inv.actual_payment_date is not None
    }
    if not paid_ids:
        return DEFAULT_AVG_PAYMENT_DAYS

    days = [entry.days_to_payment or 0 for entry in payment_history if entry.invoice_id in paid_ids]
    if not days:
        return DEFAULT_AVG_PAYMENT_DAYS

    mean = Decimal(sum(days)) / Decimal(len(days))
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_summary(
    invoices: List[Invoice],
    payment_history: List[PaymentHistoryEntry],
    today: date,
) -> DashboardSummary:
    """
    Reduce a user's invoices into the dashboard KPI bundle as of `today`.

    Definitions:
    - Outstanding: pending or overdue status, regardless of due date
    - Overdue: outstanding with due date before today
    - Expected this week: outstanding, predicted payment in [today, today + 7]
    - This month revenue: paid, actual payment inside the current calendar month
    - Next month forecast: outstanding, predicted payment inside next calendar month
    """
    outstanding = [inv for inv in invoices if inv.is_outstanding]
    overdue = [inv for inv in outstanding if is_overdue(inv, today)]

    week_end = today + timedelta(days=EXPECTED_WINDOW_DAYS)
    expected_this_week = [
        inv
        for inv in outstanding
        if inv.predicted_payment_date is not None and today <= inv.predicted_payment_date <= week_end
    ]

    month_start, month_end = month_bounds(today)
    paid_this_month = [
        inv
        for inv in invoices
        if inv.status == InvoiceStatus.PAID
        and inv.actual_payment_date is not None
        and month_start <= inv.actual_payment_date <= month_end
    ]

    next_start, next_end = next_month_bounds(today)
    next_month = [
        inv
        for inv in outstanding
        if inv.predicted_payment_date is not None and next_start <= inv.predicted_payment_date <= next_end
    ]

    return DashboardSummary(
        outstanding=_kpi(outstanding),
        overdue=_kpi(overdue),
        expected_this_week=_kpi(expected_this_week),
        this_month_revenue=_kpi(paid_this_month),
        next_month_forecast=_kpi(next_month),
        avg_payment_days=average_payment_days(invoices, payment_history),
    )

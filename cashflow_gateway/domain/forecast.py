"""Cash-flow forecast generation from predicted invoice payment dates"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List

from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.models import ForecastPoint, Invoice
from cashflow_gateway.utils.date_utils import generate_date_range
from cashflow_gateway.utils.money import to_money

DEFAULT_HORIZON_DAYS = 60
MAX_HORIZON_DAYS = 3650


def _expected_expenses(day: date) -> Decimal:
    # Expenses are not modelled yet
    return Decimal("0")


def generate_forecast(
    invoices: List[Invoice],
    today: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    max_horizon_days: int = MAX_HORIZON_DAYS,
) -> List[ForecastPoint]:
    """
    Build a sparse daily cash-flow projection for days 0..horizon_days (inclusive).

    Requirements:
    - Income on a day = sum of outstanding invoices predicted to be paid that day
    - Invoices without a predicted payment date never contribute
    - Day 0 is always emitted; other days only when income or expenses are non-zero
    - Running balance starts at 0 and only advances at emitted points

    Example:
        today=Mar 1, one $500 invoice predicted Mar 4, horizon 5
        → [Mar 1: income 0, balance 0], [Mar 4: income 500, balance 500]
    """
    if horizon_days < 0:
        raise ValidationError(f"horizon_days must be >= 0, got {horizon_days}")
    if horizon_days > max_horizon_days:
        raise ValidationError(f"horizon_days must be <= {max_horizon_days}, got {horizon_days}")

    # Bucket predicted income by calendar date
    income_by_date: Dict[date, Decimal] = defaultdict(Decimal)
    for inv in invoices:
        if inv.is_outstanding and inv.predicted_payment_date is not None:
            income_by_date[inv.predicted_payment_date] += inv.amount

    points = []
    running_balance = Decimal("0")
    try:
        horizon_end = today + timedelta(days=horizon_days)
    except OverflowError:
        raise ValidationError(f"Horizon of {horizon_days} days from {today.isoformat()} is past the last representable date")

    for day in generate_date_range(today, horizon_end):
        income = income_by_date.get(day, Decimal("0"))
        expenses = _expected_expenses(day)

        if day != today and income <= 0 and expenses <= 0:
            continue

        net = income - expenses
        running_balance += net
        points.append(
            ForecastPoint(
                date=day,
                expected_income=to_money(income),
                expected_expenses=to_money(expenses),
                net_cash_flow=to_money(net),
                projected_balance=to_money(running_balance),
            )
        )

    return points

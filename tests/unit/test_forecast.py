"""Unit tests for cash-flow forecast generation"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.forecast import MAX_HORIZON_DAYS, generate_forecast
from cashflow_gateway.domain.models import InvoiceStatus


def test_forecast_sparse_output(make_invoice, today):
    """Test single prediction at day 3: day 0 and day 3 emitted, days 1-2 absent"""
    invoices = [make_invoice(amount="500", predicted_payment_date=today + timedelta(days=3))]

    points = generate_forecast(invoices, today)

    assert [p.date for p in points] == [today, today + timedelta(days=3)]
    assert points[0].expected_income == Decimal("0.00")
    assert points[0].projected_balance == Decimal("0.00")
    assert points[1].expected_income == Decimal("500.00")
    assert points[1].projected_balance == Decimal("500.00")


def test_forecast_horizon_zero(make_invoice, today):
    """Test horizon 0 yields exactly day 0 even without income"""
    invoices = [make_invoice(predicted_payment_date=today + timedelta(days=1))]

    points = generate_forecast(invoices, today, horizon_days=0)

    assert len(points) == 1
    assert points[0].date == today
    assert points[0].expected_income == Decimal("0.00")


def test_forecast_includes_income_on_day_zero(make_invoice, today):
    """Test payments predicted for today land on day 0"""
    invoices = [make_invoice(amount="250", predicted_payment_date=today)]

    points = generate_forecast(invoices, today, horizon_days=0)

    assert points[0].expected_income == Decimal("250.00")
    assert points[0].projected_balance == Decimal("250.00")


def test_forecast_horizon_is_inclusive(make_invoice, today):
    """Test prediction exactly on the last horizon day is included, one past is not"""
    invoices = [
        make_invoice(amount="100", predicted_payment_date=today + timedelta(days=10)),
        make_invoice(amount="200", predicted_payment_date=today + timedelta(days=11)),
    ]

    points = generate_forecast(invoices, today, horizon_days=10)

    assert points[-1].date == today + timedelta(days=10)
    assert points[-1].projected_balance == Decimal("100.00")


def test_forecast_same_day_invoices_are_summed(make_invoice, today):
    """Test multiple invoices predicted for one day collapse into one point"""
    day = today + timedelta(days=5)
    invoices = [
        make_invoice(amount="100.10", predicted_payment_date=day),
        make_invoice(amount="200.20", predicted_payment_date=day),
    ]

    points = generate_forecast(invoices, today)

    assert len(points) == 2
    assert points[1].expected_income == Decimal("300.30")
    assert points[1].net_cash_flow == Decimal("300.30")


def test_forecast_ignores_non_outstanding_and_unpredicted(make_invoice, today):
    """Test paid, draft, cancelled and unpredicted invoices never contribute"""
    day = today + timedelta(days=2)
    invoices = [
        make_invoice(amount="1", predicted_payment_date=day, status=InvoiceStatus.PAID, actual_payment_date=today),
        make_invoice(amount="2", predicted_payment_date=day, status=InvoiceStatus.DRAFT),
        make_invoice(amount="4", predicted_payment_date=day, status=InvoiceStatus.CANCELLED),
        make_invoice(amount="8"),
        make_invoice(amount="16", predicted_payment_date=today - timedelta(days=1)),  # in the past
    ]

    points = generate_forecast(invoices, today)

    assert len(points) == 1
    assert points[0].projected_balance == Decimal("0.00")


def test_forecast_running_balance_and_ordering(make_invoice, today):
    """Test dates ascend and final balance equals total emitted income"""
    invoices = [
        make_invoice(amount="300", predicted_payment_date=today + timedelta(days=40)),
        make_invoice(amount="100", predicted_payment_date=today + timedelta(days=2)),
        make_invoice(amount="200", predicted_payment_date=today + timedelta(days=15), status=InvoiceStatus.OVERDUE),
    ]

    points = generate_forecast(invoices, today)

    dates = [p.date for p in points]
    assert dates == sorted(dates)
    assert [p.projected_balance for p in points] == [
        Decimal("0.00"),
        Decimal("100.00"),
        Decimal("300.00"),
        Decimal("600.00"),
    ]
    assert points[-1].projected_balance == sum((p.expected_income for p in points), Decimal("0"))
    assert all(p.expected_expenses == Decimal("0.00") for p in points)


def test_forecast_negative_horizon_rejected(today):
    """Test negative horizon is a validation error"""
    with pytest.raises(ValidationError):
        generate_forecast([], today, horizon_days=-1)


def test_forecast_is_idempotent(make_invoice, today):
    """Test identical input yields identical output"""
    invoices = [make_invoice(predicted_payment_date=today + timedelta(days=4))]

    assert generate_forecast(invoices, today, 30) == generate_forecast(invoices, today, 30)


def test_forecast_horizon_upper_bound(make_invoice, today):
    """Test the maximum horizon is accepted and one day more is rejected"""
    invoices = [make_invoice(amount="75", predicted_payment_date=today + timedelta(days=MAX_HORIZON_DAYS))]

    points = generate_forecast(invoices, today, horizon_days=MAX_HORIZON_DAYS)
    assert points[-1].projected_balance == Decimal("75.00")

    with pytest.raises(ValidationError):
        generate_forecast(invoices, today, horizon_days=MAX_HORIZON_DAYS + 1)


def test_forecast_huge_horizon_rejected(make_invoice, today):
    """Test a horizon far past the calendar range is a validation error"""
    with pytest.raises(ValidationError):
        generate_forecast([make_invoice()], today, horizon_days=3_000_000)


def test_forecast_horizon_past_last_date_rejected():
    """Test a horizon running past date.max is a validation error"""
    with pytest.raises(ValidationError):
        generate_forecast([], date(9999, 12, 1), horizon_days=60)

"""Overdue tracking and payment-reminder eligibility"""

from datetime import date

from cashflow_gateway.domain.models import Invoice, InvoiceStatus

DEFAULT_REMINDER_INTERVAL_DAYS = 7

# Invoices that never receive reminders
_NO_REMINDER_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED, InvoiceStatus.DRAFT})


def days_overdue(invoice: Invoice, today: date) -> int:
    """Whole days past the due date; 0 for paid or not-yet-due invoices"""
    if invoice.status == InvoiceStatus.PAID:
        return 0
    return max((today - invoice.due_date).days, 0)


def should_send_reminder(
    invoice: Invoice,
    today: date,
    interval_days: int = DEFAULT_REMINDER_INTERVAL_DAYS,
) -> bool:
    """
    Decide whether an invoice is due for a payment reminder.

    An overdue invoice qualifies when no reminder was sent yet, or the last one
    went out at least `interval_days` ago.
    """
    if invoice.status in _NO_REMINDER_STATUSES:
        return False

    if days_overdue(invoice, today) == 0:
        return False

    if invoice.last_reminder_date is None:
        return True

    return (today - invoice.last_reminder_date).days >= interval_days

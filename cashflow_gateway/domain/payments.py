"""Payment recording rules"""

from datetime import date

from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.models import InvoiceStatus

# Statuses that cannot take a payment; drafts have not been issued yet
_CLOSED_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED, InvoiceStatus.DRAFT})


def ensure_payable(status: InvoiceStatus) -> None:
    """Reject a second payment, or a payment against a draft or cancelled invoice"""
    if status in _CLOSED_STATUSES:
        raise ValidationError(f"Invoice is {status.value} and cannot take a payment")


def days_to_payment(issue_date: date, paid_on: date) -> int:
    """
    Whole days from invoice issue to payment.

    Raises:
        ValidationError: If the payment predates the invoice
    """
    if paid_on < issue_date:
        raise ValidationError(
            f"Payment date {paid_on.isoformat()} is before issue date {issue_date.isoformat()}"
        )
    return (paid_on - issue_date).days

"""Rules for creating and editing invoices"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.models import Invoice, InvoiceStatus

# Fields an edit may change but never clear
_NON_NULLABLE_FIELDS = ("amount", "issue_date", "due_date", "status")


def validate_invoice_terms(amount: Optional[Decimal], issue_date: date, due_date: date) -> None:
    """
    Check the amount and payment terms of an invoice.

    Raises:
        ValidationError: If the amount is not positive or the invoice falls due before it was issued
    """
    if amount is None or amount <= 0:
        raise ValidationError(f"amount must be > 0, got {amount}")
    if due_date < issue_date:
        raise ValidationError(
            f"Due date {due_date.isoformat()} is before issue date {issue_date.isoformat()}"
        )


def ensure_writable_status(status: InvoiceStatus) -> None:
    """Paid status is only reachable by recording a payment"""
    if status == InvoiceStatus.PAID:
        raise ValidationError("Record a payment to mark an invoice paid")


def validate_invoice_changes(current: Invoice, changes: Mapping[str, Any]) -> None:
    """
    Validate a partial edit against the stored invoice.

    Example:
        current due Mar 30, issued Mar 1; changes={"due_date": Feb 20}
        → ValidationError (due before issue)
    """
    for name in _NON_NULLABLE_FIELDS:
        if name in changes and changes[name] is None:
            raise ValidationError(f"{name} cannot be null")

    if "status" in changes:
        if current.status == InvoiceStatus.PAID:
            raise ValidationError("Status of a paid invoice cannot be changed")
        ensure_writable_status(changes["status"])

    validate_invoice_terms(
        changes.get("amount", current.amount),
        changes.get("issue_date", current.issue_date),
        changes.get("due_date", current.due_date),
    )

"""Rules for editing client records"""

from typing import Any, Mapping

from cashflow_gateway.domain.exceptions import ValidationError

# Client fields that always carry a value
_NON_NULLABLE_FIELDS = ("name", "total_invoiced", "total_paid", "invoice_count", "is_active")


def validate_client_changes(changes: Mapping[str, Any]) -> None:
    """Reject an edit that clears a required client field"""
    for name in _NON_NULLABLE_FIELDS:
        if name in changes and changes[name] is None:
            raise ValidationError(f"{name} cannot be null")

"""GET /v1/payment-history - payments recorded against the user's invoices"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from cashflow_gateway.api.dependencies import get_request_id, parse_record_id
from cashflow_gateway.api.errors import to_http_exception
from cashflow_gateway.api.v1.schemas import PaymentHistoryListResponse, PaymentHistorySchema
from cashflow_gateway.domain.exceptions import DomainException
from cashflow_gateway.infrastructure.database.repositories import PaymentHistoryRepository
from cashflow_gateway.infrastructure.database.session import get_db

router = APIRouter(prefix="/payment-history")


@router.get("", response_model=PaymentHistoryListResponse)
def list_payments(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    invoice_id: Optional[str] = Query(None, description="Only payments for this invoice"),
    db: Session = Depends(get_db),
):
    """
    Payment history for a user, newest first.

    Returns:
        Every payment on the user's invoices, or on a single invoice when filtered
    """
    invoice_uuid = parse_record_id(invoice_id, "invoice") if invoice_id else None

    try:
        entries = PaymentHistoryRepository(db).list_entries(user_id, invoice_uuid)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "list_payments") from e

    return PaymentHistoryListResponse(
        count=len(entries),
        payments=[PaymentHistorySchema.model_validate(entry) for entry in entries],
    )


@router.get("/{payment_id}", response_model=PaymentHistorySchema)
def get_payment(
    payment_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    payment_uuid = parse_record_id(payment_id, "payment")

    try:
        entry = PaymentHistoryRepository(db).get_entry(user_id, payment_uuid)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "get_payment") from e

    return PaymentHistorySchema.model_validate(entry)

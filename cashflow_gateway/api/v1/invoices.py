"""Invoice endpoints - records, overdue list, reminders and payments"""

import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from cashflow_gateway.api.dependencies import get_accessor, get_request_id, get_today, parse_record_id
from cashflow_gateway.api.errors import to_http_exception
from cashflow_gateway.api.v1.schemas import (
    InvoiceCreateRequest,
    InvoiceDetailResponse,
    InvoiceListResponse,
    InvoiceSchema,
    InvoiceUpdateRequest,
    OverdueInvoiceListResponse,
    OverdueInvoiceSchema,
    PaymentHistorySchema,
    PaymentRequest,
    PaymentResponse,
    ReminderResponse,
)
from cashflow_gateway.config import settings
from cashflow_gateway.domain.exceptions import DomainException
from cashflow_gateway.domain.invoices import ensure_writable_status, validate_invoice_changes, validate_invoice_terms
from cashflow_gateway.domain.kpis import is_overdue
from cashflow_gateway.domain.models import InvoiceStatus
from cashflow_gateway.domain.payments import days_to_payment, ensure_payable
from cashflow_gateway.domain.reminders import days_overdue, should_send_reminder
from cashflow_gateway.infrastructure.database.repositories import (
    ClientRepository,
    InvoiceRecordAccessor,
    InvoiceRepository,
    PaymentHistoryRepository,
    commit_changes,
    to_domain_invoice,
)
from cashflow_gateway.infrastructure.database.session import get_db
from cashflow_gateway.infrastructure.observability.metrics import (
    payments_recorded_counter,
    records_written_counter,
    reminders_sent_counter,
)

router = APIRouter(prefix="/invoices")


@router.get("", response_model=InvoiceListResponse)
def list_invoices(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    status: Optional[InvoiceStatus] = Query(None, description="Only invoices in this status"),
    client_id: Optional[str] = Query(None, description="Only invoices billed to this client"),
    accessor: InvoiceRecordAccessor = Depends(get_accessor),
):
    """All of the user's invoices, newest first"""
    client_filter = str(parse_record_id(client_id, "client")) if client_id else None

    try:
        invoices = accessor.get_invoices(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "list_invoices") from e

    if status is not None:
        invoices = [inv for inv in invoices if inv.status == status]
    if client_filter is not None:
        invoices = [inv for inv in invoices if inv.client_id == client_filter]
    return InvoiceListResponse(count=len(invoices), invoices=[InvoiceSchema.model_validate(inv) for inv in invoices])


@router.post("", response_model=InvoiceSchema, status_code=201)
def create_invoice(
    request_body: InvoiceCreateRequest,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Create an invoice for the user.

    The client, when given, must belong to the same user. New invoices are
    pending unless another status is supplied; paid is never accepted here.
    """
    request_id = get_request_id(request)
    fields = request_body.model_dump(exclude_none=True)

    try:
        ensure_writable_status(fields.get("status", InvoiceStatus.PENDING))
        validate_invoice_terms(fields["amount"], fields["issue_date"], fields["due_date"])
        if "client_id" in fields:
            ClientRepository(db).get_client(user_id, fields["client_id"])

        record = InvoiceRepository(db).create_invoice(user_id, fields)
        invoice = to_domain_invoice(record)
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "create_invoice") from e

    records_written_counter.labels(entity="invoice", action="created").inc()
    logging.info(
        "Invoice created",
        extra={"request_id": request_id, "user_id": user_id, "invoice_id": invoice.id, "step": "invoice_created"},
    )
    return InvoiceSchema.model_validate(invoice)


@router.get("/overdue", response_model=OverdueInvoiceListResponse)
def get_overdue_invoices(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    accessor: InvoiceRecordAccessor = Depends(get_accessor),
):
    """Outstanding invoices past their due date, oldest first"""
    try:
        invoices = accessor.get_outstanding_invoices(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "overdue_invoices") from e

    overdue = sorted((inv for inv in invoices if is_overdue(inv, today)), key=lambda inv: inv.due_date)
    items = [
        OverdueInvoiceSchema(
            **InvoiceSchema.model_validate(inv).model_dump(),
            days_overdue=days_overdue(inv, today),
        )
        for inv in overdue
    ]
    return OverdueInvoiceListResponse(count=len(items), invoices=items)


@router.get("/reminders-due", response_model=InvoiceListResponse)
def get_invoices_needing_reminders(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    accessor: InvoiceRecordAccessor = Depends(get_accessor),
):
    """Overdue invoices with no reminder yet, or none within the reminder interval"""
    try:
        invoices = accessor.get_invoices(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "reminders_due") from e

    due = [inv for inv in invoices if should_send_reminder(inv, today, settings.reminder_interval_days)]
    return InvoiceListResponse(count=len(due), invoices=[InvoiceSchema.model_validate(inv) for inv in due])


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
def get_invoice(
    invoice_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Single invoice with its recorded payments"""
    invoice_uuid = parse_record_id(invoice_id, "invoice")

    try:
        invoice = to_domain_invoice(InvoiceRepository(db).get_invoice(user_id, invoice_uuid))
        payments = InvoiceRecordAccessor(db).get_payment_history([invoice.id])
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "get_invoice") from e

    return InvoiceDetailResponse(
        **InvoiceSchema.model_validate(invoice).model_dump(),
        payments=[PaymentHistorySchema.model_validate(p) for p in payments],
    )


@router.put("/{invoice_id}", response_model=InvoiceSchema)
def update_invoice(
    invoice_id: str,
    request_body: InvoiceUpdateRequest,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Change the supplied fields of an invoice; payments are recorded separately"""
    request_id = get_request_id(request)
    invoice_uuid = parse_record_id(invoice_id, "invoice")
    changes = request_body.model_dump(exclude_unset=True)

    try:
        invoice_repo = InvoiceRepository(db)
        record = invoice_repo.get_invoice(user_id, invoice_uuid)
        validate_invoice_changes(to_domain_invoice(record), changes)
        if changes.get("client_id") is not None:
            ClientRepository(db).get_client(user_id, changes["client_id"])

        invoice_repo.update_invoice(record, changes)
        invoice = to_domain_invoice(record)
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "update_invoice") from e

    records_written_counter.labels(entity="invoice", action="updated").inc()
    logging.info(
        "Invoice updated",
        extra={"request_id": request_id, "user_id": user_id, "invoice_id": invoice_id, "fields": sorted(changes)},
    )
    return InvoiceSchema.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=204, response_class=Response)
def delete_invoice(
    invoice_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Delete an invoice and its payment history"""
    request_id = get_request_id(request)
    invoice_uuid = parse_record_id(invoice_id, "invoice")

    try:
        invoice_repo = InvoiceRepository(db)
        invoice_repo.delete_invoice(invoice_repo.get_invoice(user_id, invoice_uuid))
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "delete_invoice") from e

    records_written_counter.labels(entity="invoice", action="deleted").inc()
    logging.info("Invoice deleted", extra={"request_id": request_id, "user_id": user_id, "invoice_id": invoice_id})
    return Response(status_code=204)


@router.post("/{invoice_id}/reminders", response_model=ReminderResponse)
def send_reminder(
    invoice_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Record that a payment reminder went out for an invoice.

    Delivery of the reminder itself happens outside this service.
    """
    request_id = get_request_id(request)
    invoice_uuid = parse_record_id(invoice_id, "invoice")

    try:
        invoice_repo = InvoiceRepository(db)
        record = invoice_repo.get_invoice(user_id, invoice_uuid)
        invoice_repo.record_reminder(record, today)
        response = ReminderResponse(
            invoice_id=str(record.id),
            reminder_count=record.reminder_count,
            last_reminder_date=record.last_reminder_date,
        )
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "send_reminder") from e

    reminders_sent_counter.inc()
    logging.info(
        "Reminder recorded",
        extra={"request_id": request_id, "user_id": user_id, "invoice_id": invoice_id, "step": "reminder_recorded"},
    )
    return response


@router.post("/{invoice_id}/payments", response_model=PaymentResponse)
def record_payment(
    invoice_id: str,
    request_body: PaymentRequest,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    db: Session = Depends(get_db),
):
    """
    Mark an invoice paid and append a payment history row.

    Flow:
    1. Load the user's invoice
    2. Validate it can take a payment and the date is not before issue
    3. Mark paid with the actual payment date
    4. Store days-to-payment and reminder stats in payment history
    """
    request_id = get_request_id(request)
    invoice_uuid = parse_record_id(invoice_id, "invoice")
    paid_on = request_body.paid_on or today

    try:
        invoice_repo = InvoiceRepository(db)
        record = invoice_repo.get_invoice(user_id, invoice_uuid)
        ensure_payable(InvoiceStatus(record.status))
        elapsed_days = days_to_payment(record.issue_date, paid_on)

        payment_amount = request_body.payment_amount if request_body.payment_amount is not None else record.amount
        PaymentHistoryRepository(db).create_entry(
            invoice=record,
            days_to_payment=elapsed_days,
            payment_amount=payment_amount,
            payment_method=request_body.payment_method,
            notes=request_body.notes,
        )
        invoice_repo.mark_paid(record, paid_on)
        response = PaymentResponse(
            invoice_id=str(record.id),
            status=InvoiceStatus.PAID,
            actual_payment_date=paid_on,
            days_to_payment=elapsed_days,
            payment_amount=payment_amount,
        )
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "record_payment") from e

    payments_recorded_counter.inc()
    logging.info(
        "Payment recorded",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "invoice_id": invoice_id,
            "step": "payment_recorded",
            "days_to_payment": elapsed_days,
        },
    )
    return response

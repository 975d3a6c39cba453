"""Data access layer for invoices, clients and payment history"""

import uuid
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from cashflow_gateway.domain.exceptions import DependencyError, NotFoundError
from cashflow_gateway.domain.models import Client, Invoice, InvoiceStatus, PaymentHistoryEntry
from cashflow_gateway.infrastructure.database.models import ClientRecord, InvoiceRecord, PaymentHistoryRecord

OUTSTANDING_STATUS_VALUES = [InvoiceStatus.PENDING.value, InvoiceStatus.OVERDUE.value]


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Surface record-store failures as DependencyError, unchanged otherwise"""
    try:
        yield
    except SQLAlchemyError as e:
        raise DependencyError(f"Record store failure during {operation}: {e}") from e


def commit_changes(db: Session) -> None:
    """Commit the request's unit of work"""
    with _store_errors("commit"):
        db.commit()


def _apply_changes(record: Any, changes: Mapping[str, Any]) -> None:
    for name, value in changes.items():
        setattr(record, name, value.value if isinstance(value, Enum) else value)


def to_domain_invoice(row: InvoiceRecord) -> Invoice:
    return Invoice(
        id=str(row.id),
        amount=Decimal(row.amount),
        issue_date=row.issue_date,
        due_date=row.due_date,
        status=InvoiceStatus(row.status),
        client_id=str(row.client_id) if row.client_id else None,
        client_name=row.client.name if row.client else None,
        invoice_number=row.invoice_number,
        predicted_payment_date=row.predicted_payment_date,
        actual_payment_date=row.actual_payment_date,
        reminder_sent=bool(row.reminder_sent),
        reminder_count=row.reminder_count or 0,
        last_reminder_date=row.last_reminder_date,
        confidence=row.confidence,
        description=row.description,
        notes=row.notes,
        created_at=row.created_at,
    )


def to_domain_client(row: ClientRecord) -> Client:
    return Client(
        id=str(row.id),
        name=row.name,
        email=row.email,
        phone=row.phone,
        address=row.address,
        average_payment_days=row.average_payment_days if row.average_payment_days is not None else 30,
        payment_reliability=row.payment_reliability if row.payment_reliability is not None else 0.5,
        total_invoiced=Decimal(row.total_invoiced or 0),
        total_paid=Decimal(row.total_paid or 0),
        invoice_count=row.invoice_count or 0,
        is_active=row.is_active if row.is_active is not None else True,
    )


def to_domain_payment(row: PaymentHistoryRecord) -> PaymentHistoryEntry:
    return PaymentHistoryEntry(
        id=str(row.id),
        invoice_id=str(row.invoice_id),
        days_to_payment=row.days_to_payment,
        payment_amount=Decimal(row.payment_amount) if row.payment_amount is not None else None,
        payment_method=row.payment_method,
        notes=row.notes,
        was_reminder_sent=bool(row.was_reminder_sent),
        number_of_reminders=row.number_of_reminders or 0,
        created_at=row.created_at,
    )


class InvoiceRecordAccessor:
    """Read-only snapshot queries scoped to a single user"""

    def __init__(self, db: Session):
        self.db = db

    def _invoice_query(self, user_id: str):
        return (
            self.db.query(InvoiceRecord)
            .options(joinedload(InvoiceRecord.client))
            .filter(InvoiceRecord.user_id == user_id)
        )

    def get_invoices(self, user_id: str) -> List[Invoice]:
        """Every invoice the user has issued, any status, newest first"""
        with _store_errors("get_invoices"):
            rows = self._invoice_query(user_id).order_by(InvoiceRecord.created_at.desc()).all()
            return [to_domain_invoice(row) for row in rows]

    def get_outstanding_invoices(self, user_id: str) -> List[Invoice]:
        """Pending and overdue invoices, earliest due first"""
        with _store_errors("get_outstanding_invoices"):
            rows = (
                self._invoice_query(user_id)
                .filter(InvoiceRecord.status.in_(OUTSTANDING_STATUS_VALUES))
                .order_by(InvoiceRecord.due_date.asc())
                .all()
            )
            return [to_domain_invoice(row) for row in rows]

    def get_outstanding_invoices_for_clients(self, user_id: str, client_ids: Sequence[str]) -> List[Invoice]:
        """Pending and overdue invoices restricted to the given clients"""
        if not client_ids:
            return []
        with _store_errors("get_outstanding_invoices_for_clients"):
            rows = (
                self._invoice_query(user_id)
                .filter(
                    InvoiceRecord.status.in_(OUTSTANDING_STATUS_VALUES),
                    InvoiceRecord.client_id.in_([uuid.UUID(cid) for cid in client_ids]),
                )
                .all()
            )
            return [to_domain_invoice(row) for row in rows]

    def get_recent_invoices(self, user_id: str, limit: int) -> List[Invoice]:
        """Most recently created invoices first"""
        with _store_errors("get_recent_invoices"):
            rows = (
                self._invoice_query(user_id)
                .order_by(InvoiceRecord.created_at.desc())
                .limit(limit)
                .all()
            )
            return [to_domain_invoice(row) for row in rows]

    def get_payment_history(self, invoice_ids: Sequence[str]) -> List[PaymentHistoryEntry]:
        """Payment rows for the given invoices"""
        if not invoice_ids:
            return []
        with _store_errors("get_payment_history"):
            rows = (
                self.db.query(PaymentHistoryRecord)
                .filter(PaymentHistoryRecord.invoice_id.in_([uuid.UUID(iid) for iid in invoice_ids]))
                .all()
            )
            return [to_domain_payment(row) for row in rows]

    def get_clients(self, user_id: str) -> List[Client]:
        """All of the user's clients, by name"""
        with _store_errors("get_clients"):
            rows = (
                self.db.query(ClientRecord)
                .filter(ClientRecord.user_id == user_id)
                .order_by(ClientRecord.name.asc())
                .all()
            )
            return [to_domain_client(row) for row in rows]

    def get_top_clients(self, user_id: str, limit: int) -> List[Client]:
        """Clients with the highest invoiced volume"""
        with _store_errors("get_top_clients"):
            rows = (
                self.db.query(ClientRecord)
                .filter(ClientRecord.user_id == user_id)
                .order_by(ClientRecord.total_invoiced.desc())
                .limit(limit)
                .all()
            )
            return [to_domain_client(row) for row in rows]


class InvoiceRepository:
    """Writes for invoices: create, edit, delete, payments and reminders"""

    def __init__(self, db: Session):
        self.db = db

    def get_invoice(self, user_id: str, invoice_id: uuid.UUID) -> InvoiceRecord:
        """
        Fetch an invoice owned by the user.

        Raises:
            NotFoundError: If no such invoice exists for this user
        """
        with _store_errors("get_invoice"):
            record: Optional[InvoiceRecord] = (
                self.db.query(InvoiceRecord)
                .options(joinedload(InvoiceRecord.client))
                .filter(InvoiceRecord.id == invoice_id, InvoiceRecord.user_id == user_id)
                .first()
            )
        if record is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return record

    def create_invoice(self, user_id: str, fields: Mapping[str, Any]) -> InvoiceRecord:
        """Insert a new invoice; status defaults to pending"""
        record = InvoiceRecord(user_id=user_id, status=InvoiceStatus.PENDING.value)
        _apply_changes(record, fields)
        self.db.add(record)
        with _store_errors("create_invoice"):
            self.db.flush()
            self.db.refresh(record)
        return record

    def update_invoice(self, record: InvoiceRecord, changes: Mapping[str, Any]) -> InvoiceRecord:
        _apply_changes(record, changes)
        with _store_errors("update_invoice"):
            self.db.flush()
            self.db.refresh(record)
        return record

    def delete_invoice(self, record: InvoiceRecord) -> None:
        """Remove an invoice together with its payment history"""
        with _store_errors("delete_invoice"):
            self.db.delete(record)
            self.db.flush()

    def mark_paid(self, record: InvoiceRecord, paid_on: date) -> InvoiceRecord:
        record.status = InvoiceStatus.PAID.value
        record.actual_payment_date = paid_on
        with _store_errors("mark_paid"):
            self.db.flush()
        return record

    def record_reminder(self, record: InvoiceRecord, sent_on: date) -> InvoiceRecord:
        record.reminder_sent = True
        record.reminder_count = (record.reminder_count or 0) + 1
        record.last_reminder_date = sent_on
        with _store_errors("record_reminder"):
            self.db.flush()
        return record


class ClientRepository:
    """Repository for a user's clients"""

    def __init__(self, db: Session):
        self.db = db

    def get_client(self, user_id: str, client_id: uuid.UUID) -> ClientRecord:
        """
        Fetch a client owned by the user.

        Raises:
            NotFoundError: If no such client exists for this user
        """
        with _store_errors("get_client"):
            record: Optional[ClientRecord] = (
                self.db.query(ClientRecord)
                .filter(ClientRecord.id == client_id, ClientRecord.user_id == user_id)
                .first()
            )
        if record is None:
            raise NotFoundError(f"Client {client_id} not found")
        return record

    def create_client(self, user_id: str, fields: Mapping[str, Any]) -> ClientRecord:
        record = ClientRecord(user_id=user_id)
        _apply_changes(record, fields)
        self.db.add(record)
        with _store_errors("create_client"):
            self.db.flush()
            self.db.refresh(record)
        return record

    def update_client(self, record: ClientRecord, changes: Mapping[str, Any]) -> ClientRecord:
        _apply_changes(record, changes)
        with _store_errors("update_client"):
            self.db.flush()
            self.db.refresh(record)
        return record

    def delete_client(self, record: ClientRecord) -> None:
        """Remove a client; its invoices and their payments go with it"""
        with _store_errors("delete_client"):
            self.db.delete(record)
            self.db.flush()


class PaymentHistoryRepository:
    """Repository for payment history rows"""

    def __init__(self, db: Session):
        self.db = db

    def create_entry(
        self,
        invoice: InvoiceRecord,
        days_to_payment: int,
        payment_amount: Decimal,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> PaymentHistoryRecord:
        """Persist a payment, capturing the invoice's reminder stats at payment time"""
        entry = PaymentHistoryRecord(
            invoice_id=invoice.id,
            days_to_payment=days_to_payment,
            was_reminder_sent=bool(invoice.reminder_sent),
            number_of_reminders=invoice.reminder_count or 0,
            payment_amount=payment_amount,
            payment_method=payment_method,
            notes=notes,
        )
        self.db.add(entry)
        with _store_errors("create_payment_entry"):
            self.db.flush()  # Get ID without committing
        return entry

    def list_entries(self, user_id: str, invoice_id: Optional[uuid.UUID] = None) -> List[PaymentHistoryEntry]:
        """Payments on the user's invoices, newest first, optionally for one invoice"""
        with _store_errors("list_payment_entries"):
            query = (
                self.db.query(PaymentHistoryRecord)
                .join(InvoiceRecord, PaymentHistoryRecord.invoice_id == InvoiceRecord.id)
                .filter(InvoiceRecord.user_id == user_id)
            )
            if invoice_id is not None:
                query = query.filter(PaymentHistoryRecord.invoice_id == invoice_id)
            rows = query.order_by(PaymentHistoryRecord.created_at.desc()).all()
            return [to_domain_payment(row) for row in rows]

    def get_entry(self, user_id: str, entry_id: uuid.UUID) -> PaymentHistoryEntry:
        """
        Fetch one payment on the user's invoices.

        Raises:
            NotFoundError: If no such payment exists for this user
        """
        with _store_errors("get_payment_entry"):
            row: Optional[PaymentHistoryRecord] = (
                self.db.query(PaymentHistoryRecord)
                .join(InvoiceRecord, PaymentHistoryRecord.invoice_id == InvoiceRecord.id)
                .filter(PaymentHistoryRecord.id == entry_id, InvoiceRecord.user_id == user_id)
                .first()
            )
        if row is None:
            raise NotFoundError(f"Payment {entry_id} not found")
        return to_domain_payment(row)

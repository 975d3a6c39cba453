"""SQLAlchemy ORM models for clients, invoices and payment history"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, Numeric, ForeignKey, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class ClientRecord(Base):
    """Client billed by a user, with payment-behaviour statistics"""

    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(64), nullable=True)
    address = Column(Text, nullable=True)
    average_payment_days = Column(Integer, nullable=True, default=30)
    payment_reliability = Column(Float, nullable=True, default=0.5)
    total_invoiced = Column(Numeric(12, 2), nullable=False, default=0)
    total_paid = Column(Numeric(12, 2), nullable=False, default=0)
    invoice_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    invoices = relationship("InvoiceRecord", back_populates="client", cascade="all, delete-orphan")


class InvoiceRecord(Base):
    """Invoice issued to a client"""

    __tablename__ = "invoices"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id", ondelete="CASCADE"), nullable=True, index=True)
    invoice_number = Column(String(64), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    predicted_payment_date = Column(Date, nullable=True)
    actual_payment_date = Column(Date, nullable=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    confidence = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    reminder_sent = Column(Boolean, nullable=False, default=False)
    reminder_count = Column(Integer, nullable=False, default=0)
    last_reminder_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client = relationship("ClientRecord", back_populates="invoices")
    payments = relationship("PaymentHistoryRecord", back_populates="invoice", cascade="all, delete-orphan")


class PaymentHistoryRecord(Base):
    """Payment received against an invoice"""

    __tablename__ = "payment_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    days_to_payment = Column(Integer, nullable=True)
    was_reminder_sent = Column(Boolean, nullable=False, default=False)
    number_of_reminders = Column(Integer, nullable=False, default=0)
    payment_amount = Column(Numeric(12, 2), nullable=True)
    payment_method = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    invoice = relationship("InvoiceRecord", back_populates="payments")

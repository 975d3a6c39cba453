"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from cashflow_gateway.domain.models import AlertAction, AlertPriority, AlertType, InvoiceStatus

# Fixed-point amounts travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class KpiSchema(BaseModel):
    """Amount/count pair"""

    model_config = ConfigDict(from_attributes=True)

    amount: Money
    count: int


class SummaryResponse(BaseModel):
    """Response for GET /v1/dashboard/summary"""

    model_config = ConfigDict(from_attributes=True)

    outstanding: KpiSchema
    overdue: KpiSchema
    expected_this_week: KpiSchema
    this_month_revenue: KpiSchema
    next_month_forecast: KpiSchema
    avg_payment_days: int


class ForecastPointSchema(BaseModel):
    """Single emitted day of the cash-flow projection"""

    model_config = ConfigDict(from_attributes=True)

    date: date
    expected_income: Money
    expected_expenses: Money
    net_cash_flow: Money
    projected_balance: Money


class ForecastResponse(BaseModel):
    """Response for GET /v1/dashboard/forecast"""

    user_id: str
    horizon_days: int
    points: List[ForecastPointSchema]


class RelatedInvoiceSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client: Optional[str] = None
    amount: Money
    due_date: date


class AlertSchema(BaseModel):
    """Actionable dashboard alert"""

    model_config = ConfigDict(from_attributes=True)

    type: AlertType
    priority: AlertPriority
    title: str
    message: str
    action: AlertAction
    action_label: str
    related_invoices: List[RelatedInvoiceSchema] = []


class AlertsResponse(BaseModel):
    """Response for GET /v1/dashboard/alerts"""

    count: int
    alerts: List[AlertSchema]


class InvoiceSchema(BaseModel):
    """Invoice as shown in dashboard lists"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    invoice_number: Optional[str] = None
    amount: Money
    issue_date: date
    due_date: date
    predicted_payment_date: Optional[date] = None
    actual_payment_date: Optional[date] = None
    status: InvoiceStatus
    reminder_sent: bool = False
    reminder_count: int = 0
    last_reminder_date: Optional[date] = None
    confidence: Optional[float] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class InvoiceListResponse(BaseModel):
    """Response for invoice list endpoints"""

    count: int
    invoices: List[InvoiceSchema]


class OverdueInvoiceSchema(InvoiceSchema):
    days_overdue: int


class OverdueInvoiceListResponse(BaseModel):
    """Response for GET /v1/invoices/overdue"""

    count: int
    invoices: List[OverdueInvoiceSchema]


class RankedClientSchema(BaseModel):
    """Client with live outstanding balance"""

    id: str
    name: str
    average_payment_days: int
    payment_reliability: float
    total_invoiced: Money
    total_paid: Money
    invoice_count: int
    outstanding: Money


class TopClientsResponse(BaseModel):
    """Response for GET /v1/dashboard/top-clients"""

    count: int
    clients: List[RankedClientSchema]


class PaymentRequest(BaseModel):
    """Request body for POST /v1/invoices/{invoice_id}/payments"""

    paid_on: Optional[date] = Field(None, description="Date payment was received (default: today)")
    payment_amount: Optional[Decimal] = Field(None, ge=0, description="Amount received (default: invoice amount)")
    payment_method: Optional[str] = Field(None, max_length=64, description="e.g. bank transfer, check, credit card")
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    """Response for POST /v1/invoices/{invoice_id}/payments"""

    invoice_id: str
    status: InvoiceStatus
    actual_payment_date: date
    days_to_payment: int
    payment_amount: Money


class ReminderResponse(BaseModel):
    """Response for POST /v1/invoices/{invoice_id}/reminders"""

    invoice_id: str
    reminder_count: int
    last_reminder_date: date


class PaymentHistorySchema(BaseModel):
    """Recorded payment against an invoice"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    invoice_id: str
    days_to_payment: Optional[int] = None
    was_reminder_sent: bool = False
    number_of_reminders: int = 0
    payment_amount: Optional[Money] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentHistoryListResponse(BaseModel):
    """Response for GET /v1/payment-history"""

    count: int
    payments: List[PaymentHistorySchema]


class InvoiceDetailResponse(InvoiceSchema):
    """Response for GET /v1/invoices/{invoice_id}"""

    payments: List[PaymentHistorySchema] = []


class InvoiceUpdateRequest(BaseModel):
    """Request body for PUT /v1/invoices/{invoice_id}; only supplied fields change"""

    client_id: Optional[uuid.UUID] = None
    invoice_number: Optional[str] = Field(None, max_length=64)
    amount: Optional[Decimal] = Field(None, gt=0)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    predicted_payment_date: Optional[date] = None
    confidence: Optional[float] = Field(None, ge=0, le=1, description="Confidence in the predicted payment date")
    status: Optional[InvoiceStatus] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class InvoiceCreateRequest(InvoiceUpdateRequest):
    """Request body for POST /v1/invoices"""

    amount: Decimal = Field(..., gt=0)
    issue_date: date
    due_date: date


class ClientSchema(BaseModel):
    """Client with contact details and payment statistics"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    average_payment_days: int
    payment_reliability: float
    total_invoiced: Money
    total_paid: Money
    invoice_count: int
    is_active: bool


class ClientListResponse(BaseModel):
    """Response for GET /v1/clients"""

    count: int
    clients: List[ClientSchema]


class ClientUpdateRequest(BaseModel):
    """Request body for PUT /v1/clients/{client_id}; only supplied fields change"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=64)
    address: Optional[str] = None
    average_payment_days: Optional[int] = Field(None, ge=0)
    payment_reliability: Optional[float] = Field(None, ge=0, le=1)
    total_invoiced: Optional[Decimal] = Field(None, ge=0)
    total_paid: Optional[Decimal] = Field(None, ge=0)
    invoice_count: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ClientCreateRequest(ClientUpdateRequest):
    """Request body for POST /v1/clients"""

    name: str = Field(..., min_length=1, max_length=255)

"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# Invoices that still represent money owed to the business
OUTSTANDING_STATUSES = frozenset({InvoiceStatus.PENDING, InvoiceStatus.OVERDUE})


class AlertType(str, Enum):
    URGENT = "urgent"
    WARNING = "warning"
    INFO = "info"


class AlertPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlertAction(str, Enum):
    """Closed set of follow-up actions a caller can route an alert to"""

    SEND_REMINDERS = "send_reminders"
    VIEW_FORECAST = "view_forecast"
    VIEW_CLIENTS = "view_clients"


@dataclass(frozen=True)
class Invoice:
    """Invoice as read from the record store"""

    id: str
    amount: Decimal
    issue_date: date
    due_date: date
    status: InvoiceStatus
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    invoice_number: Optional[str] = None
    predicted_payment_date: Optional[date] = None
    actual_payment_date: Optional[date] = None
    reminder_sent: bool = False
    reminder_count: int = 0
    last_reminder_date: Optional[date] = None
    confidence: Optional[float] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_outstanding(self) -> bool:
        return self.status in OUTSTANDING_STATUSES


@dataclass(frozen=True)
class Client:
    """Client with externally maintained payment-behaviour statistics"""

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    average_payment_days: int = 30
    payment_reliability: float = 0.5
    total_invoiced: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    invoice_count: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class PaymentHistoryEntry:
    """Recorded payment for an invoice"""

    invoice_id: str
    days_to_payment: Optional[int]
    payment_amount: Optional[Decimal] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[str] = None
    was_reminder_sent: bool = False
    number_of_reminders: int = 0
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Kpi:
    """Amount/count pair shown on the dashboard"""

    amount: Decimal
    count: int


@dataclass(frozen=True)
class DashboardSummary:
    outstanding: Kpi
    overdue: Kpi
    expected_this_week: Kpi
    this_month_revenue: Kpi
    next_month_forecast: Kpi
    avg_payment_days: int


@dataclass(frozen=True)
class ForecastPoint:
    """One emitted day of the projected cash-flow curve"""

    date: date
    expected_income: Decimal
    expected_expenses: Decimal
    net_cash_flow: Decimal
    projected_balance: Decimal


@dataclass(frozen=True)
class RelatedInvoice:
    id: str
    client: Optional[str]
    amount: Decimal
    due_date: date


@dataclass(frozen=True)
class Alert:
    """Actionable warning derived from invoices, forecast and clients"""

    type: AlertType
    priority: AlertPriority
    title: str
    message: str
    action: AlertAction
    action_label: str
    related_invoices: List[RelatedInvoice] = field(default_factory=list)


@dataclass(frozen=True)
class RankedClient:
    """Client annotated with its live outstanding balance"""

    client: Client
    outstanding: Decimal

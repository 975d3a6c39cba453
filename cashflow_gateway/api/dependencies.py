"""Dependency injection for FastAPI endpoints"""

import uuid
from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from cashflow_gateway.config import settings
from cashflow_gateway.domain.dashboard import DashboardService
from cashflow_gateway.infrastructure.database.repositories import InvoiceRecordAccessor
from cashflow_gateway.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def parse_record_id(value: str, entity: str) -> uuid.UUID:
    """Parse a UUID path parameter, rejecting malformed IDs with 400"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID format")


def get_today(
    as_of: Optional[date] = Query(None, description="Reference date (default: server's current date)"),
) -> date:
    """The only place the clock is read; everything downstream takes the date explicitly"""
    return as_of or date.today()


def get_accessor(db: Session = Depends(get_db)) -> InvoiceRecordAccessor:
    """Provide read-only record accessor bound to the request session"""
    return InvoiceRecordAccessor(db)


def get_dashboard_service(accessor: InvoiceRecordAccessor = Depends(get_accessor)) -> DashboardService:
    """Provide dashboard service configured from settings"""
    return DashboardService(
        accessor,
        alert_lookahead_days=settings.alert_lookahead_days,
        slow_payer_threshold_days=settings.slow_payer_threshold_days,
        max_horizon_days=settings.forecast_max_horizon_days,
    )

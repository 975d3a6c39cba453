"""GET /v1/dashboard/* - KPIs, cash-flow forecast, alerts and rankings"""

import time
from datetime import date
from fastapi import APIRouter, Depends, Query, Request

from cashflow_gateway.api.dependencies import get_dashboard_service, get_request_id, get_today
from cashflow_gateway.api.errors import to_http_exception
from cashflow_gateway.api.v1.schemas import (
    AlertSchema,
    AlertsResponse,
    ForecastPointSchema,
    ForecastResponse,
    InvoiceListResponse,
    InvoiceSchema,
    RankedClientSchema,
    SummaryResponse,
    TopClientsResponse,
)
from cashflow_gateway.config import settings
from cashflow_gateway.domain.dashboard import DashboardService
from cashflow_gateway.domain.exceptions import DomainException
from cashflow_gateway.infrastructure.observability.logging import log_dashboard_request
from cashflow_gateway.infrastructure.observability.metrics import (
    forecast_points_histogram,
    record_alerts,
    record_dashboard_request,
)

router = APIRouter(prefix="/dashboard")


def _completed(operation: str, request_id: str, user_id: str, result_count: int, start_time: float) -> None:
    duration_ms = (time.time() - start_time) * 1000
    record_dashboard_request(operation)
    log_dashboard_request(request_id, user_id, operation, result_count, duration_ms)


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Headline KPIs: outstanding, overdue, expected this week, revenue and forecast"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        summary = service.get_summary(user_id, today)
    except DomainException as e:
        raise to_http_exception(e, request_id, "summary") from e

    _completed("summary", request_id, user_id, 1, start_time)
    return SummaryResponse.model_validate(summary)


@router.get("/forecast", response_model=ForecastResponse)
def get_forecast(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    days: int = Query(settings.forecast_horizon_days, description="Forecast horizon in days"),
    today: date = Depends(get_today),
    service: DashboardService = Depends(get_dashboard_service),
):
    """
    Sparse daily cash-flow projection from predicted payment dates.

    Returns:
        Day 0 plus every day with expected income, with running balance
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        points = service.get_forecast(user_id, today, days)
    except DomainException as e:
        raise to_http_exception(e, request_id, "forecast") from e

    forecast_points_histogram.observe(len(points))
    _completed("forecast", request_id, user_id, len(points), start_time)
    return ForecastResponse(
        user_id=user_id,
        horizon_days=days,
        points=[ForecastPointSchema.model_validate(p) for p in points],
    )


@router.get("/alerts", response_model=AlertsResponse)
def get_alerts(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Overdue, cash-shortfall and slow-payer alerts, in that order"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        alerts = service.get_alerts(user_id, today)
    except DomainException as e:
        raise to_http_exception(e, request_id, "alerts") from e

    record_alerts(alerts)
    _completed("alerts", request_id, user_id, len(alerts), start_time)
    return AlertsResponse(count=len(alerts), alerts=[AlertSchema.model_validate(a) for a in alerts])


@router.get("/recent-invoices", response_model=InvoiceListResponse)
def get_recent_invoices(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    limit: int = Query(settings.default_result_limit, description="Maximum invoices to return"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Most recently created invoices"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        invoices = service.get_recent_invoices(user_id, limit)
    except DomainException as e:
        raise to_http_exception(e, request_id, "recent_invoices") from e

    _completed("recent_invoices", request_id, user_id, len(invoices), start_time)
    return InvoiceListResponse(
        count=len(invoices),
        invoices=[InvoiceSchema.model_validate(inv) for inv in invoices],
    )


@router.get("/top-clients", response_model=TopClientsResponse)
def get_top_clients(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    limit: int = Query(settings.default_result_limit, description="Maximum clients to return"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Clients ranked by total invoiced, with their current outstanding balance"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        ranked = service.get_top_clients(user_id, limit)
    except DomainException as e:
        raise to_http_exception(e, request_id, "top_clients") from e

    _completed("top_clients", request_id, user_id, len(ranked), start_time)
    return TopClientsResponse(
        count=len(ranked),
        clients=[
            RankedClientSchema(
                id=r.client.id,
                name=r.client.name,
                average_payment_days=r.client.average_payment_days,
                payment_reliability=r.client.payment_reliability,
                total_invoiced=r.client.total_invoiced,
                total_paid=r.client.total_paid,
                invoice_count=r.client.invoice_count,
                outstanding=r.outstanding,
            )
            for r in ranked
        ],
    )

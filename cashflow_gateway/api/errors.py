"""Map domain exceptions onto HTTP errors"""

import logging
from fastapi import HTTPException

from cashflow_gateway.domain.exceptions import DependencyError, DomainException, NotFoundError, ValidationError
from cashflow_gateway.infrastructure.observability.metrics import snapshot_fetch_failures_counter


def to_http_exception(error: DomainException, request_id: str, operation: str) -> HTTPException:
    """Log the failure and build the matching HTTPException"""
    extra = {"request_id": request_id, "operation": operation}

    if isinstance(error, ValidationError):
        logging.warning(f"Invalid input: {error}", extra=extra)
        return HTTPException(status_code=422, detail=str(error))

    if isinstance(error, NotFoundError):
        logging.info(f"Not found: {error}", extra=extra)
        return HTTPException(status_code=404, detail=str(error))

    if isinstance(error, DependencyError):
        snapshot_fetch_failures_counter.inc()
        logging.error(f"Record store error: {error}", extra=extra)
        return HTTPException(status_code=503, detail="Record store unavailable")

    logging.error(f"Unexpected domain error: {error}", extra=extra)
    return HTTPException(status_code=500, detail="Internal server error")

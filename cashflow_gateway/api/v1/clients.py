"""Client endpoints - contact details and payment statistics"""

import logging
from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from cashflow_gateway.api.dependencies import get_accessor, get_request_id, parse_record_id
from cashflow_gateway.api.errors import to_http_exception
from cashflow_gateway.api.v1.schemas import ClientCreateRequest, ClientListResponse, ClientSchema, ClientUpdateRequest
from cashflow_gateway.domain.clients import validate_client_changes
from cashflow_gateway.domain.exceptions import DomainException
from cashflow_gateway.infrastructure.database.repositories import (
    ClientRepository,
    InvoiceRecordAccessor,
    commit_changes,
    to_domain_client,
)
from cashflow_gateway.infrastructure.database.session import get_db
from cashflow_gateway.infrastructure.observability.metrics import records_written_counter

router = APIRouter(prefix="/clients")


@router.get("", response_model=ClientListResponse)
def list_clients(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    accessor: InvoiceRecordAccessor = Depends(get_accessor),
):
    """All of the user's clients, by name"""
    try:
        clients = accessor.get_clients(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "list_clients") from e

    return ClientListResponse(count=len(clients), clients=[ClientSchema.model_validate(c) for c in clients])


@router.post("", response_model=ClientSchema, status_code=201)
def create_client(
    request_body: ClientCreateRequest,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Create a client; unset statistics take their defaults"""
    request_id = get_request_id(request)

    try:
        record = ClientRepository(db).create_client(user_id, request_body.model_dump(exclude_none=True))
        client = to_domain_client(record)
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "create_client") from e

    records_written_counter.labels(entity="client", action="created").inc()
    logging.info("Client created", extra={"request_id": request_id, "user_id": user_id, "client_id": client.id})
    return ClientSchema.model_validate(client)


@router.get("/{client_id}", response_model=ClientSchema)
def get_client(
    client_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    client_uuid = parse_record_id(client_id, "client")

    try:
        client = to_domain_client(ClientRepository(db).get_client(user_id, client_uuid))
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), "get_client") from e

    return ClientSchema.model_validate(client)


@router.put("/{client_id}", response_model=ClientSchema)
def update_client(
    client_id: str,
    request_body: ClientUpdateRequest,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Change the supplied fields of a client"""
    request_id = get_request_id(request)
    client_uuid = parse_record_id(client_id, "client")
    changes = request_body.model_dump(exclude_unset=True)

    try:
        validate_client_changes(changes)
        client_repo = ClientRepository(db)
        record = client_repo.update_client(client_repo.get_client(user_id, client_uuid), changes)
        client = to_domain_client(record)
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "update_client") from e

    records_written_counter.labels(entity="client", action="updated").inc()
    logging.info(
        "Client updated",
        extra={"request_id": request_id, "user_id": user_id, "client_id": client_id, "fields": sorted(changes)},
    )
    return ClientSchema.model_validate(client)


@router.delete("/{client_id}", status_code=204, response_class=Response)
def delete_client(
    client_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Delete a client together with its invoices"""
    request_id = get_request_id(request)
    client_uuid = parse_record_id(client_id, "client")

    try:
        client_repo = ClientRepository(db)
        client_repo.delete_client(client_repo.get_client(user_id, client_uuid))
        commit_changes(db)
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "delete_client") from e

    records_written_counter.labels(entity="client", action="deleted").inc()
    logging.info("Client deleted", extra={"request_id": request_id, "user_id": user_id, "client_id": client_id})
    return Response(status_code=204)

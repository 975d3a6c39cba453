"""Unit tests for client ranking"""

import pytest
from decimal import Decimal
from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.models import InvoiceStatus
from cashflow_gateway.domain.ranking import rank_clients


def test_rank_clients_orders_by_total_invoiced(make_client):
    """Test highest invoiced volume comes first and result is truncated"""
    clients = [
        make_client(id="a", total_invoiced=Decimal("500")),
        make_client(id="b", total_invoiced=Decimal("9000")),
        make_client(id="c", total_invoiced=Decimal("1200")),
    ]

    ranked = rank_clients(clients, [], limit=2)

    assert [r.client.id for r in ranked] == ["b", "c"]
    assert all(r.outstanding == Decimal("0.00") for r in ranked)


def test_rank_clients_outstanding_per_client(make_client, make_invoice):
    """Test outstanding sums only pending/overdue invoices of each client"""
    clients = [
        make_client(id="a", total_invoiced=Decimal("100")),
        make_client(id="b", total_invoiced=Decimal("200")),
    ]
    invoices = [
        make_invoice(client_id="a", amount="10.10"),
        make_invoice(client_id="a", amount="5.05", status=InvoiceStatus.OVERDUE),
        make_invoice(client_id="a", amount="999", status=InvoiceStatus.PAID),
        make_invoice(client_id="b", amount="40"),
        make_invoice(client_id=None, amount="77"),
    ]

    ranked = rank_clients(clients, invoices)

    outstanding = {r.client.id: r.outstanding for r in ranked}
    assert outstanding == {"a": Decimal("15.15"), "b": Decimal("40.00")}


def test_rank_clients_skips_unranked_clients(make_client, make_invoice):
    """Test invoices of clients outside the limit are not summed"""
    clients = [
        make_client(id="big", total_invoiced=Decimal("1000")),
        make_client(id="small", total_invoiced=Decimal("1")),
    ]
    invoices = [make_invoice(client_id="small", amount="50")]

    ranked = rank_clients(clients, invoices, limit=1)

    assert len(ranked) == 1
    assert ranked[0].client.id == "big"


def test_rank_clients_limit_zero(make_client):
    """Test limit 0 returns nothing"""
    assert rank_clients([make_client()], [], limit=0) == []


def test_rank_clients_negative_limit(make_client):
    """Test negative limit is rejected"""
    with pytest.raises(ValidationError):
        rank_clients([make_client()], [], limit=-1)

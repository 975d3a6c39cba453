"""Client ranking by invoiced volume, annotated with live outstanding balance"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from cashflow_gateway.domain.exceptions import ValidationError
from cashflow_gateway.domain.models import Client, Invoice, RankedClient
from cashflow_gateway.utils.money import to_money

DEFAULT_LIMIT = 5


def rank_clients(
    clients: List[Client],
    outstanding_invoices: List[Invoice],
    limit: int = DEFAULT_LIMIT,
) -> List[RankedClient]:
    """
    Top `limit` clients by total invoiced, highest first.

    Outstanding balances are only summed for the ranked clients, so the cost
    tracks the result size rather than the number of clients.
    """
    if limit < 0:
        raise ValidationError(f"limit must be >= 0, got {limit}")

    ranked = sorted(clients, key=lambda c: c.total_invoiced, reverse=True)[:limit]
    ranked_ids = {c.id for c in ranked}

    outstanding_by_client: Dict[str, Decimal] = defaultdict(Decimal)
    for inv in outstanding_invoices:
        if inv.client_id in ranked_ids and inv.is_outstanding:
            outstanding_by_client[inv.client_id] += inv.amount

    return [
        RankedClient(client=c, outstanding=to_money(outstanding_by_client.get(c.id, Decimal("0"))))
        for c in ranked
    ]

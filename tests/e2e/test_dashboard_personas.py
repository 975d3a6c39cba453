"""
E2E tests for dashboard user personas, driven entirely through the HTTP API.

User personas:
- new_user: No clients, no invoices yet
- steady_freelancer: Predictable pipeline, nothing overdue
- agency_backlog: Many overdue invoices and a slow-paying client
- collector: Works through overdue invoices with reminders and payments
- bookkeeper: Enters clients and invoices through the API, then reads the dashboard
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from fastapi.testclient import TestClient

TODAY = date(2024, 3, 15)
AS_OF = TODAY.isoformat()


def _dashboard(client: TestClient, user_id: str, endpoint: str, **params) -> dict:
    response = client.get(f"/v1/dashboard/{endpoint}", params={"user_id": user_id, "as_of": AS_OF, **params})
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
def test_new_user_empty_dashboard(client: TestClient):
    """
    new_user: Nothing recorded
    Expected: Zero KPIs, default payment days, only day 0 in forecast, no alerts
    """
    summary = _dashboard(client, "new_user", "summary")
    forecast = _dashboard(client, "new_user", "forecast")
    alerts = _dashboard(client, "new_user", "alerts")
    top = _dashboard(client, "new_user", "top-clients")

    assert summary["avg_payment_days"] == 30
    assert all(summary[k]["amount"] == 0 for k in ("outstanding", "overdue", "expected_this_week"))
    assert len(forecast["points"]) == 1
    assert forecast["points"][0]["date"] == AS_OF
    assert alerts["count"] == 0
    assert top["count"] == 0


@pytest.mark.integration
def test_steady_freelancer_forecast(client: TestClient, seed_client, seed_invoice):
    """
    steady_freelancer: Three clients paying on predicted dates
    Expected: Forecast balance climbs to total pipeline, no alerts
    """
    user = "steady_freelancer"
    clients = [seed_client(user, f"Client {i}", average_payment_days=20 + i) for i in range(3)]
    for i, c in enumerate(clients):
        seed_invoice(
            user,
            f"{(i + 1) * 1000}.00",
            TODAY + timedelta(days=14 * (i + 1)),
            client_id=c.id,
            predicted_payment_date=TODAY + timedelta(days=10 * (i + 1)),
        )

    forecast = _dashboard(client, user, "forecast")
    alerts = _dashboard(client, user, "alerts")
    summary = _dashboard(client, user, "summary")

    balances = [p["projected_balance"] for p in forecast["points"]]
    assert balances == [0.0, 1000.0, 3000.0, 6000.0]
    assert forecast["points"][-1]["projected_balance"] == sum(p["expected_income"] for p in forecast["points"])
    assert alerts["count"] == 0
    assert summary["outstanding"] == {"amount": 6000.0, "count": 3}
    assert summary["overdue"]["count"] == 0
    assert summary["next_month_forecast"] == {"amount": 5000.0, "count": 2}


@pytest.mark.integration
def test_agency_backlog_alerts(client: TestClient, seed_client, seed_invoice):
    """
    agency_backlog: Five overdue invoices, one slow client
    Expected: Urgent alert with 3 oldest invoices sampled, then slow-payer info
    """
    user = "agency_backlog"
    slow = seed_client(user, "Glacial Partners", average_payment_days=72, total_invoiced=Decimal("20000.00"))
    for days_late in (3, 30, 12, 60, 7):
        seed_invoice(user, "500.00", TODAY - timedelta(days=days_late), client_id=slow.id)

    alerts = _dashboard(client, user, "alerts")

    assert [a["action"] for a in alerts["alerts"]] == ["send_reminders", "view_clients"]
    urgent = alerts["alerts"][0]
    assert urgent["title"] == "5 overdue invoices"
    assert urgent["message"] == "Total of $2500.00 is overdue"
    assert [r["due_date"] for r in urgent["related_invoices"]] == [
        (TODAY - timedelta(days=60)).isoformat(),
        (TODAY - timedelta(days=30)).isoformat(),
        (TODAY - timedelta(days=12)).isoformat(),
    ]
    assert alerts["alerts"][1]["message"] == "1 clients averaging 72+ days to pay"

    top = _dashboard(client, user, "top-clients")
    assert top["clients"][0]["outstanding"] == 2500.0


@pytest.mark.integration
def test_collector_clears_overdue(client: TestClient, seed_invoice):
    """
    collector: Reminds, then records payment for each overdue invoice
    Expected: Overdue alert disappears, revenue and average payment days update
    """
    user = "collector"
    invoices = [
        seed_invoice(user, "300.00", TODAY - timedelta(days=5), issue_date=TODAY - timedelta(days=35)),
        seed_invoice(user, "200.00", TODAY - timedelta(days=2), issue_date=TODAY - timedelta(days=32)),
    ]

    for inv in invoices:
        response = client.post(f"/v1/invoices/{inv.id}/reminders", params={"user_id": user, "as_of": AS_OF})
        assert response.status_code == 200

    assert _dashboard(client, user, "alerts")["count"] == 1

    for inv in invoices:
        response = client.post(
            f"/v1/invoices/{inv.id}/payments",
            params={"user_id": user, "as_of": AS_OF},
            json={"payment_method": "card"},
        )
        assert response.status_code == 200

    summary = _dashboard(client, user, "summary")
    assert _dashboard(client, user, "alerts")["count"] == 0
    assert summary["overdue"]["count"] == 0
    assert summary["this_month_revenue"] == {"amount": 500.0, "count": 2}
    assert summary["avg_payment_days"] == 34  # (35 + 32) / 2 = 33.5, rounded half up


@pytest.mark.integration
def test_bookkeeper_enters_records_through_api(client: TestClient):
    """
    bookkeeper: Creates a client and invoices via the API, edits and removes one
    Expected: Dashboard reflects exactly the records left standing
    """
    user = "bookkeeper"
    params = {"user_id": user}
    acme = client.post("/v1/clients", params=params, json={"name": "Acme", "total_invoiced": "9000.00"}).json()

    created = []
    for amount, due_offset in (("400.00", -3), ("600.00", 10), ("999.00", 20)):
        response = client.post(
            "/v1/invoices",
            params=params,
            json={
                "client_id": acme["id"],
                "amount": amount,
                "issue_date": (TODAY - timedelta(days=30)).isoformat(),
                "due_date": (TODAY + timedelta(days=due_offset)).isoformat(),
                "predicted_payment_date": (TODAY + timedelta(days=due_offset + 2)).isoformat(),
            },
        )
        assert response.status_code == 201
        created.append(response.json())

    assert client.delete(f"/v1/invoices/{created[2]['id']}", params=params).status_code == 204
    response = client.put(f"/v1/invoices/{created[1]['id']}", params=params, json={"amount": "650.00"})
    assert response.status_code == 200

    summary = _dashboard(client, user, "summary")
    top = _dashboard(client, user, "top-clients")

    assert summary["outstanding"] == {"amount": 1050.0, "count": 2}
    assert summary["overdue"] == {"amount": 400.0, "count": 1}
    assert top["clients"][0]["name"] == "Acme"
    assert top["clients"][0]["outstanding"] == 1050.0

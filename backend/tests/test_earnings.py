"""Tests for provider earnings and payout endpoints."""
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.earnings import record_earning, gross_for_net


async def _seed_net(test_db, provider, net_amount, earned_at=None):
    """Record an earning that leaves exactly ``net_amount`` for the provider."""
    earning = await record_earning(test_db, provider.uuid, gross_for_net(net_amount, 15), earned_at=earned_at)
    await test_db.commit()
    return earning


@pytest.mark.asyncio
async def test_earnings_requires_auth(client):
    response = await client.get("/api/provider/earnings")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_earnings_requires_provider(client, create_user, auth_headers):
    user = await create_user()
    response = await client.get("/api/provider/earnings", headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["detail"] == "Provider account required"


@pytest.mark.asyncio
async def test_earnings_empty_ledger(client, provider, auth_headers):
    response = await client.get("/api/provider/earnings", headers=auth_headers(provider))

    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == {
        "availableBalance": 0,
        "pendingBalance": 0,
        "totalEarned": 0,
        "totalFees": 0,
    }
    assert data["transactions"] == []
    assert data["total"] == 0


@pytest.mark.asyncio
async def test_earnings_summary_and_transactions(client, test_db, provider, auth_headers):
    earning = await _seed_net(test_db, provider, 10000)

    response = await client.get("/api/provider/earnings", headers=auth_headers(provider))

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["availableBalance"] == 10000
    assert data["summary"]["totalEarned"] == 11765
    assert data["summary"]["totalFees"] == 1765

    transaction = data["transactions"][0]
    assert transaction["id"] == earning.uuid
    assert "uuid" not in transaction
    assert transaction["grossAmount"] == 11765
    assert transaction["feeAmount"] == 1765
    assert transaction["netAmount"] == 10000
    assert transaction["feePercentage"] == 15
    assert transaction["status"] == "available"
    assert transaction["currency"] == "GBP"


@pytest.mark.asyncio
async def test_earnings_read_is_idempotent(client, test_db, provider, auth_headers):
    await _seed_net(test_db, provider, 2500)
    headers = auth_headers(provider)

    first = await client.get("/api/provider/earnings", headers=headers)
    second = await client.get("/api/provider/earnings", headers=headers)

    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_earnings_pagination(client, test_db, provider, auth_headers):
    base = datetime(2026, 1, 1)
    for day in range(3):
        await record_earning(test_db, provider.uuid, 1000 * (day + 1), earned_at=base + timedelta(days=day))
    await test_db.commit()

    response = await client.get(
        "/api/provider/earnings",
        params={"skip": 1, "limit": 1},
        headers=auth_headers(provider),
    )

    data = response.json()
    assert data["total"] == 3
    assert data["skip"] == 1
    assert data["limit"] == 1
    assert [t["grossAmount"] for t in data["transactions"]] == [2000]


@pytest.mark.asyncio
async def test_earnings_rejects_bad_pagination(client, provider, auth_headers):
    response = await client.get(
        "/api/provider/earnings",
        params={"limit": 0},
        headers=auth_headers(provider),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_request_payout_success(client, test_db, provider, auth_headers):
    """£100.00 available, request £50.00 -> £50.00 available, £50.00 pending."""
    await _seed_net(test_db, provider, 10000)
    headers = auth_headers(provider)

    response = await client.post("/api/provider/payouts", json={"amount": 5000}, headers=headers)

    assert response.status_code == 201
    data = response.json()
    assert data["payout"]["amount"] == 5000
    assert data["payout"]["id"]
    assert "uuid" not in data["payout"]
    assert data["payout"]["status"] == "pending"
    assert data["payout"]["providerId"] == provider.uuid
    assert "£50.00" in data["message"]

    summary = (await client.get("/api/provider/earnings", headers=headers)).json()["summary"]
    assert summary["availableBalance"] == 5000
    assert summary["pendingBalance"] == 5000
    assert summary["totalEarned"] == 11765
    assert summary["totalFees"] == 1765


@pytest.mark.asyncio
async def test_request_payout_insufficient_balance(client, test_db, provider, auth_headers):
    """£30.00 available, request £50.00 -> rejected with no change."""
    await _seed_net(test_db, provider, 3000)
    headers = auth_headers(provider)

    response = await client.post("/api/provider/payouts", json={"amount": 5000}, headers=headers)

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "insufficient_balance"
    assert "£30.00" in data["detail"]

    summary = (await client.get("/api/provider/earnings", headers=headers)).json()["summary"]
    assert summary["availableBalance"] == 3000
    assert summary["pendingBalance"] == 0

    payouts = (await client.get("/api/provider/payouts", headers=headers)).json()
    assert payouts == []


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -100])
async def test_request_payout_invalid_amount(client, test_db, provider, auth_headers, amount):
    await _seed_net(test_db, provider, 3000)

    response = await client.post(
        "/api/provider/payouts", json={"amount": amount}, headers=auth_headers(provider)
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_amount"


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["abc", "100", 10.5, True, None])
async def test_request_payout_non_integer_amount(client, test_db, provider, auth_headers, amount):
    """Only JSON integers are accepted; numeric strings are not coerced."""
    await _seed_net(test_db, provider, 3000)

    response = await client.post(
        "/api/provider/payouts", json={"amount": amount}, headers=auth_headers(provider)
    )

    assert response.status_code == 422
    payouts = (await client.get("/api/provider/payouts", headers=auth_headers(provider))).json()
    assert payouts == []


@pytest.mark.asyncio
async def test_request_payout_database_failure(client, test_db, provider, auth_headers):
    """A failed write surfaces as a 500 persistence error."""
    await _seed_net(test_db, provider, 10000)
    failure = OperationalError("INSERT INTO signal_payouts", {}, Exception("database is locked"))

    with patch.object(AsyncSession, "flush", side_effect=failure):
        response = await client.post(
            "/api/provider/payouts", json={"amount": 5000}, headers=auth_headers(provider)
        )

    assert response.status_code == 500
    assert response.json() == {
        "detail": "Could not save the payout request, please try again",
        "code": "persistence_error",
    }


@pytest.mark.asyncio
async def test_unexpected_database_error_is_hidden(client, provider, auth_headers):
    failure = OperationalError("SELECT", {}, Exception("connection reset"))

    with patch.object(AsyncSession, "execute", side_effect=failure):
        response = await client.get("/api/provider/payouts", headers=auth_headers(provider))

    assert response.status_code == 500
    assert response.json()["code"] == "persistence_error"
    assert "connection reset" not in response.json()["detail"]


@pytest.mark.asyncio
async def test_request_payout_requires_provider(client, create_user, auth_headers):
    user = await create_user()
    response = await client.post(
        "/api/provider/payouts", json={"amount": 100}, headers=auth_headers(user)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_payouts(client, test_db, provider, auth_headers):
    await _seed_net(test_db, provider, 10000)
    headers = auth_headers(provider)

    await client.post("/api/provider/payouts", json={"amount": 1000}, headers=headers)
    await client.post("/api/provider/payouts", json={"amount": 2000}, headers=headers)

    response = await client.get("/api/provider/payouts", headers=headers)

    assert response.status_code == 200
    payouts = response.json()
    assert sorted(p["amount"] for p in payouts) == [1000, 2000]
    assert all(p["status"] == "pending" for p in payouts)
    assert all("periodStart" in p and "periodEnd" in p for p in payouts)


@pytest.mark.asyncio
async def test_payouts_are_scoped_to_provider(client, test_db, provider, create_user, auth_headers):
    other = await create_user(email="other@example.com", is_provider=True, signal_fee=300)
    await _seed_net(test_db, provider, 10000)
    await client.post("/api/provider/payouts", json={"amount": 1000}, headers=auth_headers(provider))

    response = await client.get("/api/provider/payouts", headers=auth_headers(other))

    assert response.status_code == 200
    assert response.json() == []

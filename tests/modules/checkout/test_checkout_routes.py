# -*- coding: utf-8 -*-
"""
backend/tests/modules/checkout/test_checkout_routes.py

Tests HTTP del checkout:
- POST /api/checkout/session
- GET  /api/checkout/session/{id}
- POST /api/checkout/session/{id}/acknowledge
- POST /api/paypal/orders/{id}/capture

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from app.modules.checkout.enums import ChargeState, PaymentProvider
from app.modules.purchases.models import Purchase
from app.shared.utils.jwt_utils import create_access_token

SELECTION = {"rect": {"x": 10, "y": 10, "w": 50, "h": 20}}


async def _create(client, **overrides):
    body = {"selectionArea": SELECTION, "amount": 40.00, "currency": "EUR"}
    body.update(overrides)
    return await client.post("/api/checkout/session", json=body)


@pytest.mark.asyncio
async def test_create_session(client):
    response = await _create(client)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["amountMinorUnits"] == 4000
    assert data["currency"] == "EUR"
    assert set(data["availableMethods"]) == {"stripe", "paypal"}
    assert data["providerHandles"]["stripe"] == {"handle": f"stripe_{data['sessionId']}"}
    assert data["summary"] == {"pixels": 1000, "tiles": 1}
    assert data["providerErrors"] == []


@pytest.mark.asyncio
async def test_create_session_with_token_records_profile(client, manager):
    token = create_access_token({"sub": "profile-7"})

    response = await _create(client, amount=5)
    anonymous = await manager.require(response.json()["sessionId"])
    response = await client.post(
        "/api/checkout/session",
        json={"selectionArea": SELECTION, "amount": 5},
        headers={"Authorization": f"Bearer {token}"},
    )
    owned = await manager.require(response.json()["sessionId"])

    assert anonymous.profile_id is None
    assert owned.profile_id == "profile-7"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"amount": 0}, {"amount": "free"}, {"currency": "EURO"}, {"selectionArea": None}],
)
async def test_create_session_rejects_bad_input(client, overrides):
    response = await _create(client, **overrides)

    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_create_session_without_providers_is_503(client, stripe_adapter, paypal_adapter):
    stripe_adapter.configured = False
    paypal_adapter.configured = False

    response = await _create(client)

    assert response.status_code == 503
    assert response.json()["detail"]["error_code"] == "NO_PAYMENT_METHODS_AVAILABLE"


@pytest.mark.asyncio
async def test_get_session(client):
    created = (await _create(client)).json()

    response = await client.get(f"/api/checkout/session/{created['sessionId']}")

    assert response.status_code == 200
    assert response.json()["sessionId"] == created["sessionId"]
    assert response.json()["confirmation"] is None


@pytest.mark.asyncio
async def test_get_unknown_session_is_404(client):
    response = await client.get("/api/checkout/session/nope")

    assert response.status_code == 404
    assert response.json()["detail"]["error_code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_acknowledge_creates_purchase(client, session_factory):
    session_id = (await _create(client)).json()["sessionId"]

    response = await client.post(
        f"/api/checkout/session/{session_id}/acknowledge",
        json={"provider": "stripe", "payload": {"paymentIntentId": f"stripe_{session_id}"}},
    )

    assert response.status_code == 200
    assert response.json() == {
        "status": "acknowledged",
        "result": "created",
        "provider": "stripe",
        "purchaseId": session_id,
        "warning": None,
    }

    async with session_factory() as db:
        purchase = await db.get(Purchase, session_id)
    assert purchase.area == 1000
    assert purchase.payment_intent_id == f"txn_stripe_{session_id}"

    polled = (await client.get(f"/api/checkout/session/{session_id}")).json()
    assert polled["status"] == "paid"
    assert polled["purchaseId"] == session_id
    assert polled["confirmation"]["provider"] == "stripe"


@pytest.mark.asyncio
async def test_acknowledge_twice_reports_existing(client, session_factory, stripe_adapter):
    session_id = (await _create(client)).json()["sessionId"]
    url = f"/api/checkout/session/{session_id}/acknowledge"

    first = await client.post(url, json={"provider": "stripe"})
    # El segundo acknowledge (otro proveedor) describe al ganador sin consultar de nuevo
    second = await client.post(url, json={"provider": "paypal"})

    assert first.json()["result"] == "created"
    assert second.status_code == 200
    assert second.json()["result"] == "already_paid"
    assert second.json()["provider"] == "stripe"
    assert stripe_adapter.confirm_calls == 1

    async with session_factory() as db:
        count = (await db.execute(select(func.count()).select_from(Purchase))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_acknowledge_incomplete_payment_is_402(client, session_factory, stripe_adapter, manager):
    stripe_adapter.charge_state = ChargeState.PENDING
    session_id = (await _create(client)).json()["sessionId"]

    response = await client.post(
        f"/api/checkout/session/{session_id}/acknowledge",
        json={"provider": "stripe"},
    )

    assert response.status_code == 402
    assert response.json()["detail"]["error_code"] == "PAYMENT_NOT_COMPLETED"
    assert (await manager.require(session_id)).is_paid is False


@pytest.mark.asyncio
async def test_acknowledge_foreign_reference_is_400(client, stripe_adapter):
    session_id = (await _create(client)).json()["sessionId"]

    response = await client.post(
        f"/api/checkout/session/{session_id}/acknowledge",
        json={"provider": "stripe", "payload": {"paymentIntentId": "pi_someone_else"}},
    )

    assert response.status_code == 400
    assert stripe_adapter.confirm_calls == 0


@pytest.mark.asyncio
async def test_acknowledge_unavailable_method_is_400(client, paypal_adapter):
    paypal_adapter.configured = False
    session_id = (await _create(client)).json()["sessionId"]

    response = await client.post(
        f"/api/checkout/session/{session_id}/acknowledge",
        json={"provider": "paypal"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_acknowledge_unknown_session_is_404(client):
    response = await client.post("/api/checkout/session/nope/acknowledge", json={"provider": "stripe"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_paypal_capture_finalizes_session(client, manager):
    session_id = (await _create(client)).json()["sessionId"]
    order_id = f"paypal_{session_id}"

    response = await client.post(f"/api/paypal/orders/{order_id}/capture")

    assert response.status_code == 200
    data = response.json()
    assert data["orderId"] == order_id
    assert data["status"] == "succeeded"
    assert data["captureId"] == f"txn_{order_id}"
    assert data["payerEmail"] == "payer@paypal.example"
    assert data["sessionId"] == session_id
    assert data["result"] == "created"

    session = await manager.require(session_id)
    assert session.confirmation.provider is PaymentProvider.PAYPAL


# Fin del archivo backend/tests/modules/checkout/test_checkout_routes.py

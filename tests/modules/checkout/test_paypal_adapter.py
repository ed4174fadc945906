# -*- coding: utf-8 -*-
"""
backend/tests/modules/checkout/test_paypal_adapter.py

Tests del adaptador PayPal contra un transporte httpx simulado:
- Cache del token OAuth y renovación tras 401
- Reintentos ante errores transitorios
- Respuestas 2xx con cuerpo inválido
- Captura (incluido ORDER_ALREADY_CAPTURED)
- Verificación de webhooks vía API

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import json

import httpx
import pytest

from app.modules.checkout.enums import ChargeState, PaymentProvider
from app.modules.checkout.errors import (
    CaptureFailed,
    ChargeCreationFailed,
    ProviderUnavailable,
    SignatureVerificationFailed,
)
from app.modules.checkout.providers.paypal_adapter import PayPalAdapter
from app.modules.checkout.session_manager import CheckoutSessionManager
from app.shared.config.settings_payments import PaymentsSettings

WEBHOOK_HEADERS = {
    "paypal-transmission-id": "tx-1",
    "paypal-transmission-time": "2026-10-17T10:00:00Z",
    "paypal-transmission-sig": "sig",
    "paypal-cert-url": "https://api.sandbox.paypal.com/cert.pem",
    "paypal-auth-algo": "SHA256withRSA",
}


def _captured_order(order_id: str = "ORDER-1", session_id: str = "sess-1", status: str = "COMPLETED") -> dict:
    return {
        "id": order_id,
        "status": "COMPLETED",
        "payer": {"email_address": "payer@paypal.example"},
        "purchase_units": [
            {
                "custom_id": session_id,
                "payments": {
                    "captures": [
                        {"id": "CAP-1", "status": status, "amount": {"currency_code": "EUR", "value": "40.00"}}
                    ]
                },
            }
        ],
    }


class FakePayPal:
    """Enrutador mínimo de la API REST de PayPal."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.requests: list[httpx.Request] = []
        self.token_requests = 0
        self.responses: dict[tuple[str, str], list[httpx.Response]] = {}

    def queue(self, method: str, path: str, *responses: httpx.Response) -> None:
        self.responses.setdefault((method, path), []).extend(responses)

    def last_request(self, method: str, path: str) -> httpx.Request:
        return [r for r in self.requests if (r.method, r.url.path) == (method, path)][-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.calls.append(key)
        self.requests.append(request)
        if key == ("POST", "/v1/oauth2/token"):
            self.token_requests += 1
            return httpx.Response(200, json={"access_token": f"token-{self.token_requests}", "expires_in": 3600})
        queued = self.responses.get(key)
        if not queued:
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})
        return queued.pop(0)


@pytest.fixture
def paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def settings() -> PaymentsSettings:
    return PaymentsSettings(
        paypal_client_id="client-id",
        paypal_client_secret="client-secret",
        paypal_mode="sandbox",
        paypal_webhook_id="WH-1",
        provider_timeout_seconds=2.0,
    )


@pytest.fixture
def adapter(settings, paypal, sleeps) -> PayPalAdapter:
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    client = httpx.AsyncClient(transport=httpx.MockTransport(paypal))
    return PayPalAdapter(settings, client=client, sleep=_sleep)


@pytest.mark.asyncio
async def test_create_charge_builds_order(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders", httpx.Response(201, json={"id": "ORDER-1", "status": "CREATED"}))

    handle = await adapter.create_charge("sess-1", 4000, "eur")

    assert handle.handle == "ORDER-1"
    assert handle.client == {"orderId": "ORDER-1", "clientId": "client-id"}
    request = paypal.last_request("POST", "/v2/checkout/orders")
    body = json.loads(request.content)
    unit = body["purchase_units"][0]
    assert body["intent"] == "CAPTURE"
    assert unit["custom_id"] == "sess-1"
    assert unit["amount"] == {"currency_code": "EUR", "value": "40.00"}
    assert request.headers["authorization"] == "Bearer token-1"
    assert request.headers["paypal-request-id"] == "checkout-sess-1"


@pytest.mark.asyncio
async def test_token_is_cached(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders", httpx.Response(201, json={"id": "O-1"}), httpx.Response(201, json={"id": "O-2"}))

    await adapter.create_charge("s1", 100, "EUR")
    await adapter.create_charge("s2", 100, "EUR")

    assert paypal.token_requests == 1


@pytest.mark.asyncio
async def test_rejected_token_is_refreshed_once(adapter, paypal):
    paypal.queue(
        "POST",
        "/v2/checkout/orders",
        httpx.Response(401, json={"error": "invalid_token"}),
        httpx.Response(201, json={"id": "O-1"}),
    )

    handle = await adapter.create_charge("s1", 100, "EUR")

    assert handle.handle == "O-1"
    assert paypal.token_requests == 2


@pytest.mark.asyncio
async def test_transient_errors_are_retried(adapter, paypal, sleeps):
    paypal.queue(
        "POST",
        "/v2/checkout/orders",
        httpx.Response(503),
        httpx.Response(429),
        httpx.Response(201, json={"id": "O-1"}),
    )

    handle = await adapter.create_charge("s1", 100, "EUR")

    assert handle.handle == "O-1"
    assert sleeps == [0.5, 4.0]


@pytest.mark.asyncio
async def test_persistent_outage_is_unavailable(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders", *(httpx.Response(503) for _ in range(3)))

    with pytest.raises(ProviderUnavailable):
        await adapter.create_charge("s1", 100, "EUR")


@pytest.mark.asyncio
async def test_rejected_order_is_creation_failure(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders", httpx.Response(422, json={"name": "UNPROCESSABLE_ENTITY"}))

    with pytest.raises(ChargeCreationFailed):
        await adapter.create_charge("s1", 100, "EUR")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(201, text="<html>gateway</html>"),
        httpx.Response(201, json=["ORDER-1"]),
        httpx.Response(201, json={"status": "CREATED"}),
    ],
)
async def test_malformed_order_is_creation_failure(adapter, paypal, response):
    paypal.queue("POST", "/v2/checkout/orders", response)

    with pytest.raises(ChargeCreationFailed):
        await adapter.create_charge("s1", 100, "EUR")


@pytest.mark.asyncio
async def test_malformed_token_response_is_unavailable(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    adapter = PayPalAdapter(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(ProviderUnavailable):
        await adapter.create_charge("s1", 100, "EUR")


@pytest.mark.asyncio
async def test_malformed_order_leaves_other_methods_available(
    adapter, paypal, settings, session_store, make_adapter, selection
):
    paypal.queue("POST", "/v2/checkout/orders", httpx.Response(201, text="<html>gateway</html>"))
    manager = CheckoutSessionManager(
        session_store,
        {PaymentProvider.STRIPE: make_adapter(PaymentProvider.STRIPE), PaymentProvider.PAYPAL: adapter},
        payments_settings=settings,
    )

    session = await manager.create_session(selection, 5, "EUR")

    assert session.available_methods == ["stripe"]
    assert session.provider_errors[0].provider == "paypal"
    assert session.provider_errors[0].error_code == "CHARGE_CREATION_FAILED"


@pytest.mark.asyncio
async def test_unconfigured_adapter_is_unavailable(paypal):
    adapter = PayPalAdapter(
        PaymentsSettings(paypal_client_id=None, paypal_client_secret=None),
        client=httpx.AsyncClient(transport=httpx.MockTransport(paypal)),
    )

    with pytest.raises(ProviderUnavailable):
        await adapter.create_charge("s1", 100, "EUR")
    assert paypal.calls == []


@pytest.mark.asyncio
async def test_capture_completed_order(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders/ORDER-1/capture", httpx.Response(201, json=_captured_order()))

    status = await adapter.confirm_charge("ORDER-1")

    assert status.succeeded
    assert status.handle == "ORDER-1"
    assert status.transaction_id == "CAP-1"
    assert status.session_id == "sess-1"
    assert status.payer_email == "payer@paypal.example"
    assert status.amount_minor == 4000


@pytest.mark.asyncio
async def test_capture_of_already_captured_order(adapter, paypal):
    paypal.queue(
        "POST",
        "/v2/checkout/orders/ORDER-1/capture",
        httpx.Response(422, json={"details": [{"issue": "ORDER_ALREADY_CAPTURED"}]}),
    )
    paypal.queue("GET", "/v2/checkout/orders/ORDER-1", httpx.Response(200, json=_captured_order()))

    status = await adapter.confirm_charge("ORDER-1")

    assert status.succeeded
    assert status.transaction_id == "CAP-1"


@pytest.mark.asyncio
async def test_pending_capture_is_not_succeeded(adapter, paypal):
    paypal.queue(
        "POST",
        "/v2/checkout/orders/ORDER-1/capture",
        httpx.Response(201, json=_captured_order(status="PENDING")),
    )

    status = await adapter.confirm_charge("ORDER-1")

    assert status.state is ChargeState.PROCESSING


@pytest.mark.asyncio
async def test_failed_capture(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders/ORDER-1/capture", httpx.Response(422, json={"name": "ORDER_NOT_APPROVED"}))

    with pytest.raises(CaptureFailed):
        await adapter.confirm_charge("ORDER-1")


@pytest.mark.asyncio
async def test_malformed_capture_is_capture_failure(adapter, paypal):
    paypal.queue("POST", "/v2/checkout/orders/ORDER-1/capture", httpx.Response(201, text="upstream error"))

    with pytest.raises(CaptureFailed):
        await adapter.confirm_charge("ORDER-1")


@pytest.mark.asyncio
async def test_webhook_missing_headers_is_rejected(adapter, paypal):
    body = json.dumps({"id": "WH-EVT", "event_type": "PAYMENT.CAPTURE.COMPLETED", "resource": {}}).encode()

    with pytest.raises(SignatureVerificationFailed):
        await adapter.parse_webhook({}, body)
    assert paypal.calls == []


@pytest.mark.asyncio
async def test_webhook_failed_verification_is_rejected(adapter, paypal):
    paypal.queue(
        "POST",
        "/v1/notifications/verify-webhook-signature",
        httpx.Response(200, json={"verification_status": "FAILURE"}),
    )
    body = json.dumps({"id": "WH-EVT", "event_type": "PAYMENT.CAPTURE.COMPLETED", "resource": {}}).encode()

    with pytest.raises(SignatureVerificationFailed):
        await adapter.parse_webhook(WEBHOOK_HEADERS, body)


@pytest.mark.asyncio
async def test_capture_completed_webhook(adapter, paypal):
    paypal.queue(
        "POST",
        "/v1/notifications/verify-webhook-signature",
        httpx.Response(200, json={"verification_status": "SUCCESS"}),
    )
    body = json.dumps(
        {
            "id": "WH-EVT",
            "event_type": "PAYMENT.CAPTURE.COMPLETED",
            "resource": {
                "id": "CAP-1",
                "status": "COMPLETED",
                "custom_id": "sess-1",
                "supplementary_data": {"related_ids": {"order_id": "ORDER-1"}},
            },
        }
    ).encode()

    event = await adapter.parse_webhook(WEBHOOK_HEADERS, body)
    charge = await adapter.resolve_webhook_event(event)

    assert event.session_id == "sess-1"
    assert charge is not None
    assert charge.handle == "ORDER-1"
    assert charge.transaction_id == "CAP-1"


@pytest.mark.asyncio
async def test_order_approved_webhook_captures(adapter, paypal):
    paypal.queue(
        "POST",
        "/v1/notifications/verify-webhook-signature",
        httpx.Response(200, json={"verification_status": "SUCCESS"}),
    )
    paypal.queue("POST", "/v2/checkout/orders/ORDER-1/capture", httpx.Response(201, json=_captured_order()))
    body = json.dumps(
        {
            "id": "WH-EVT",
            "event_type": "CHECKOUT.ORDER.APPROVED",
            "resource": {"id": "ORDER-1", "purchase_units": [{"custom_id": "sess-1"}]},
        }
    ).encode()

    event = await adapter.parse_webhook(WEBHOOK_HEADERS, body)
    charge = await adapter.resolve_webhook_event(event)

    assert event.charge is None
    assert event.session_id == "sess-1"
    assert charge.succeeded
    assert charge.transaction_id == "CAP-1"
    assert ("POST", "/v2/checkout/orders/ORDER-1/capture") in paypal.calls


# Fin del archivo backend/tests/modules/checkout/test_paypal_adapter.py

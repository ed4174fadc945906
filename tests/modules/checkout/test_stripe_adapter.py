# -*- coding: utf-8 -*-
"""
backend/tests/modules/checkout/test_stripe_adapter.py

Tests del adaptador Stripe con el SDK mockeado.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
import stripe

from app.modules.checkout.enums import ChargeState
from app.modules.checkout.errors import (
    CaptureFailed,
    ChargeCreationFailed,
    ProviderUnavailable,
    SignatureVerificationFailed,
)
from app.modules.checkout.providers.stripe_adapter import StripeAdapter, build_return_url
from app.shared.config.settings_payments import PaymentsSettings

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def settings() -> PaymentsSettings:
    return PaymentsSettings(
        stripe_secret_key="sk_test_123",
        stripe_publishable_key="pk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        provider_timeout_seconds=2.0,
    )


@pytest.fixture
def adapter(settings) -> StripeAdapter:
    return StripeAdapter(settings)


def _sign(body: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.".encode() + body
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def _succeeded_event(session_id: str = "sess-1") -> bytes:
    return json.dumps(
        {
            "id": "evt_1",
            "type": "payment_intent.succeeded",
            "data": {
                "object": {
                    "id": "pi_123",
                    "status": "succeeded",
                    "amount": 4000,
                    "receipt_email": "buyer@example.com",
                    "metadata": {"sessionId": session_id},
                }
            },
        }
    ).encode()


@pytest.mark.asyncio
async def test_create_charge_returns_client_secret(adapter):
    intent = {"id": "pi_123", "client_secret": "pi_123_secret_abc"}

    with patch("stripe.PaymentIntent.create", return_value=intent) as create:
        handle = await adapter.create_charge("sess-1", 4000, "EUR", {"profileId": "p1"})

    assert handle.handle == "pi_123"
    assert handle.client == {
        "clientSecret": "pi_123_secret_abc",
        "publishableKey": "pk_test_123",
        "paymentIntentId": "pi_123",
    }
    kwargs = create.call_args.kwargs
    assert kwargs["amount"] == 4000
    assert kwargs["currency"] == "eur"
    assert kwargs["metadata"] == {"sessionId": "sess-1", "profileId": "p1"}
    assert kwargs["idempotency_key"] == "checkout-sess-1"
    assert kwargs["api_key"] == "sk_test_123"


@pytest.mark.asyncio
async def test_create_charge_maps_sdk_errors(adapter):
    with patch("stripe.PaymentIntent.create", side_effect=stripe.InvalidRequestError("Amount too small", "amount")):
        with pytest.raises(ChargeCreationFailed) as exc_info:
            await adapter.create_charge("sess-1", 1, "EUR")
    assert exc_info.value.message == "Amount too small"

    with patch("stripe.PaymentIntent.create", side_effect=stripe.APIConnectionError("network down")):
        with pytest.raises(ProviderUnavailable):
            await adapter.create_charge("sess-1", 4000, "EUR")


@pytest.mark.asyncio
async def test_unconfigured_adapter_is_unavailable():
    adapter = StripeAdapter(PaymentsSettings(stripe_secret_key=None))

    assert adapter.is_configured is False
    with pytest.raises(ProviderUnavailable):
        await adapter.create_charge("sess-1", 4000, "EUR")


@pytest.mark.asyncio
async def test_confirm_charge_normalizes_intent(adapter):
    intent = {
        "id": "pi_123",
        "status": "succeeded",
        "amount_received": 4000,
        "metadata": {"sessionId": "sess-1"},
        "latest_charge": {"billing_details": {"email": "card@example.com"}},
    }

    with patch("stripe.PaymentIntent.retrieve", return_value=intent) as retrieve:
        status = await adapter.confirm_charge("pi_123")

    assert retrieve.call_args.args == ("pi_123",)
    assert status.succeeded
    assert status.transaction_id == "pi_123"
    assert status.session_id == "sess-1"
    assert status.payer_email == "card@example.com"
    assert status.amount_minor == 4000


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("processing", ChargeState.PROCESSING),
        ("requires_payment_method", ChargeState.PENDING),
        ("requires_action", ChargeState.REQUIRES_ACTION),
        ("canceled", ChargeState.CANCELED),
    ],
)
async def test_confirm_charge_pending_states(adapter, raw, expected):
    with patch("stripe.PaymentIntent.retrieve", return_value={"id": "pi_1", "status": raw}):
        status = await adapter.confirm_charge("pi_1")

    assert status.state is expected
    assert not status.succeeded


@pytest.mark.asyncio
async def test_confirm_charge_sdk_error_is_capture_failed(adapter):
    with patch("stripe.PaymentIntent.retrieve", side_effect=stripe.InvalidRequestError("No such intent", "intent")):
        with pytest.raises(CaptureFailed):
            await adapter.confirm_charge("pi_missing")


@pytest.mark.asyncio
async def test_webhook_with_valid_signature(adapter):
    body = _succeeded_event()

    event = await adapter.parse_webhook({"stripe-signature": _sign(body)}, body)

    assert event.event_type == "payment_intent.succeeded"
    assert event.session_id == "sess-1"
    assert event.charge is not None
    assert event.charge.transaction_id == "pi_123"
    assert event.charge.payer_email == "buyer@example.com"
    assert (await adapter.resolve_webhook_event(event)) == event.charge


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"stripe-signature": "t=1,v1=deadbeef"},
        {"stripe-signature": _sign(b"other body")},
        {"stripe-signature": _sign(_succeeded_event(), secret="whsec_wrong")},
        {"stripe-signature": _sign(_succeeded_event(), timestamp=int(time.time()) - 3600)},
    ],
)
async def test_webhook_with_bad_signature_is_rejected(adapter, headers):
    with pytest.raises(SignatureVerificationFailed):
        await adapter.parse_webhook(headers, _succeeded_event())


@pytest.mark.asyncio
async def test_webhook_without_secret_is_rejected():
    adapter = StripeAdapter(PaymentsSettings(stripe_secret_key="sk_test_123", stripe_webhook_secret=None))
    body = _succeeded_event()

    assert await adapter.verify_webhook_signature({"stripe-signature": _sign(body)}, body) is False


@pytest.mark.asyncio
async def test_non_payment_event_has_no_charge(adapter):
    body = json.dumps({"id": "evt_2", "type": "payment_intent.created", "data": {"object": {"id": "pi_9"}}}).encode()

    event = await adapter.parse_webhook({"stripe-signature": _sign(body)}, body)

    assert event.charge is None
    assert await adapter.resolve_webhook_event(event) is None


def test_build_return_url_keeps_query():
    url = build_return_url("https://yourpixels.example/checkout?lang=es&session=old", "sess-9")

    assert url == "https://yourpixels.example/checkout?lang=es&session=sess-9"


# Fin del archivo backend/tests/modules/checkout/test_stripe_adapter.py

# -*- coding: utf-8 -*-
"""
backend/tests/modules/checkout/test_session_store.py

Tests de CheckoutSessionStore sobre InMemoryStore.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import pytest

from app.modules.checkout.dto import CheckoutSession, Confirmation, ProviderError
from app.modules.checkout.enums import CheckoutSessionStatus, FulfillmentState, PaymentProvider
from app.modules.checkout.store import CheckoutSessionStore
from app.shared.cache import InMemoryStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _session(session_id: str = "sess-1") -> CheckoutSession:
    return CheckoutSession(
        session_id=session_id,
        amount_minor=4000,
        currency="EUR",
        selection_area={"rect": {"x": 0, "y": 0, "w": 50, "h": 20}},
        provider_handles={"stripe": {"handle": "pi_1", "client": {"clientSecret": "s"}}},
        provider_errors=[ProviderError(provider="paypal", message="down", error_code="PROVIDER_UNAVAILABLE")],
    )


@pytest.mark.asyncio
async def test_save_and_load_keeps_all_fields():
    store = CheckoutSessionStore(InMemoryStore())
    session = _session()
    session.status = CheckoutSessionStatus.PAID
    session.confirmation = Confirmation(PaymentProvider.STRIPE, "pi_1", "a@b.com")
    session.fulfillment = FulfillmentState.PERSISTED
    session.purchase_id = "sess-1"

    await store.save(session)
    loaded = await store.load("sess-1")

    assert loaded == session


@pytest.mark.asyncio
async def test_load_missing_returns_none():
    assert await CheckoutSessionStore(InMemoryStore()).load("nope") is None


@pytest.mark.asyncio
async def test_claim_paid_first_wins():
    store = CheckoutSessionStore(InMemoryStore())
    first = Confirmation(PaymentProvider.PAYPAL, "CAP-1")
    second = Confirmation(PaymentProvider.STRIPE, "pi_2")

    assert await store.claim_paid("sess-1", first) == (True, first)
    assert await store.claim_paid("sess-1", second) == (False, first)
    assert await store.get_claim("sess-1") == first
    assert await store.get_claim("other") is None


@pytest.mark.asyncio
async def test_handle_index():
    store = CheckoutSessionStore(InMemoryStore())

    await store.index_handle(PaymentProvider.PAYPAL, "ORDER-1", "sess-1")

    assert await store.find_by_handle(PaymentProvider.PAYPAL, "ORDER-1") == "sess-1"
    assert await store.find_by_handle(PaymentProvider.STRIPE, "ORDER-1") is None


@pytest.mark.asyncio
async def test_expired_sessions_are_swept():
    clock = FakeClock()
    store = CheckoutSessionStore(InMemoryStore(clock=clock), ttl_seconds=60)
    await store.save(_session())
    await store.index_handle(PaymentProvider.STRIPE, "pi_1", "sess-1")

    clock.now += 61

    assert await store.load("sess-1") is None
    assert await store.sweep() == 2


# Fin del archivo backend/tests/modules/checkout/test_session_store.py

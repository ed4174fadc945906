# -*- coding: utf-8 -*-
"""
backend/tests/modules/conftest.py

Fixtures de módulos: adaptador de proveedor falso, session manager,
coordinador y app FastAPI con dependency_overrides.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Mapping, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.modules.checkout.enums import ChargeState, PaymentProvider
from app.modules.checkout.errors import CheckoutError, SignatureVerificationFailed
from app.modules.checkout.finalize_service import FinalizationCoordinator
from app.modules.checkout.providers.base import (
    ChargeHandle,
    ChargeStatus,
    PaymentProviderAdapter,
    WebhookEvent,
)
from app.modules.checkout.session_manager import CheckoutSessionManager
from app.modules.checkout.store import CheckoutSessionStore
from app.modules.presence.tracker import PresenceTracker
from app.shared.cache import InMemoryStore
from app.shared.config.settings_payments import PaymentsSettings
from app.shared.integrations.email_sender import StubEmailSender

FAKE_SIGNATURE_HEADER = "x-fake-signature"
FAKE_VALID_SIGNATURE = "valid"


class FakeAdapter(PaymentProviderAdapter):
    """
    Proveedor en memoria con el contrato completo de un adaptador.

    Webhook: JSON {"type": "charge.succeeded", "handle": ..., "sessionId": ...}
    firmado con el header x-fake-signature=valid.
    """

    def __init__(
        self,
        provider: PaymentProvider,
        *,
        configured: bool = True,
        create_error: Optional[CheckoutError] = None,
        create_delay: float = 0.0,
        charge_state: ChargeState = ChargeState.SUCCEEDED,
        payer_email: Optional[str] = "buyer@example.com",
        timeout_seconds: float = 0.5,
    ):
        super().__init__(timeout_seconds=timeout_seconds)
        self.provider = provider
        self.configured = configured
        self.create_error = create_error
        self.create_delay = create_delay
        self.charge_state = charge_state
        self.payer_email = payer_email
        self.sessions_by_handle: dict[str, str] = {}
        self.create_calls = 0
        self.confirm_calls = 0

    @property
    def is_configured(self) -> bool:
        return self.configured

    def handle_for_session(self, session_id: str) -> str:
        return f"{self.provider.value}_{session_id}"

    async def create_charge(
        self,
        session_id: str,
        amount_minor: int,
        currency: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> ChargeHandle:
        self.ensure_configured()
        self.create_calls += 1
        if self.create_delay:
            await self._bounded(asyncio.sleep(self.create_delay))
        if self.create_error is not None:
            raise self.create_error
        handle = self.handle_for_session(session_id)
        self.sessions_by_handle[handle] = session_id
        return ChargeHandle(provider=self.provider, handle=handle, client={"handle": handle})

    async def confirm_charge(self, handle: str) -> ChargeStatus:
        self.confirm_calls += 1
        return ChargeStatus(
            provider=self.provider,
            handle=handle,
            state=self.charge_state,
            transaction_id=f"txn_{handle}",
            session_id=self.sessions_by_handle.get(handle),
            payer_email=self.payer_email,
        )

    async def verify_webhook_signature(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        return headers.get(FAKE_SIGNATURE_HEADER) == FAKE_VALID_SIGNATURE

    async def parse_webhook(self, headers: Mapping[str, str], raw_body: bytes) -> WebhookEvent:
        if not await self.verify_webhook_signature(headers, raw_body):
            raise SignatureVerificationFailed("bad signature", provider=self.provider.value)
        event = json.loads(raw_body)
        charge = None
        if event.get("type") == "charge.succeeded":
            charge = ChargeStatus(
                provider=self.provider,
                handle=event.get("handle", ""),
                state=ChargeState.SUCCEEDED,
                transaction_id=event.get("transactionId") or f"txn_{event.get('handle')}",
                session_id=event.get("sessionId"),
                payer_email=event.get("payerEmail"),
            )
        return WebhookEvent(
            provider=self.provider,
            event_id=event.get("id"),
            event_type=str(event.get("type")),
            resource_id=event.get("handle"),
            session_id=event.get("sessionId"),
            charge=charge,
        )


@pytest.fixture
def make_adapter():
    """Fábrica de FakeAdapter para escenarios con proveedores a medida."""
    return FakeAdapter


@pytest.fixture
def signed_event():
    """Construye (cuerpo, headers) de un webhook firmado del FakeAdapter."""
    def _build(**event: Any) -> tuple[bytes, dict[str, str]]:
        return json.dumps(event).encode(), {FAKE_SIGNATURE_HEADER: FAKE_VALID_SIGNATURE}
    return _build


@pytest.fixture
def selection() -> dict[str, Any]:
    return {"rect": {"x": 0, "y": 0, "w": 50, "h": 20}}


@pytest.fixture
def payments_settings() -> PaymentsSettings:
    return PaymentsSettings(
        stripe_secret_key=None,
        paypal_client_id=None,
        paypal_client_secret=None,
        default_currency="EUR",
        provider_timeout_seconds=0.5,
        send_payment_confirmation_email=True,
    )


@pytest.fixture
def stripe_adapter() -> FakeAdapter:
    return FakeAdapter(PaymentProvider.STRIPE)


@pytest.fixture
def paypal_adapter() -> FakeAdapter:
    return FakeAdapter(PaymentProvider.PAYPAL, payer_email="payer@paypal.example")


@pytest.fixture
def adapters(stripe_adapter, paypal_adapter) -> dict[PaymentProvider, PaymentProviderAdapter]:
    return {PaymentProvider.STRIPE: stripe_adapter, PaymentProvider.PAYPAL: paypal_adapter}


@pytest.fixture
def session_store() -> CheckoutSessionStore:
    return CheckoutSessionStore(InMemoryStore(default_ttl=3600), ttl_seconds=3600)


@pytest.fixture
def manager(session_store, adapters, payments_settings) -> CheckoutSessionManager:
    return CheckoutSessionManager(session_store, adapters, payments_settings=payments_settings)


@pytest.fixture
def notifier() -> StubEmailSender:
    return StubEmailSender()


@pytest.fixture
def coordinator(manager, notifier) -> FinalizationCoordinator:
    return FinalizationCoordinator(manager, notifier=notifier)


@pytest.fixture
def tracker() -> PresenceTracker:
    return PresenceTracker(InMemoryStore(default_ttl=45), ttl_seconds=45)


@pytest_asyncio.fixture
async def client(session_factory, adapters, manager, coordinator, tracker):
    """Cliente HTTP contra la app con dependencias sustituidas."""
    from app.main import app
    from app.modules.checkout.dependencies import get_adapters, get_coordinator, get_session_manager
    from app.modules.presence.dependencies import get_presence_tracker
    from app.shared.database import get_async_session

    async def _db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = _db
    app.dependency_overrides[get_adapters] = lambda: adapters
    app.dependency_overrides[get_session_manager] = lambda: manager
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    app.dependency_overrides[get_presence_tracker] = lambda: tracker

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as http:
            yield http
    finally:
        app.dependency_overrides.clear()


# Fin del archivo backend/tests/modules/conftest.py

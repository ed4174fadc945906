# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/dependencies.py

Instancias globales del checkout: adaptadores, session manager y
coordinador. En memoria por defecto; el lifespan las reconstruye con
Redis cuando está disponible. Los tests las sustituyen vía
dependency_overrides.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Optional

from app.shared.cache import CacheBackend, InMemoryStore, build_store
from app.shared.config import get_payments_settings, get_settings
from app.shared.integrations.email_sender import EmailSender

from .enums import PaymentProvider
from .finalize_service import FinalizationCoordinator
from .providers import PayPalAdapter, StripeAdapter
from .providers.base import PaymentProviderAdapter
from .session_manager import CheckoutSessionManager
from .store import CheckoutSessionStore

logger = logging.getLogger(__name__)

_adapters: Optional[dict[PaymentProvider, PaymentProviderAdapter]] = None
_manager: Optional[CheckoutSessionManager] = None
_coordinator: Optional[FinalizationCoordinator] = None


def get_adapters() -> dict[PaymentProvider, PaymentProviderAdapter]:
    global _adapters
    if _adapters is None:
        settings = get_payments_settings()
        _adapters = {
            PaymentProvider.STRIPE: StripeAdapter(settings),
            PaymentProvider.PAYPAL: PayPalAdapter(settings),
        }
    return _adapters


def _build_manager(backend: CacheBackend) -> CheckoutSessionManager:
    settings = get_payments_settings()
    store = CheckoutSessionStore(backend, ttl_seconds=settings.checkout_session_ttl_seconds)
    return CheckoutSessionManager(store, get_adapters(), payments_settings=settings)


def get_session_manager() -> CheckoutSessionManager:
    global _manager
    if _manager is None:
        ttl = get_payments_settings().checkout_session_ttl_seconds
        _manager = _build_manager(InMemoryStore(default_ttl=ttl))
    return _manager


def get_coordinator() -> FinalizationCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = FinalizationCoordinator(
            get_session_manager(),
            notifier=EmailSender.from_settings(get_settings()),
            send_confirmation=get_payments_settings().send_payment_confirmation_email,
        )
    return _coordinator


def get_adapter(provider: PaymentProvider) -> PaymentProviderAdapter:
    return get_adapters()[provider]


async def init_checkout(backend: Optional[CacheBackend] = None) -> CheckoutSessionManager:
    """Construye el checkout con el backend disponible (lifespan)."""
    global _manager, _coordinator
    ttl = get_payments_settings().checkout_session_ttl_seconds
    backend = backend or await build_store("checkout", default_ttl=ttl)
    _manager = _build_manager(backend)
    _coordinator = None
    configured = [p.value for p, a in get_adapters().items() if a.is_configured]
    logger.info("checkout_initialized providers=%s", ",".join(configured) or "none")
    return _manager


async def shutdown_checkout() -> None:
    global _adapters
    if _adapters is None:
        return
    for adapter in _adapters.values():
        await adapter.aclose()
    _adapters = None


def reset_checkout() -> None:
    global _adapters, _manager, _coordinator
    _adapters = None
    _manager = None
    _coordinator = None


__all__ = [
    "get_adapter",
    "get_adapters",
    "get_coordinator",
    "get_session_manager",
    "init_checkout",
    "reset_checkout",
    "shutdown_checkout",
]

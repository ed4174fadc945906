# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/providers/stripe_adapter.py

Adaptador Stripe (tarjeta y wallets) sobre PaymentIntents.

- create_charge: PaymentIntent con automatic_payment_methods y
  metadata.sessionId; el navegador confirma con el client_secret
- confirm_charge: PaymentIntent.retrieve para verificar del lado servidor
- webhooks: stripe.Webhook.construct_event con el signing secret

El SDK es bloqueante: cada llamada corre en threadpool con límite de tiempo.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

import stripe
from fastapi.concurrency import run_in_threadpool

from app.shared.config.settings_payments import PaymentsSettings

from ..enums import ChargeState, PaymentProvider
from ..errors import CaptureFailed, ChargeCreationFailed, ProviderUnavailable, SignatureVerificationFailed
from .base import ChargeHandle, ChargeStatus, PaymentProviderAdapter, WebhookEvent
from .security import allow_insecure_webhooks

logger = logging.getLogger(__name__)

SUCCEEDED_EVENT = "payment_intent.succeeded"

_STATE_MAP = {
    "succeeded": ChargeState.SUCCEEDED,
    "processing": ChargeState.PROCESSING,
    "requires_action": ChargeState.REQUIRES_ACTION,
    "requires_payment_method": ChargeState.PENDING,
    "requires_confirmation": ChargeState.PENDING,
    "requires_capture": ChargeState.PROCESSING,
    "canceled": ChargeState.CANCELED,
}


def _as_dict(obj: Any) -> dict[str, Any]:
    """StripeObject o dict -> dict plano."""
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return {}


def build_return_url(base_url: str, session_id: str) -> str:
    """
    URL de retorno para métodos con redirección (wallets): conserva la
    query existente y añade `session` para re-correlacionar al volver.
    """
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "session"]
    query.append(("session", session_id))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class StripeAdapter(PaymentProviderAdapter):
    """Proveedor de tarjeta/wallet."""

    provider = PaymentProvider.STRIPE

    def __init__(self, settings: PaymentsSettings):
        super().__init__(timeout_seconds=settings.provider_timeout_seconds)
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return self.settings.stripe_configured

    def _normalize_intent(self, intent: Any) -> ChargeStatus:
        data = _as_dict(intent)
        metadata = _as_dict(data.get("metadata"))
        latest_charge = _as_dict(data.get("latest_charge")) if not isinstance(data.get("latest_charge"), str) else {}
        billing = _as_dict(latest_charge.get("billing_details"))
        payer_email = data.get("receipt_email") or billing.get("email")

        raw_status = str(data.get("status") or "")
        state = _STATE_MAP.get(raw_status, ChargeState.FAILED if data.get("last_payment_error") else ChargeState.PENDING)
        return ChargeStatus(
            provider=self.provider,
            handle=data.get("id", ""),
            state=state,
            transaction_id=data.get("id", ""),
            session_id=metadata.get("sessionId"),
            payer_email=payer_email,
            amount_minor=data.get("amount_received") or data.get("amount"),
        )

    async def create_charge(
        self,
        session_id: str,
        amount_minor: int,
        currency: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> ChargeHandle:
        self.ensure_configured()

        intent_metadata = {"sessionId": session_id}
        for key, value in (metadata or {}).items():
            intent_metadata.setdefault(key, str(value)[:500])

        logger.info("stripe_create_intent session_id=%s amount_minor=%d currency=%s", session_id, amount_minor, currency)
        try:
            intent = await self._bounded(
                run_in_threadpool(
                    stripe.PaymentIntent.create,
                    api_key=self.settings.stripe_secret_key,
                    amount=amount_minor,
                    currency=currency.lower(),
                    automatic_payment_methods={"enabled": True},
                    metadata=intent_metadata,
                    idempotency_key=f"checkout-{session_id}",
                )
            )
        except stripe.APIConnectionError as e:
            raise ProviderUnavailable("Stripe is unreachable", provider=self.provider.value) from e
        except stripe.StripeError as e:
            logger.warning("stripe_create_intent_failed session_id=%s error=%s", session_id, e.user_message or e)
            raise ChargeCreationFailed(
                e.user_message or "Stripe could not create the payment",
                provider=self.provider.value,
            ) from e

        data = _as_dict(intent)
        return ChargeHandle(
            provider=self.provider,
            handle=data["id"],
            client={
                "clientSecret": data.get("client_secret"),
                "publishableKey": self.settings.stripe_publishable_key,
                "paymentIntentId": data["id"],
            },
        )

    async def confirm_charge(self, handle: str) -> ChargeStatus:
        self.ensure_configured()
        try:
            intent = await self._bounded(
                run_in_threadpool(
                    stripe.PaymentIntent.retrieve,
                    handle,
                    api_key=self.settings.stripe_secret_key,
                    expand=["latest_charge"],
                )
            )
        except stripe.APIConnectionError as e:
            raise ProviderUnavailable("Stripe is unreachable", provider=self.provider.value) from e
        except stripe.StripeError as e:
            logger.warning("stripe_retrieve_failed intent=%s error=%s", handle, e)
            raise CaptureFailed("Stripe could not confirm the payment", provider=self.provider.value) from e
        return self._normalize_intent(intent)

    async def verify_webhook_signature(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        secret = self.settings.stripe_webhook_secret
        signature = headers.get("stripe-signature")
        if not secret or not signature:
            logger.warning("stripe_webhook_rejected reason=%s", "no_secret" if not secret else "no_signature")
            return False
        try:
            stripe.Webhook.construct_event(
                raw_body,
                signature,
                secret,
                tolerance=self.settings.stripe_webhook_tolerance_seconds,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("stripe_webhook_rejected reason=bad_signature error=%s", e)
            return False
        except ValueError as e:
            logger.warning("stripe_webhook_rejected reason=bad_payload error=%s", e)
            return False
        return True

    async def parse_webhook(self, headers: Mapping[str, str], raw_body: bytes) -> WebhookEvent:
        if not allow_insecure_webhooks(self.settings):
            if not await self.verify_webhook_signature(headers, raw_body):
                raise SignatureVerificationFailed("Invalid Stripe signature", provider=self.provider.value)

        # El cuerpo ya está autenticado; se normaliza desde el JSON crudo
        try:
            event = json.loads(raw_body)
        except ValueError as e:
            raise SignatureVerificationFailed("Malformed Stripe payload", provider=self.provider.value) from e

        event_type = str(event.get("type") or "")
        obj = ((event.get("data") or {}).get("object")) or {}
        charge = None
        if event_type == SUCCEEDED_EVENT:
            charge = self._normalize_intent(obj)

        return WebhookEvent(
            provider=self.provider,
            event_id=event.get("id"),
            event_type=event_type,
            resource_id=obj.get("id"),
            session_id=(obj.get("metadata") or {}).get("sessionId"),
            charge=charge,
        )


__all__ = ["StripeAdapter", "build_return_url"]

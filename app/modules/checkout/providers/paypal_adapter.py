# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/providers/paypal_adapter.py

Adaptador PayPal (REST v2 Orders) sobre httpx.AsyncClient compartido.

- create_charge: orden intent=CAPTURE con custom_id=sessionId
- confirm_charge: captura la orden aprobada (idempotente: si ya estaba
  capturada, se consulta la orden)
- webhooks: verificación vía API /v1/notifications/verify-webhook-signature

Características:
- Cache de access token OAuth2 con TTL (expires_in - 60s)
- Retry corto con backoff para errores transitorios (429, 502, 503, 504, timeout)
- Un 401 invalida el token y reintenta una vez

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

import httpx

from app.shared.config.settings_payments import PaymentsSettings

from ..enums import ChargeState, PaymentProvider
from ..errors import CaptureFailed, ChargeCreationFailed, ProviderUnavailable, SignatureVerificationFailed
from .base import ChargeHandle, ChargeStatus, PaymentProviderAdapter, WebhookEvent
from .security import allow_insecure_webhooks

logger = logging.getLogger(__name__)

TRANSIENT_HTTP_ERRORS = frozenset({429, 502, 503, 504})
MAX_RETRIES = 2
BACKOFF_BASE_SECONDS = 0.5
BACKOFF_429_SECONDS = 2.0
TOKEN_EXPIRY_MARGIN_SECONDS = 60

ORDER_APPROVED_EVENT = "CHECKOUT.ORDER.APPROVED"
CAPTURE_COMPLETED_EVENT = "PAYMENT.CAPTURE.COMPLETED"

# Headers requeridos por el endpoint de verificación
_VERIFY_HEADERS = {
    "transmission_id": "paypal-transmission-id",
    "transmission_time": "paypal-transmission-time",
    "transmission_sig": "paypal-transmission-sig",
    "cert_url": "paypal-cert-url",
    "auth_algo": "paypal-auth-algo",
}

_CAPTURE_STATE_MAP = {
    "COMPLETED": ChargeState.SUCCEEDED,
    "PENDING": ChargeState.PROCESSING,
    "DECLINED": ChargeState.FAILED,
    "FAILED": ChargeState.FAILED,
}


def _format_amount(amount_minor: int) -> str:
    return str((Decimal(amount_minor) / Decimal(100)).quantize(Decimal("0.01")))


def _backoff_for(status_code: Optional[int], attempt: int) -> float:
    base = BACKOFF_429_SECONDS if status_code == 429 else BACKOFF_BASE_SECONDS
    return base * (2 ** attempt)


def _json_object(response: httpx.Response) -> Optional[dict[str, Any]]:
    """Cuerpo JSON de la respuesta si es un objeto; None si no lo es."""
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


class PayPalAdapter(PaymentProviderAdapter):
    """Proveedor PayPal."""

    provider = PaymentProvider.PAYPAL

    def __init__(
        self,
        settings: PaymentsSettings,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        super().__init__(timeout_seconds=settings.provider_timeout_seconds)
        self.settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.provider_timeout_seconds, connect=5.0),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        self._clock = clock
        self._sleep = sleep
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        return self.settings.paypal_configured

    @property
    def base_url(self) -> str:
        return self.settings.paypal_base_url

    # ---------------------------------------------------------------
    # Transporte
    # ---------------------------------------------------------------

    def invalidate_token(self) -> None:
        self._token = None
        self._token_expires_at = 0.0

    async def _get_access_token(self) -> str:
        async with self._token_lock:
            if self._token and self._clock() < self._token_expires_at:
                return self._token

            response = await self._send(
                "POST",
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self.settings.paypal_client_id or "", self.settings.paypal_client_secret or ""),
            )
            if response.status_code != 200:
                logger.error("paypal_token_failed status=%d", response.status_code)
                raise ProviderUnavailable("PayPal authentication failed", provider=self.provider.value)

            payload = _json_object(response) or {}
            token = payload.get("access_token")
            try:
                expires_in = int(payload.get("expires_in", 3600))
            except (TypeError, ValueError):
                expires_in = 0
            if not token:
                logger.error("paypal_token_malformed_response")
                raise ProviderUnavailable("PayPal authentication failed", provider=self.provider.value)
            self._token = str(token)
            self._token_expires_at = self._clock() + max(0, expires_in - TOKEN_EXPIRY_MARGIN_SECONDS)
            logger.debug("paypal_token_cached expires_in=%ds", expires_in)
            return self._token

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Request con retry para errores transitorios."""
        url = f"{self.base_url}{path}"
        last_status: Optional[int] = None
        for attempt in range(MAX_RETRIES + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                last_status = None
                logger.warning("paypal_timeout path=%s attempt=%d", path, attempt + 1)
                if attempt >= MAX_RETRIES:
                    raise ProviderUnavailable("PayPal timed out", provider=self.provider.value) from e
            except httpx.HTTPError as e:
                logger.warning("paypal_transport_error path=%s error=%s", path, e)
                raise ProviderUnavailable("PayPal is unreachable", provider=self.provider.value) from e
            else:
                if response.status_code not in TRANSIENT_HTTP_ERRORS:
                    return response
                last_status = response.status_code
                logger.warning(
                    "paypal_transient_error path=%s status=%d attempt=%d",
                    path, response.status_code, attempt + 1,
                )
                if attempt >= MAX_RETRIES:
                    return response
            await self._sleep(_backoff_for(last_status, attempt))
        raise ProviderUnavailable("PayPal is unavailable", provider=self.provider.value)

    async def _api(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Request autenticada; un 401 renueva el token una vez."""
        extra_headers = kwargs.pop("headers", {}) or {}
        for attempt in range(2):
            token = await self._get_access_token()
            headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json", **extra_headers}
            response = await self._send(method, path, headers=headers, **kwargs)
            if response.status_code == 401 and attempt == 0:
                logger.info("paypal_token_rejected path=%s; refreshing", path)
                self.invalidate_token()
                continue
            return response
        return response

    # ---------------------------------------------------------------
    # Normalización
    # ---------------------------------------------------------------

    def _status_from_order(self, order: Mapping[str, Any]) -> ChargeStatus:
        units = order.get("purchase_units") or [{}]
        unit = units[0] or {}
        captures = ((unit.get("payments") or {}).get("captures")) or []
        capture = captures[0] if captures else {}

        if capture:
            state = _CAPTURE_STATE_MAP.get(str(capture.get("status", "")).upper(), ChargeState.PENDING)
        elif str(order.get("status", "")).upper() == "VOIDED":
            state = ChargeState.CANCELED
        else:
            state = ChargeState.PENDING

        payer_email = (
            (capture.get("payer") or {}).get("email_address")
            or (order.get("payer") or {}).get("email_address")
            or ((order.get("payment_source") or {}).get("paypal") or {}).get("email_address")
        )
        amount_value = ((capture.get("amount") or unit.get("amount")) or {}).get("value")
        amount_minor = int(Decimal(amount_value) * 100) if amount_value else None

        return ChargeStatus(
            provider=self.provider,
            handle=order.get("id", ""),
            state=state,
            transaction_id=capture.get("id") or order.get("id", ""),
            session_id=unit.get("custom_id") or unit.get("reference_id"),
            payer_email=payer_email,
            amount_minor=amount_minor,
        )

    # ---------------------------------------------------------------
    # Capacidades
    # ---------------------------------------------------------------

    async def create_charge(
        self,
        session_id: str,
        amount_minor: int,
        currency: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> ChargeHandle:
        self.ensure_configured()
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": session_id,
                    "custom_id": session_id,
                    "description": "Buy Your Pixels order",
                    "amount": {"currency_code": currency.upper(), "value": _format_amount(amount_minor)},
                }
            ],
        }
        logger.info("paypal_create_order session_id=%s amount_minor=%d currency=%s", session_id, amount_minor, currency)
        response = await self._bounded(
            self._api("POST", "/v2/checkout/orders", json=body, headers={"PayPal-Request-Id": f"checkout-{session_id}"})
        )
        if response.status_code not in (200, 201):
            logger.warning("paypal_create_order_failed session_id=%s status=%d", session_id, response.status_code)
            if response.status_code in TRANSIENT_HTTP_ERRORS:
                raise ProviderUnavailable("PayPal is unavailable", provider=self.provider.value)
            raise ChargeCreationFailed("PayPal could not create the order", provider=self.provider.value)

        order = _json_object(response) or {}
        order_id = order.get("id")
        if not order_id:
            logger.warning("paypal_create_order_malformed session_id=%s", session_id)
            raise ChargeCreationFailed("PayPal returned an invalid order", provider=self.provider.value)
        return ChargeHandle(
            provider=self.provider,
            handle=order_id,
            client={"orderId": order_id, "clientId": self.settings.paypal_client_id},
        )

    async def get_order(self, order_id: str) -> dict[str, Any]:
        self.ensure_configured()
        response = await self._bounded(self._api("GET", f"/v2/checkout/orders/{order_id}"))
        if response.status_code != 200:
            logger.warning("paypal_get_order_failed order=%s status=%d", order_id, response.status_code)
            if response.status_code in TRANSIENT_HTTP_ERRORS:
                raise ProviderUnavailable("PayPal is unavailable", provider=self.provider.value)
            raise CaptureFailed("PayPal order could not be retrieved", provider=self.provider.value)
        order = _json_object(response)
        if order is None:
            logger.warning("paypal_get_order_malformed order=%s", order_id)
            raise CaptureFailed("PayPal returned an invalid order", provider=self.provider.value)
        return order

    async def confirm_charge(self, handle: str) -> ChargeStatus:
        self.ensure_configured()
        response = await self._bounded(
            self._api("POST", f"/v2/checkout/orders/{handle}/capture", headers={"PayPal-Request-Id": f"capture-{handle}"})
        )
        if response.status_code in (200, 201):
            order = _json_object(response)
            if order is None:
                logger.warning("paypal_capture_malformed order=%s", handle)
                raise CaptureFailed("PayPal returned an invalid capture", provider=self.provider.value)
            return self._status_from_order(order)

        if response.status_code == 422 and "ORDER_ALREADY_CAPTURED" in response.text:
            logger.info("paypal_order_already_captured order=%s", handle)
            return self._status_from_order(await self.get_order(handle))

        logger.warning("paypal_capture_failed order=%s status=%d", handle, response.status_code)
        if response.status_code in TRANSIENT_HTTP_ERRORS:
            raise ProviderUnavailable("PayPal is unavailable", provider=self.provider.value)
        raise CaptureFailed("PayPal could not capture the order", provider=self.provider.value)

    async def verify_webhook_signature(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        lowered = {k.lower(): v for k, v in headers.items()}
        values = {field: lowered.get(header) for field, header in _VERIFY_HEADERS.items()}
        missing = [field for field, value in values.items() if not value]
        if missing:
            logger.warning("paypal_webhook_rejected reason=missing_headers headers=%s", missing)
            return False

        webhook_id = self.settings.paypal_webhook_id
        if not webhook_id or not self.is_configured:
            logger.warning("paypal_webhook_rejected reason=not_configured")
            return False

        try:
            webhook_event = json.loads(raw_body)
        except ValueError:
            logger.warning("paypal_webhook_rejected reason=bad_payload")
            return False

        body = {**values, "webhook_id": webhook_id, "webhook_event": webhook_event}
        try:
            response = await self._bounded(
                self._api("POST", "/v1/notifications/verify-webhook-signature", json=body)
            )
        except ProviderUnavailable:
            logger.warning("paypal_webhook_verify_unavailable")
            return False

        if response.status_code != 200:
            logger.warning("paypal_webhook_verify_failed status=%d", response.status_code)
            return False

        verification_status = (_json_object(response) or {}).get("verification_status")
        if verification_status != "SUCCESS":
            logger.warning("paypal_webhook_rejected reason=verification_status value=%s", verification_status)
            return False
        return True

    async def parse_webhook(self, headers: Mapping[str, str], raw_body: bytes) -> WebhookEvent:
        if not allow_insecure_webhooks(self.settings):
            if not await self.verify_webhook_signature(headers, raw_body):
                raise SignatureVerificationFailed("Invalid PayPal signature", provider=self.provider.value)

        try:
            event = json.loads(raw_body)
        except ValueError as e:
            raise SignatureVerificationFailed("Malformed PayPal payload", provider=self.provider.value) from e

        event_type = str(event.get("event_type") or "")
        resource = event.get("resource") or {}
        session_id = resource.get("custom_id")
        charge = None

        if event_type == ORDER_APPROVED_EVENT:
            units = resource.get("purchase_units") or [{}]
            session_id = (units[0] or {}).get("custom_id") or (units[0] or {}).get("reference_id")
        elif event_type == CAPTURE_COMPLETED_EVENT:
            related = ((resource.get("supplementary_data") or {}).get("related_ids")) or {}
            charge = ChargeStatus(
                provider=self.provider,
                handle=related.get("order_id") or resource.get("id", ""),
                state=_CAPTURE_STATE_MAP.get(str(resource.get("status", "COMPLETED")).upper(), ChargeState.PENDING),
                transaction_id=resource.get("id", ""),
                session_id=session_id,
                payer_email=(resource.get("payer") or {}).get("email_address"),
            )

        return WebhookEvent(
            provider=self.provider,
            event_id=event.get("id"),
            event_type=event_type,
            resource_id=resource.get("id"),
            session_id=session_id,
            charge=charge,
        )

    async def resolve_webhook_event(self, event: WebhookEvent) -> Optional[ChargeStatus]:
        """
        CHECKOUT.ORDER.APPROVED no implica captura: se captura la orden
        aprobada (idempotente) y solo se acepta si quedó COMPLETED.
        """
        if event.event_type == ORDER_APPROVED_EVENT and event.resource_id:
            status = await self.confirm_charge(event.resource_id)
            return status if status.succeeded else None
        return await super().resolve_webhook_event(event)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["PayPalAdapter", "TRANSIENT_HTTP_ERRORS"]

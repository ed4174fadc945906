# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/webhook_service.py

Procesamiento de webhooks de proveedores.

Desenlaces:
- rejected:        firma ausente/inválida; se descarta sin efectos
- ignored:         evento autenticado que no implica un cobro completado
- unknown_session: el cobro no corresponde a una sesión viva
- capture_failed:  la orden aprobada no pudo capturarse
- processed:       se finalizó (o ya estaba finalizada) la sesión

ProviderUnavailable y PersistenceFailure se propagan: son reintentables y
la ruta responde no-2xx para que el proveedor reintente.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .dto import FinalizeResult
from .errors import CaptureFailed, SessionNotFound, SignatureVerificationFailed
from .finalize_service import FinalizationCoordinator
from .metrics import checkout_webhook_events_total
from .providers.base import PaymentProviderAdapter

logger = logging.getLogger(__name__)


@dataclass
class WebhookOutcome:
    outcome: str
    event_type: Optional[str] = None
    session_id: Optional[str] = None
    result: Optional[FinalizeResult] = None

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"received": True, "outcome": self.outcome}
        if self.event_type:
            body["eventType"] = self.event_type
        if self.result is not None:
            body["result"] = self.result.result
            if self.result.warning:
                body["warning"] = self.result.warning
        return body


async def process_webhook(
    adapter: PaymentProviderAdapter,
    coordinator: FinalizationCoordinator,
    db: AsyncSession,
    headers: Mapping[str, str],
    raw_body: bytes,
) -> WebhookOutcome:
    provider = adapter.provider.value

    def _done(outcome: WebhookOutcome) -> WebhookOutcome:
        checkout_webhook_events_total.labels(provider=provider, outcome=outcome.outcome).inc()
        return outcome

    try:
        event = await adapter.parse_webhook(headers, raw_body)
    except SignatureVerificationFailed as e:
        logger.warning("webhook_signature_rejected provider=%s reason=%s", provider, e.message)
        return _done(WebhookOutcome("rejected"))

    logger.info("webhook_received provider=%s event_id=%s type=%s", provider, event.event_id, event.event_type)

    try:
        charge = await adapter.resolve_webhook_event(event)
    except CaptureFailed as e:
        logger.warning("webhook_capture_failed provider=%s resource=%s error=%s", provider, event.resource_id, e.message)
        return _done(WebhookOutcome("capture_failed", event_type=event.event_type, session_id=event.session_id))

    if charge is None:
        logger.debug("webhook_ignored provider=%s type=%s", provider, event.event_type)
        return _done(WebhookOutcome("ignored", event_type=event.event_type))

    session_id = charge.session_id or event.session_id
    if not session_id and charge.handle:
        session_id = await coordinator.sessions.find_session_id_by_handle(adapter.provider, charge.handle)
    if not session_id:
        logger.warning("webhook_unknown_session provider=%s txn=%s", provider, charge.transaction_id)
        return _done(WebhookOutcome("unknown_session", event_type=event.event_type))

    try:
        result = await coordinator.finalize(
            db,
            session_id,
            adapter.provider,
            charge.transaction_id,
            charge.payer_email,
        )
    except SessionNotFound:
        logger.warning(
            "webhook_unknown_session provider=%s session_id=%s txn=%s",
            provider, session_id, charge.transaction_id,
        )
        return _done(WebhookOutcome("unknown_session", event_type=event.event_type, session_id=session_id))

    return _done(WebhookOutcome("processed", event_type=event.event_type, session_id=session_id, result=result))


__all__ = ["WebhookOutcome", "process_webhook"]

# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/finalize_service.py

Punto de convergencia de las confirmaciones de pago.

Cualquiera de los caminos (acknowledge del cliente, webhook del proveedor,
captura de orden PayPal) termina en `finalize`. La operación es idempotente
y conmutativa respecto al orden y la duplicación de esos caminos:

1. Sesión inexistente -> SessionNotFound
2. Reclamo atómico pending -> paid; si otro ya ganó, no se re-persiste
   salvo que su persistencia no haya quedado registrada
3. La compra se escribe con payment_intent_id = transacción; la
   restricción única en BD es el árbitro final ante carreras
4. Selección inválida: la sesión queda pagada y se devuelve
   needs_follow_up (nunca se revierte un pago por un problema de datos)

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.purchases.services import PurchaseDraft, PurchaseLedger
from app.modules.purchases.validators import InvalidSelection, screen_content
from app.shared.integrations.email_sender import IEmailSender, NullEmailSender

from .dto import CheckoutSession, Confirmation, FinalizeResult
from .enums import FulfillmentState, PaymentProvider
from .errors import PersistenceConflict
from .metrics import checkout_finalize_total
from .selection import resolve_selection
from .session_manager import CheckoutSessionManager

logger = logging.getLogger(__name__)

FOLLOW_UP_WARNING = "payment succeeded, manual follow-up needed"
CONFIRMATION_TEMPLATE = "purchase_confirmation"


class FinalizationCoordinator:
    """Marca la sesión como pagada y registra la compra exactamente una vez."""

    def __init__(
        self,
        sessions: CheckoutSessionManager,
        ledger: Optional[PurchaseLedger] = None,
        notifier: Optional[IEmailSender] = None,
        send_confirmation: bool = True,
    ):
        self.sessions = sessions
        self.ledger = ledger or PurchaseLedger()
        self.notifier = notifier or NullEmailSender()
        self.send_confirmation = send_confirmation

    def _result(
        self,
        result: str,
        session_id: str,
        confirmation: Confirmation,
        purchase_id: Optional[str] = None,
        warning: Optional[str] = None,
    ) -> FinalizeResult:
        checkout_finalize_total.labels(provider=confirmation.provider.value, result=result).inc()
        logger.info(
            "checkout_finalized session_id=%s provider=%s txn=%s result=%s purchase_id=%s",
            session_id, confirmation.provider.value, confirmation.transaction_id, result, purchase_id,
        )
        return FinalizeResult(
            result=result,
            session_id=session_id,
            provider=confirmation.provider,
            transaction_id=confirmation.transaction_id,
            purchase_id=purchase_id,
            warning=warning,
        )

    async def finalize(
        self,
        db: AsyncSession,
        session_id: str,
        provider: PaymentProvider,
        transaction_id: str,
        payer_email: Optional[str] = None,
    ) -> FinalizeResult:
        """
        Raises:
            SessionNotFound: Sesión desconocida o expirada
            PersistenceFailure: Error transitorio de BD (la sesión queda pagada;
                una nueva llamada reintenta la persistencia)
        """
        attempted = Confirmation(provider=provider, transaction_id=transaction_id, payer_email=payer_email)
        mark = await self.sessions.mark_paid(session_id, attempted)
        session = await self.sessions.require(session_id)

        if not mark.won:
            winner = mark.confirmation
            if session.fulfillment is FulfillmentState.PERSISTED:
                return self._result("already_paid", session_id, winner, purchase_id=session.purchase_id)
            if session.fulfillment is FulfillmentState.NEEDS_FOLLOW_UP:
                return self._result("already_paid", session_id, winner, warning=FOLLOW_UP_WARNING)

            existing = await self.ledger.get_by_transaction(db, winner.transaction_id)
            if existing is not None:
                await self.sessions.set_fulfillment(session_id, FulfillmentState.PERSISTED, purchase_id=existing.id)
                return self._result("already_paid", session_id, winner, purchase_id=existing.id)

            # Pagada sin compra registrada: se reintenta con la confirmación ganadora
            logger.info("checkout_finalize_retry_persist session_id=%s txn=%s", session_id, winner.transaction_id)
            return await self._persist(db, session, winner, first_attempt=False)

        return await self._persist(db, session, attempted, first_attempt=True)

    async def _persist(
        self,
        db: AsyncSession,
        session: CheckoutSession,
        confirmation: Confirmation,
        first_attempt: bool,
    ) -> FinalizeResult:
        session_id = session.session_id
        try:
            selection = resolve_selection(session.selection_area, session.metadata)
        except InvalidSelection as e:
            logger.error(
                "checkout_selection_invalid session_id=%s txn=%s error=%s",
                session_id, confirmation.transaction_id, e,
            )
            await self.sessions.set_fulfillment(session_id, FulfillmentState.NEEDS_FOLLOW_UP)
            return self._result("needs_follow_up", session_id, confirmation, warning=FOLLOW_UP_WARNING)

        content = screen_content(session.metadata)
        for warning in content.warnings:
            logger.warning("checkout_content_warning session_id=%s %s", session_id, warning)

        draft = PurchaseDraft(
            id=session_id,
            selection=selection,
            price=session.price,
            currency=session.currency,
            provider=confirmation.provider.value,
            payment_intent_id=confirmation.transaction_id,
            payer_email=confirmation.payer_email,
            profile_id=session.profile_id,
            content=content,
        )

        try:
            outcome = await self.ledger.record_purchase(db, draft)
        except PersistenceConflict as e:
            existing_id = (e.details or {}).get("existing_purchase_id")
            logger.warning(
                "checkout_duplicate_transaction session_id=%s txn=%s existing_purchase_id=%s",
                session_id, confirmation.transaction_id, existing_id,
            )
            await self.sessions.set_fulfillment(session_id, FulfillmentState.PERSISTED, purchase_id=existing_id)
            return self._result("duplicate", session_id, confirmation, purchase_id=existing_id)

        purchase = outcome.purchase
        await self.sessions.set_fulfillment(session_id, FulfillmentState.PERSISTED, purchase_id=purchase.id)

        if outcome.result == "already_recorded":
            return self._result("already_paid", session_id, confirmation, purchase_id=purchase.id)

        await self._notify(session, confirmation, purchase.id, selection.area)
        if not first_attempt:
            logger.info("checkout_persist_recovered session_id=%s purchase_id=%s", session_id, purchase.id)
        return self._result("created", session_id, confirmation, purchase_id=purchase.id)

    async def _notify(
        self,
        session: CheckoutSession,
        confirmation: Confirmation,
        purchase_id: str,
        pixels: int,
    ) -> None:
        """Confirmación al comprador; nunca propaga errores."""
        if not self.send_confirmation or not confirmation.payer_email:
            return
        try:
            await self.notifier.send(
                CONFIRMATION_TEMPLATE,
                confirmation.payer_email,
                {
                    "purchaseId": purchase_id,
                    "pixels": pixels,
                    "amount": str(session.price),
                    "currency": session.currency,
                    "provider": confirmation.provider.value,
                },
            )
        except Exception as e:
            logger.warning("purchase_confirmation_email_failed purchase_id=%s error=%s", purchase_id, e)


__all__ = ["FOLLOW_UP_WARNING", "FinalizationCoordinator"]

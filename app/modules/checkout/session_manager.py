# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/session_manager.py

Registro de sesiones de checkout.

Correlaciona la selección y el precio con los handles de cada proveedor
y es la única fuente de verdad de "esta sesión ya se pagó".

Reglas:
- Cada proveedor preautoriza de forma independiente y concurrente, con
  límite de tiempo propio; el fallo de uno se registra como provider
  error y no aborta la sesión
- NoPaymentMethodsAvailable solo si fallan todos
- mark_paid es la única transición de estado (pending -> paid) y es
  idempotente: el reclamo atómico en el store decide un único ganador

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional

from app.modules.purchases.validators import InvalidSelection, parse_rect
from app.shared.config.settings_payments import PaymentsSettings, get_payments_settings

from .dto import CheckoutSession, Confirmation, MarkPaidResult, ProviderError
from .enums import CheckoutSessionStatus, FulfillmentState, PaymentProvider
from .errors import CheckoutError, InvalidRequest, NoPaymentMethodsAvailable, ProviderUnavailable, SessionNotFound
from .metrics import checkout_provider_errors_total, checkout_sessions_created_total
from .providers.base import ChargeHandle, PaymentProviderAdapter
from .selection import resolve_selection
from .store import CheckoutSessionStore

logger = logging.getLogger(__name__)


def to_minor_units(amount: Any) -> int:
    """
    Monto en unidades mayores -> unidades menores (redondeo half-up).

    Raises:
        InvalidRequest: Si no es un número finito > 0
    """
    if isinstance(amount, bool) or amount is None:
        raise InvalidRequest("amount must be a positive number")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise InvalidRequest("amount must be a positive number") from e
    if not value.is_finite() or value <= 0:
        raise InvalidRequest("amount must be a positive number")

    minor = int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if minor <= 0:
        raise InvalidRequest("amount is below the smallest currency unit")
    return minor


def normalize_currency(currency: Optional[str], default: str) -> str:
    code = (currency or default).strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise InvalidRequest("currency must be a 3-letter ISO 4217 code")
    return code


class CheckoutSessionManager:
    """Crea sesiones, preautoriza con los proveedores y registra el pago."""

    def __init__(
        self,
        store: CheckoutSessionStore,
        adapters: Mapping[PaymentProvider, PaymentProviderAdapter],
        payments_settings: Optional[PaymentsSettings] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.adapters = dict(adapters)
        self.settings = payments_settings or get_payments_settings()
        self._clock = clock

    async def _preauthorize(
        self,
        adapter: PaymentProviderAdapter,
        session_id: str,
        amount_minor: int,
        currency: str,
        metadata: Mapping[str, str],
    ) -> ChargeHandle | ProviderError:
        provider = adapter.provider.value
        try:
            async with asyncio.timeout(self.settings.provider_timeout_seconds):
                return await adapter.create_charge(session_id, amount_minor, currency, metadata)
        except CheckoutError as e:
            logger.warning(
                "checkout_provider_error session_id=%s provider=%s code=%s message=%s",
                session_id, provider, e.error_code, e.message,
            )
            checkout_provider_errors_total.labels(provider=provider, error_code=e.error_code).inc()
            return ProviderError(provider=provider, message=e.message, error_code=e.error_code)
        except TimeoutError:
            logger.warning("checkout_provider_timeout session_id=%s provider=%s", session_id, provider)
            checkout_provider_errors_total.labels(provider=provider, error_code=ProviderUnavailable.error_code).inc()
            return ProviderError(provider=provider, message=f"{provider} timed out", error_code=ProviderUnavailable.error_code)
        except Exception:
            logger.exception("checkout_provider_unexpected_error session_id=%s provider=%s", session_id, provider)
            checkout_provider_errors_total.labels(provider=provider, error_code="PROVIDER_ERROR").inc()
            return ProviderError(provider=provider, message=f"{provider} failed unexpectedly", error_code="PROVIDER_ERROR")

    async def create_session(
        self,
        selection_area: Any,
        amount: Any,
        currency: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        profile_id: Optional[str] = None,
    ) -> CheckoutSession:
        """
        Abre una sesión pendiente y preautoriza con cada proveedor.

        Raises:
            InvalidRequest: Monto, moneda o selección inválidos
            NoPaymentMethodsAvailable: Todos los proveedores fallaron
        """
        if not isinstance(selection_area, Mapping) or not selection_area:
            raise InvalidRequest("selectionArea is required")
        try:
            parse_rect(selection_area.get("rect"))
        except InvalidSelection as e:
            raise InvalidRequest(f"invalid selectionArea: {e}") from e

        amount_minor = to_minor_units(amount)
        code = normalize_currency(currency, self.settings.default_currency)

        session_id = str(uuid.uuid4())
        provider_metadata = {"profileId": profile_id} if profile_id else {}

        adapters = list(self.adapters.values())
        results = await asyncio.gather(
            *(self._preauthorize(a, session_id, amount_minor, code, provider_metadata) for a in adapters)
        )

        handles: dict[str, dict[str, Any]] = {}
        errors: list[ProviderError] = []
        for result in results:
            if isinstance(result, ChargeHandle):
                handles[result.provider.value] = {"handle": result.handle, "client": result.client}
            else:
                errors.append(result)

        if not handles:
            checkout_sessions_created_total.labels(result="no_methods").inc()
            logger.error("checkout_no_payment_methods session_id=%s errors=%d", session_id, len(errors))
            raise NoPaymentMethodsAvailable(
                "No payment methods available",
                details=[{"provider": e.provider, "message": e.message} for e in errors],
            )

        session = CheckoutSession(
            session_id=session_id,
            amount_minor=amount_minor,
            currency=code,
            selection_area=dict(selection_area),
            metadata=dict(metadata or {}),
            profile_id=profile_id,
            provider_handles=handles,
            provider_errors=errors,
            created_at=self._clock(),
        )
        await self.store.save(session)
        for provider_name, entry in handles.items():
            await self.store.index_handle(PaymentProvider(provider_name), entry["handle"], session_id)

        checkout_sessions_created_total.labels(result="partial" if errors else "ok").inc()
        logger.info(
            "checkout_session_created session_id=%s amount_minor=%d currency=%s methods=%s",
            session_id, amount_minor, code, ",".join(handles),
        )
        return session

    async def get(self, session_id: str) -> Optional[CheckoutSession]:
        session = await self.store.load(session_id)
        if session is None:
            return None
        # El reclamo de pago prevalece sobre un registro que aún no lo refleja
        claim = await self.store.get_claim(session_id)
        if claim is not None and not session.is_paid:
            session.status = CheckoutSessionStatus.PAID
            session.confirmation = claim
        return session

    async def require(self, session_id: str) -> CheckoutSession:
        session = await self.get(session_id)
        if session is None:
            raise SessionNotFound(f"Checkout session {session_id} not found")
        return session

    async def mark_paid(self, session_id: str, confirmation: Confirmation) -> MarkPaidResult:
        """
        Transición pending -> paid. Una segunda llamada (mismo u otro
        proveedor) no cambia nada y devuelve la confirmación existente.

        Raises:
            SessionNotFound
        """
        session = await self.require(session_id)
        won, current = await self.store.claim_paid(session_id, confirmation)
        if not won:
            logger.info(
                "checkout_already_paid session_id=%s winner=%s attempted=%s",
                session_id, current.provider.value, confirmation.provider.value,
            )
            return MarkPaidResult(won=False, confirmation=current)

        session.status = CheckoutSessionStatus.PAID
        session.confirmation = confirmation
        session.paid_at = self._clock()
        await self.store.save(session)
        logger.info(
            "checkout_marked_paid session_id=%s provider=%s txn=%s",
            session_id, confirmation.provider.value, confirmation.transaction_id,
        )
        return MarkPaidResult(won=True, confirmation=confirmation)

    async def set_fulfillment(
        self,
        session_id: str,
        fulfillment: FulfillmentState,
        purchase_id: Optional[str] = None,
    ) -> None:
        session = await self.require(session_id)
        session.fulfillment = fulfillment
        if purchase_id is not None:
            session.purchase_id = purchase_id
        await self.store.save(session)

    async def find_session_id_by_handle(self, provider: PaymentProvider, handle: str) -> Optional[str]:
        return await self.store.find_by_handle(provider, handle)

    async def sweep(self) -> int:
        return await self.store.sweep()

    @staticmethod
    def summary(session: CheckoutSession) -> dict[str, int]:
        """Resumen de la selección para la UI: {pixels, tiles}."""
        try:
            selection = resolve_selection(session.selection_area, session.metadata)
        except InvalidSelection:
            return {"pixels": 0, "tiles": 0}
        return {"pixels": selection.area, "tiles": len(selection.tiles)}


__all__ = ["CheckoutSessionManager", "normalize_currency", "to_minor_units"]

# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/routes.py

Rutas del checkout.

Endpoints:
- POST /checkout/session
- GET  /checkout/session/{session_id}
- POST /checkout/session/{session_id}/acknowledge
- POST /paypal/orders/{order_id}/capture

El acknowledge del cliente no es confiable por sí mismo: antes de
finalizar se verifica el cobro contra el proveedor.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.auth_context import OptionalProfileId
from app.shared.database import get_async_session

from .dependencies import get_adapters, get_coordinator, get_session_manager
from .enums import PaymentProvider
from .errors import CheckoutError, InvalidRequest, PaymentNotCompleted, ProviderUnavailable, SessionNotFound
from .finalize_service import FinalizationCoordinator
from .providers.base import PaymentProviderAdapter
from .schemas import (
    AcknowledgeRequest,
    AcknowledgeResponse,
    CaptureResponse,
    CheckoutSessionResponse,
    CreateSessionRequest,
)
from .session_manager import CheckoutSessionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"])

# Campo del payload del cliente que identifica el cobro en cada proveedor
_CLIENT_HANDLE_FIELDS = {
    PaymentProvider.STRIPE: "paymentIntentId",
    PaymentProvider.PAYPAL: "orderId",
}


def _adapter_for(adapters: dict, provider: PaymentProvider) -> PaymentProviderAdapter:
    adapter = adapters.get(provider)
    if adapter is None:
        raise ProviderUnavailable(f"{provider.value} is not available", provider=provider.value)
    return adapter


@router.post(
    "/checkout/session",
    response_model=CheckoutSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_checkout_session(
    body: CreateSessionRequest,
    profile_id: OptionalProfileId,
    manager: CheckoutSessionManager = Depends(get_session_manager),
) -> CheckoutSessionResponse:
    try:
        session = await manager.create_session(
            body.selection_area,
            body.amount,
            currency=body.currency,
            metadata=body.metadata,
            profile_id=profile_id,
        )
    except CheckoutError as e:
        raise e.to_http() from e
    return CheckoutSessionResponse.from_session(session, manager.summary(session))


@router.get("/checkout/session/{session_id}", response_model=CheckoutSessionResponse)
async def get_checkout_session(
    session_id: str,
    manager: CheckoutSessionManager = Depends(get_session_manager),
) -> CheckoutSessionResponse:
    try:
        session = await manager.require(session_id)
    except CheckoutError as e:
        raise e.to_http() from e
    return CheckoutSessionResponse.from_session(session, manager.summary(session))


@router.post("/checkout/session/{session_id}/acknowledge", response_model=AcknowledgeResponse)
async def acknowledge_payment(
    session_id: str,
    body: AcknowledgeRequest,
    db: AsyncSession = Depends(get_async_session),
    adapters: dict = Depends(get_adapters),
    coordinator: FinalizationCoordinator = Depends(get_coordinator),
) -> AcknowledgeResponse:
    """
    Finalización disparada por el cliente (idempotente).

    - 404 sesión desconocida
    - 400 proveedor no disponible en la sesión o handle distinto
    - 402 el proveedor aún no reporta el cobro completado
    - 502 la captura falló
    """
    try:
        session = await coordinator.sessions.require(session_id)

        if session.is_paid and session.confirmation is not None:
            confirmation = session.confirmation
            result = await coordinator.finalize(
                db, session_id, confirmation.provider, confirmation.transaction_id, confirmation.payer_email,
            )
        else:
            handle = session.handle_for(body.provider)
            if handle is None:
                raise InvalidRequest(f"{body.provider.value} is not available for this session")
            claimed = body.payload.get(_CLIENT_HANDLE_FIELDS[body.provider])
            if claimed and claimed != handle:
                logger.warning(
                    "checkout_ack_handle_mismatch session_id=%s provider=%s", session_id, body.provider.value,
                )
                raise InvalidRequest("payment reference does not belong to this session")

            charge = await _adapter_for(adapters, body.provider).confirm_charge(handle)
            if not charge.succeeded:
                raise PaymentNotCompleted(
                    "Payment is not completed yet",
                    provider=body.provider.value,
                    details={"state": charge.state.value},
                )
            if charge.session_id and charge.session_id != session_id:
                raise InvalidRequest("payment reference does not belong to this session")

            result = await coordinator.finalize(
                db, session_id, body.provider, charge.transaction_id, charge.payer_email,
            )
    except CheckoutError as e:
        raise e.to_http() from e

    return AcknowledgeResponse(
        result=result.result,
        provider=result.provider,
        purchase_id=result.purchase_id,
        warning=result.warning,
    )


@router.post("/paypal/orders/{order_id}/capture", response_model=CaptureResponse)
async def capture_paypal_order(
    order_id: str,
    db: AsyncSession = Depends(get_async_session),
    adapters: dict = Depends(get_adapters),
    coordinator: FinalizationCoordinator = Depends(get_coordinator),
) -> CaptureResponse:
    """Captura una orden aprobada y finaliza su sesión si se conoce."""
    try:
        charge = await _adapter_for(adapters, PaymentProvider.PAYPAL).confirm_charge(order_id)
        session_id = charge.session_id or await coordinator.sessions.find_session_id_by_handle(
            PaymentProvider.PAYPAL, order_id
        )

        result = None
        if charge.succeeded and session_id:
            try:
                result = await coordinator.finalize(
                    db, session_id, PaymentProvider.PAYPAL, charge.transaction_id, charge.payer_email,
                )
            except SessionNotFound:
                logger.warning("paypal_capture_unknown_session order=%s session_id=%s", order_id, session_id)
    except CheckoutError as e:
        raise e.to_http() from e

    return CaptureResponse(
        order_id=order_id,
        status=charge.state.value,
        capture_id=charge.transaction_id,
        payer_email=charge.payer_email,
        session_id=session_id,
        result=result.result if result else None,
        warning=result.warning if result else None,
    )


__all__ = ["router"]

# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/webhook_routes.py

Webhooks de proveedores (cuerpo crudo firmado).

Endpoints:
- POST /webhooks/stripe
- POST /webhooks/paypal

Responde 200 {received: true} para eventos verificados, rechazados,
ignorados o de sesiones desconocidas. Solo los casos reintentables
(PersistenceFailure, ProviderUnavailable) devuelven 503.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.config import get_settings
from app.shared.database import get_async_session
from app.shared.middleware.rate_limiter import rate_limit

from .dependencies import get_adapters, get_coordinator
from .enums import PaymentProvider
from .errors import PersistenceFailure, ProviderUnavailable
from .finalize_service import FinalizationCoordinator
from .webhook_service import process_webhook

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
    dependencies=[Depends(rate_limit("payment_webhooks", get_settings().webhook_rate_limit))],
)


async def _handle(
    provider: PaymentProvider,
    request: Request,
    db: AsyncSession,
    adapters: dict,
    coordinator: FinalizationCoordinator,
) -> JSONResponse:
    raw_body = await request.body()
    adapter = adapters.get(provider)
    if adapter is None:
        logger.warning("webhook_provider_missing provider=%s", provider.value)
        return JSONResponse({"received": True, "outcome": "ignored"})

    try:
        outcome = await process_webhook(adapter, coordinator, db, request.headers, raw_body)
    except (PersistenceFailure, ProviderUnavailable) as e:
        logger.error("webhook_retryable_error provider=%s code=%s", provider.value, e.error_code)
        return JSONResponse(
            status_code=503,
            content={"received": False, "error_code": e.error_code},
        )
    return JSONResponse(outcome.to_response())


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    adapters: dict = Depends(get_adapters),
    coordinator: FinalizationCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    return await _handle(PaymentProvider.STRIPE, request, db, adapters, coordinator)


@router.post("/paypal")
async def paypal_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    adapters: dict = Depends(get_adapters),
    coordinator: FinalizationCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    return await _handle(PaymentProvider.PAYPAL, request, db, adapters, coordinator)


__all__ = ["router"]

# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/routes.py

Rutas de lectura pública y edición del propietario.

Endpoints:
- GET /purchases
- GET /profile/purchases
- PUT /profile/purchases/{purchase_id}

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.auth_context import CurrentProfileId
from app.shared.database import get_async_session
from app.shared.utils.url_validator import InvalidLinkError

from .schemas import (
    OwnedPurchaseListResponse,
    OwnedPurchaseOut,
    OwnedPurchaseUpdate,
    PurchaseListResponse,
    PurchaseOut,
)
from .services import PurchaseLedger
from .validators import InvalidTransform

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Purchases"])


def get_purchase_ledger() -> PurchaseLedger:
    return PurchaseLedger()


@router.get("/purchases", response_model=PurchaseListResponse, response_model_by_alias=True)
async def list_purchases(
    db: AsyncSession = Depends(get_async_session),
    ledger: PurchaseLedger = Depends(get_purchase_ledger),
) -> PurchaseListResponse:
    purchases = await ledger.list_purchases(db)
    return PurchaseListResponse(purchases=[PurchaseOut.model_validate(p) for p in purchases])


@router.get("/profile/purchases", response_model=OwnedPurchaseListResponse, response_model_by_alias=True)
async def list_my_purchases(
    profile_id: CurrentProfileId,
    db: AsyncSession = Depends(get_async_session),
    ledger: PurchaseLedger = Depends(get_purchase_ledger),
) -> OwnedPurchaseListResponse:
    purchases = await ledger.list_by_profile(db, profile_id)
    return OwnedPurchaseListResponse(purchases=[OwnedPurchaseOut.model_validate(p) for p in purchases])


@router.put(
    "/profile/purchases/{purchase_id}",
    response_model=OwnedPurchaseOut,
    response_model_by_alias=True,
)
async def update_my_purchase(
    purchase_id: str,
    body: OwnedPurchaseUpdate,
    profile_id: CurrentProfileId,
    db: AsyncSession = Depends(get_async_session),
    ledger: PurchaseLedger = Depends(get_purchase_ledger),
) -> OwnedPurchaseOut:
    try:
        purchase = await ledger.update_owned_content(db, profile_id, purchase_id, body.changes())
    except (InvalidLinkError, InvalidTransform) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": "INVALID_CONTENT", "message": str(e)},
        )

    if purchase is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error_code": "PURCHASE_NOT_FOUND", "message": "Purchase not found"},
        )
    return OwnedPurchaseOut.model_validate(purchase)


__all__ = ["get_purchase_ledger", "router"]

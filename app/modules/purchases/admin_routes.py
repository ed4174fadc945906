# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/admin_routes.py

Moderación de compras (operador con X-Admin-Key).

Endpoints:
- PATCH /admin/purchases/{purchase_id}

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database import get_async_session
from app.shared.internal_auth import AdminAuth

from .routes import get_purchase_ledger
from .schemas import ModerationUpdate, PurchaseOut
from .services import PurchaseLedger

router = APIRouter(prefix="/admin", tags=["Admin - Purchases"])


@router.patch("/purchases/{purchase_id}", response_model=PurchaseOut, response_model_by_alias=True)
async def moderate_purchase(
    purchase_id: str,
    body: ModerationUpdate,
    _auth: AdminAuth,
    db: AsyncSession = Depends(get_async_session),
    ledger: PurchaseLedger = Depends(get_purchase_ledger),
) -> PurchaseOut:
    purchase = await ledger.update_moderation(db, purchase_id, body.resolve())
    if purchase is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error_code": "PURCHASE_NOT_FOUND", "message": "Purchase not found"},
        )
    return PurchaseOut.model_validate(purchase)


__all__ = ["router"]

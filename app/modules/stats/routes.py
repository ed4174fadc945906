# -*- coding: utf-8 -*-
"""
backend/app/modules/stats/routes.py

Endpoints:
- GET /stats

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.presence.dependencies import get_presence_tracker
from app.modules.presence.tracker import PresenceTracker
from app.modules.purchases.routes import get_purchase_ledger
from app.modules.purchases.services import PurchaseLedger
from app.shared.config import get_settings
from app.shared.database import get_async_session

from .service import compute_stats

router = APIRouter(tags=["Stats"])


@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_async_session),
    tracker: PresenceTracker = Depends(get_presence_tracker),
    ledger: PurchaseLedger = Depends(get_purchase_ledger),
) -> dict[str, Any]:
    return await compute_stats(db, tracker, get_settings(), ledger=ledger)


__all__ = ["router"]

# -*- coding: utf-8 -*-
"""
backend/app/modules/stats/service.py

Cálculo de estadísticas del tablero.

purchasedPixels y selectedPixels se acotan al total del tablero;
availablePixels nunca es negativo.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.presence.tracker import PresenceTracker
from app.modules.purchases.services import PurchaseLedger
from app.shared.config.settings_base import BaseAppSettings

logger = logging.getLogger(__name__)


async def compute_stats(
    db: AsyncSession,
    tracker: PresenceTracker,
    settings: BaseAppSettings,
    ledger: Optional[PurchaseLedger] = None,
) -> dict[str, Any]:
    ledger = ledger or PurchaseLedger()
    total = settings.board_total_pixels

    purchased = min(total, max(0, await ledger.sum_purchased_pixels(db)))
    presence = await tracker.get_stats()

    return {
        "board": {
            "width": settings.board_width,
            "height": settings.board_height,
            "totalPixels": total,
        },
        "totalPixels": total,
        "purchasedPixels": purchased,
        "availablePixels": max(0, total - purchased),
        "onlineUsers": presence.online_users,
        "activeSelections": presence.active_selections,
        "selectedPixels": min(total, presence.selected_pixels),
    }


__all__ = ["compute_stats"]

# -*- coding: utf-8 -*-
"""
backend/app/routes/master_routes.py

Router maestro: todas las rutas de negocio se montan bajo /api.

Autor: YourPixels
Fecha: 2026-10-17
"""
from __future__ import annotations

import logging

from fastapi import APIRouter

from app.modules.checkout.routes import router as checkout_router
from app.modules.checkout.webhook_routes import router as webhook_router
from app.modules.presence.routes import router as presence_router
from app.modules.purchases.admin_routes import router as purchases_admin_router
from app.modules.purchases.routes import router as purchases_router
from app.modules.stats.routes import router as stats_router

logger = logging.getLogger(__name__)

api = APIRouter(prefix="/api")

_loaded: list[str] = []  # trazabilidad/debug


def _include(target: APIRouter, router: APIRouter, name: str) -> None:
    """Incluye un router en la capa dada y registra trazabilidad en logs."""
    target.include_router(router)
    _loaded.append(f"{target.prefix or '/'}:{name}")
    logger.debug(
        "Router '%s' montado en prefix '%s' (router.prefix='%s')",
        name,
        target.prefix or "/",
        getattr(router, "prefix", ""),
    )


_include(api, presence_router, "presence")
_include(api, checkout_router, "checkout")
_include(api, webhook_router, "webhooks")
_include(api, purchases_router, "purchases")
_include(api, purchases_admin_router, "purchases.admin")
_include(api, stats_router, "stats")

__all__ = ["api"]

# Fin del archivo backend/app/routes/master_routes.py

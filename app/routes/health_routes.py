# -*- coding: utf-8 -*-
"""
backend/app/routes/health_routes.py

Endpoint básico de health check del backend de YourPixels.

Autor: YourPixels
Fecha: 2026-10-17
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.db import check_database_health
from app.core.settings import get_settings
from app.modules.checkout.dependencies import get_adapters

router = APIRouter()


@router.get(
    "/health",
    summary="Health check del backend",
    description=(
        "Devuelve el estado básico del backend, incluyendo conectividad "
        "a la base de datos y proveedores de pago configurados."
    ),
)
async def health_check() -> dict:
    settings = get_settings()

    db_ok = await check_database_health(timeout_s=2.0)
    providers = {p.value: a.is_configured for p, a in get_adapters().items()}

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "payments": providers,
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }

# Fin del archivo backend/app/routes/health_routes.py

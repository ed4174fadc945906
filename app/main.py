# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend YourPixels.

Ajustes clave:
- Uso de app.core.settings como fachada de configuración
- Logging vía dictConfig (plain / json) según settings
- Montaje de observabilidad Prometheus (/metrics) vía app.observability.prom
- Stores de checkout y presencia (Redis si REDIS_URL responde, memoria si no)
- Scheduler con barrido periódico de presencia y sesiones de checkout
- Health principal /health delegado al paquete app.routes (health_routes.py)

Autor: YourPixels
Fecha: 2026-10-17
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# Cargar .env ANTES de cualquier import que use os.getenv
# En DEV: override=True para que .env mande sobre variables del entorno
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_ENVIRONMENT = os.getenv("PYTHON_ENV", "development").strip().strip('"').strip("'").lower()
_override_env = _ENVIRONMENT == "development"
load_dotenv(dotenv_path=_ENV_PATH, override=_override_env)

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.logging import setup_logging
from app.core.settings import get_settings
from app.observability.prom import setup_observability
from app.shared.middleware import JSONExceptionMiddleware

_settings = get_settings()
setup_logging(level=_settings.log_level, fmt=_settings.log_format)
logger = logging.getLogger(__name__)

logger.info("[dotenv] Loaded %s (override=%s, PYTHON_ENV=%s)", _ENV_PATH, _override_env, _ENVIRONMENT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    from app.modules.checkout.dependencies import init_checkout, shutdown_checkout
    from app.modules.presence.dependencies import init_presence
    from app.shared.config import get_payments_settings
    from app.shared.database import create_all, dispose_engine
    from app.shared.redis import close_async_redis_client
    from app.shared.scheduler import get_scheduler
    from app.shared.scheduler.jobs import register_store_sweep_job

    settings = get_settings()

    if settings.db_create_tables:
        await create_all()

    manager = await init_checkout()
    tracker = await init_presence()

    scheduler = get_scheduler()
    register_store_sweep_job(scheduler, tracker.store, "presence", settings.presence_ttl_seconds)
    register_store_sweep_job(
        scheduler,
        manager.store.backend,
        "checkout_sessions",
        get_payments_settings().checkout_sweep_interval_seconds,
    )
    scheduler.start()
    logger.info("⏰ Scheduler iniciado con jobs programados")

    logger.info("🟢 Backend de YourPixels iniciado.")
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        logger.info("🔴 Iniciando shutdown ordenado...")
        with anyio.CancelScope(shield=True):
            scheduler.shutdown(wait=True)
            logger.info("⏰ Scheduler detenido")

            # Cierra el cliente HTTP compartido de PayPal
            await shutdown_checkout()
            await close_async_redis_client()
            await dispose_engine()

        logger.info("🔴 Backend de YourPixels apagado.")


openapi_tags = [
    {"name": "Checkout", "description": "Sesiones de checkout y confirmación de pagos"},
    {"name": "Webhooks", "description": "Notificaciones firmadas de Stripe y PayPal"},
    {"name": "Purchases", "description": "Compras del tablero y edición del propietario"},
    {"name": "Presence", "description": "Heartbeats de sesiones activas"},
    {"name": "Stats", "description": "Estadísticas agregadas del tablero"},
]

app = FastAPI(
    title="YourPixels API",
    description="Checkout y estadísticas del tablero de píxeles",
    version=_settings.app_version,
    lifespan=lifespan,
    openapi_tags=openapi_tags,
)


# ═══════════════════════════════════════════════════════════════════════════════
# CORS
# ═══════════════════════════════════════════════════════════════════════════════
def _configure_cors(app_instance: FastAPI) -> dict:
    """
    Configura CORS middleware.

    Returns:
        dict con la configuración aplicada para logging.
    """
    settings = get_settings()
    origins_list = settings.get_cors_origins()

    if settings.is_prod and origins_list == ["*"]:
        # FAIL-CLOSED en producción: sin CORS_ORIGINS explícito no hay CORS
        logger.error("❌ REFUSING WILDCARD CORS IN PRODUCTION! Set CORS_ORIGINS explicitly.")
        return {"cors_disabled": True, "allow_origins": []}

    # "*" con allow_credentials=True es inválido en navegadores
    is_wildcard_only = origins_list == ["*"]
    cors_config = {
        "allow_origins": origins_list,
        "allow_credentials": not is_wildcard_only,
        "allow_methods": ["*"] if is_wildcard_only else ["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        "allow_headers": ["*"],
        "max_age": 600,
    }
    logger.info("🌐 CORS origins=%s credentials=%s", origins_list, cors_config["allow_credentials"])
    app_instance.add_middleware(CORSMiddleware, **cors_config)
    return cors_config


# IMPORTANTE: el orden real de ejecución de middlewares en Starlette es inverso al registro.
# Registramos CORS AL FINAL para que se ejecute PRIMERO (outermost).
app.add_middleware(JSONExceptionMiddleware)
setup_observability(app, http_metrics=_settings.http_metrics_enabled)
_cors_config = _configure_cors(app)

# Incluye router maestro
from app.routes import router as main_router

app.include_router(main_router)


@app.get("/")
async def root():
    return {"service": "YourPixels Backend", "status": "active"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=_settings.is_dev,
    )

# Fin del archivo backend/app/main.py

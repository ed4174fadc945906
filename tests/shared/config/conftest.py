# -*- coding: utf-8 -*-
"""
backend/tests/shared/config/conftest.py

Aísla variables de entorno y cachés de configuración en cada test.

Autor: YourPixels
Fecha: 2026-10-17
"""

import os

import pytest

from app.shared.config import config_loader, settings_payments

ENV_PREFIXES = (
    "DB_", "JWT_", "STRIPE_", "PAYPAL_", "EMAIL_", "CORS_", "APP_", "REDIS_", "HTTP_",
    "PAYMENTS_", "BOARD_", "PRESENCE_", "ADMIN_", "LOG_", "HEARTBEAT_", "WEBHOOK_",
    "RATE_LIMIT_", "FRONTEND_", "DEBUG",
)


@pytest.fixture(autouse=True)
def _isolate_env_and_cache(monkeypatch):
    """
    Sin variables heredadas del shell y con caché de get_settings() limpio.
    Al terminar se vuelve a limpiar para que el resto de la suite
    recalcule los settings con el entorno de pruebas restaurado.
    """
    for key in list(os.environ.keys()):
        if key.startswith(ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PYTHON_ENV", "development")

    config_loader.get_settings.cache_clear()
    settings_payments.reset_payments_settings()

    yield

    config_loader.get_settings.cache_clear()
    settings_payments.reset_payments_settings()
# Fin del archivo backend/tests/shared/config/conftest.py

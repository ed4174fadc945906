# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/providers/security.py

Bypass de verificación de firmas de webhooks (SOLO desarrollo local).

Reglas:
1. PAYMENTS_ALLOW_INSECURE_WEBHOOKS debe ser true
2. PYTHON_ENV debe ser development
3. PYTHON_ENV=test nunca permite el bypass

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import os

from app.shared.config.settings_payments import PaymentsSettings

logger = logging.getLogger(__name__)


def allow_insecure_webhooks(settings: PaymentsSettings) -> bool:
    python_env = os.getenv("PYTHON_ENV", "production").lower()
    if python_env == "test":
        return False

    if not settings.allow_insecure_webhooks:
        return False

    if python_env != "development":
        logger.error(
            "SECURITY VIOLATION: PAYMENTS_ALLOW_INSECURE_WEBHOOKS=true en entorno "
            "no-desarrollo. Ignorando flag y forzando verificación real."
        )
        return False

    logger.warning("DESARROLLO: verificación de webhooks deshabilitada")
    return True


__all__ = ["allow_insecure_webhooks"]

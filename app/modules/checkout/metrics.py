# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/metrics.py

Contadores Prometheus del checkout:
- sesiones creadas (ok / parcial / sin métodos)
- errores por proveedor al preautorizar
- finalizaciones por proveedor y resultado
- webhooks por proveedor y desenlace

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from app.shared.metrics_helpers import get_or_create_counter

NAMESPACE = "yourpixels"
SUBSYSTEM = "checkout"

checkout_sessions_created_total = get_or_create_counter(
    f"{NAMESPACE}_{SUBSYSTEM}_sessions_created_total",
    "Sesiones de checkout creadas por resultado",
    labelnames=("result",),  # ok|partial|no_methods
)

checkout_provider_errors_total = get_or_create_counter(
    f"{NAMESPACE}_{SUBSYSTEM}_provider_errors_total",
    "Errores de preautorización por proveedor",
    labelnames=("provider", "error_code"),
)

checkout_finalize_total = get_or_create_counter(
    f"{NAMESPACE}_{SUBSYSTEM}_finalize_total",
    "Finalizaciones por proveedor y resultado",
    labelnames=("provider", "result"),
)

checkout_webhook_events_total = get_or_create_counter(
    f"{NAMESPACE}_{SUBSYSTEM}_webhook_events_total",
    "Webhooks recibidos por proveedor y desenlace",
    labelnames=("provider", "outcome"),
)

__all__ = [
    "checkout_finalize_total",
    "checkout_provider_errors_total",
    "checkout_sessions_created_total",
    "checkout_webhook_events_total",
]

# Fin del archivo backend/app/modules/checkout/metrics.py

# -*- coding: utf-8 -*-
"""
backend/app/observability/prom.py

Observabilidad Prometheus para YourPixels.

Incluye:
- Middleware HTTP para conteo y latencia por ruta/estado
- Endpoint /metrics compatible con Prometheus (pull model)
- Soporte multiproceso (Prometheus MultiProcess Collector)

El label `path` usa la plantilla de la ruta (/api/checkout/session/{session_id})
para no crear una serie por sesión.

Autor: YourPixels
Fecha: 2026-10-17
"""
from __future__ import annotations

import os
from time import perf_counter
from typing import Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest, multiprocess
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.shared.metrics_helpers import get_or_create_counter, get_or_create_histogram

REQUEST_COUNT = get_or_create_counter(
    "http_requests_total",
    "Total HTTP requests",
    ("method", "path", "status"),
)
REQUEST_LATENCY = get_or_create_histogram(
    "http_request_latency_seconds",
    "Latency per request (s)",
    ("method", "path", "status"),
)


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware para instrumentar peticiones HTTP en FastAPI."""

    async def dispatch(self, request, call_next):
        method = request.method
        start = perf_counter()
        resp = await call_next(request)
        elapsed = perf_counter() - start

        path = _route_path(request)
        status = str(resp.status_code)
        REQUEST_LATENCY.labels(method, path, status).observe(elapsed)
        REQUEST_COUNT.labels(method, path, status).inc()
        return resp


def _build_registry() -> Optional[CollectorRegistry]:
    """Inicializa CollectorRegistry con soporte multiproceso (si aplica)."""
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return registry
    return None


def mount_metrics(app: FastAPI, path: str = "/metrics") -> None:
    """Registra el endpoint /metrics en la app FastAPI."""
    registry = _build_registry()

    @app.get(path, include_in_schema=False)
    def metrics():
        data = generate_latest(registry) if registry else generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)


def setup_observability(app: FastAPI, http_metrics: bool = True) -> None:
    """Agrega middleware de Prometheus (opcional) y monta /metrics."""
    if http_metrics:
        app.add_middleware(PrometheusMiddleware)
    mount_metrics(app)


# Fin del archivo backend/app/observability/prom.py

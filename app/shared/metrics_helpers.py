# -*- coding: utf-8 -*-
"""
backend/app/shared/metrics_helpers.py

Registro idempotente de métricas Prometheus: si el módulo se importa de
nuevo (tests, recarga), se reutiliza el colector ya registrado.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from prometheus_client import REGISTRY, Counter, Histogram


def _get_existing_metric(name: str):
    names_to_collectors = getattr(REGISTRY, "_names_to_collectors", {})
    # Los Counter se registran también con sufijo _total
    return names_to_collectors.get(name) or names_to_collectors.get(f"{name}_total")


def get_or_create_counter(name: str, description: str, labelnames: tuple = ()) -> Counter:
    existing = _get_existing_metric(name)
    if existing is not None:
        return existing
    try:
        return Counter(name, description, labelnames=labelnames)
    except ValueError:
        return _get_existing_metric(name)


def get_or_create_histogram(name: str, description: str, labelnames: tuple = ()) -> Histogram:
    existing = _get_existing_metric(name)
    if existing is not None:
        return existing
    try:
        return Histogram(name, description, labelnames=labelnames)
    except ValueError:
        return _get_existing_metric(name)


__all__ = ["get_or_create_counter", "get_or_create_histogram"]

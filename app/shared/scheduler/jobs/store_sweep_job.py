# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/jobs/store_sweep_job.py

Job programado que barre entradas expiradas de un store (presencia,
sesiones de checkout). Genérico para cualquier CacheBackend.

Autor: YourPixels
Fecha: 2026-10-17
"""

import logging
import time
from typing import Any, Dict

from app.shared.cache import CacheBackend
from app.shared.scheduler.scheduler_service import SchedulerService

logger = logging.getLogger(__name__)


async def sweep_store(store: CacheBackend, store_name: str) -> Dict[str, Any]:
    """
    Elimina entradas expiradas de un store.

    Args:
        store: Store a barrer
        store_name: Nombre para logs

    Returns:
        Dict con estadísticas del barrido
    """
    started = time.perf_counter()
    removed = await store.sweep()
    duration_ms = (time.perf_counter() - started) * 1000

    result = {
        "store_name": store_name,
        "removed_expired": removed,
        "duration_ms": round(duration_ms, 2),
        "size": store.get_stats().get("size"),
    }
    logger.info(
        "[store_sweep] store=%s removed_expired=%d duration_ms=%.2f",
        store_name,
        removed,
        result["duration_ms"],
    )
    return result


def register_store_sweep_job(
    scheduler: SchedulerService,
    store: CacheBackend,
    store_name: str,
    interval_seconds: int,
) -> str:
    """
    Registra el barrido periódico de `store` en el scheduler.

    Returns:
        ID del job registrado
    """
    return scheduler.add_interval_job(
        sweep_store,
        job_id=f"store_sweep_{store_name}",
        seconds=max(1, int(interval_seconds)),
        store=store,
        store_name=store_name,
    )


__all__ = ["register_store_sweep_job", "sweep_store"]

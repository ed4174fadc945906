# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/factory.py

Elige backend de store: Redis si hay cliente conectado, memoria en otro caso.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Optional

from app.shared.redis.client import get_async_redis_client

from .cache_backend import CacheBackend
from .memory_store import InMemoryStore
from .redis_store import RedisStore

logger = logging.getLogger(__name__)


async def build_store(namespace: str, default_ttl: Optional[int] = None) -> CacheBackend:
    """
    Construye el store para `namespace`.

    Args:
        namespace: Prefijo de claves (solo aplica a Redis)
        default_ttl: TTL por defecto en segundos
    """
    client = await get_async_redis_client()
    if client is not None:
        logger.info("store_backend namespace=%s backend=redis", namespace)
        return RedisStore(client, namespace=namespace, default_ttl=default_ttl)
    logger.info("store_backend namespace=%s backend=memory", namespace)
    return InMemoryStore(default_ttl=default_ttl)


__all__ = ["build_store"]

# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/memory_store.py

Store en memoria por proceso con TTL perezoso y barrido explícito.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from typing import Any, Callable, Optional

from .cache_backend import CacheBackend

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class InMemoryStore(CacheBackend):
    """
    Dict protegido por asyncio.Lock.

    Las entradas guardan su instante de expiración; las lecturas ignoran
    las expiradas y `sweep()` las elimina físicamente. El reloj es
    inyectable para pruebas.
    """

    def __init__(self, default_ttl: Optional[int] = None, clock: Optional[Clock] = None):
        self._default_ttl = default_ttl
        self._clock: Clock = clock or time.monotonic
        self._data: dict[str, tuple[dict[str, Any], Optional[float]]] = {}
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0
        self._expired_removals = 0

    @property
    def default_ttl(self) -> Optional[int]:
        return self._default_ttl

    def _expires_at(self, ttl: Optional[int]) -> Optional[float]:
        effective = self._default_ttl if ttl is None else ttl
        if effective is None or effective <= 0:
            return None
        return self._clock() + effective

    def _is_live(self, expires_at: Optional[float]) -> bool:
        return expires_at is None or expires_at > self._clock()

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        entry = self._data.get(key)
        if entry is None or not self._is_live(entry[1]):
            self._misses += 1
            return None
        self._hits += 1
        # Copia: los llamadores no mutan el estado compartido
        return copy.deepcopy(entry[0])

    async def set(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> None:
        async with self._lock:
            self._data[key] = (copy.deepcopy(value), self._expires_at(ttl))

    async def set_if_absent(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> bool:
        async with self._lock:
            entry = self._data.get(key)
            if entry is not None and self._is_live(entry[1]):
                return False
            self._data[key] = (copy.deepcopy(value), self._expires_at(ttl))
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None

    async def values(self, prefix: str) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(value)
            for key, (value, expires_at) in list(self._data.items())
            if key.startswith(prefix) and self._is_live(expires_at)
        ]

    async def sweep(self) -> int:
        async with self._lock:
            expired = [k for k, (_, exp) in self._data.items() if not self._is_live(exp)]
            for key in expired:
                del self._data[key]
        self._expired_removals += len(expired)
        if expired:
            logger.debug("memory_store_sweep removed=%d", len(expired))
        return len(expired)

    def get_stats(self) -> dict:
        return {
            "backend": "memory",
            "size": len(self._data),
            "hits": self._hits,
            "misses": self._misses,
            "expired_removals": self._expired_removals,
        }


__all__ = ["InMemoryStore"]

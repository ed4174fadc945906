# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/redis_store.py

Store compartido sobre redis.asyncio. Los valores se guardan como JSON;
la expiración la resuelve Redis (EX), por lo que `sweep()` no elimina nada.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from redis.asyncio import Redis

from .cache_backend import CacheBackend

logger = logging.getLogger(__name__)


class RedisStore(CacheBackend):
    """Backend Redis con espacio de nombres propio."""

    def __init__(self, client: Redis, namespace: str = "yourpixels", default_ttl: Optional[int] = None):
        self._client = client
        self._namespace = namespace
        self._default_ttl = default_ttl
        self._hits = 0
        self._misses = 0

    @property
    def default_ttl(self) -> Optional[int]:
        return self._default_ttl

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def _ttl(self, ttl: Optional[int]) -> Optional[int]:
        effective = self._default_ttl if ttl is None else ttl
        if effective is None or effective <= 0:
            return None
        return int(effective)

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        raw = await self._client.get(self._key(key))
        if raw is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(raw)

    async def set(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> None:
        await self._client.set(self._key(key), json.dumps(value), ex=self._ttl(ttl))

    async def set_if_absent(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> bool:
        created = await self._client.set(self._key(key), json.dumps(value), ex=self._ttl(ttl), nx=True)
        return bool(created)

    async def delete(self, key: str) -> bool:
        return bool(await self._client.delete(self._key(key)))

    async def values(self, prefix: str) -> list[dict[str, Any]]:
        result: list[dict[str, Any]] = []
        async for redis_key in self._client.scan_iter(match=f"{self._key(prefix)}*", count=200):
            raw = await self._client.get(redis_key)
            if raw is not None:
                result.append(json.loads(raw))
        return result

    async def sweep(self) -> int:
        return 0

    def get_stats(self) -> dict:
        return {
            "backend": "redis",
            "namespace": self._namespace,
            "hits": self._hits,
            "misses": self._misses,
            "expired_removals": 0,
        }


__all__ = ["RedisStore"]

# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/client.py

Cliente async de Redis compartido (singleton) para YourPixels.
Lo usan los stores de sesiones de checkout y de presencia.

Características:
- Conexión perezosa (no bloquea al importar)
- Un solo cliente para todos los consumidores
- Fail-open: devuelve None si Redis no está configurado o no responde,
  y los consumidores caen al store en memoria

Autor: YourPixels
Fecha: 2026-10-17
"""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisClientManager:
    """
    Gestiona un único cliente Redis async con inicialización perezosa.
    """

    _instance: Optional["RedisClientManager"] = None

    @classmethod
    def get_instance(cls) -> "RedisClientManager":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    async def reset_instance_async(cls) -> None:
        """Reinicia el singleton cerrando el cliente (tests)."""
        if cls._instance is not None:
            await cls._instance.close()
        cls._instance = None

    def __init__(self, redis_url: Optional[str] = None):
        self._redis_url = redis_url if redis_url is not None else os.getenv("REDIS_URL")
        self._client: Optional[aioredis.Redis] = None
        self._connected: Optional[bool] = None  # None = no intentado
        self._connect_lock: Optional[asyncio.Lock] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._redis_url)

    @property
    def is_connected(self) -> bool:
        return self._connected is True

    async def get_client(self) -> Optional[aioredis.Redis]:
        """
        Devuelve el cliente (conecta en el primer uso) o None si no disponible.
        """
        if self._connected is not None:
            return self._client if self._connected else None

        if not self.is_configured:
            self._connected = False
            return None

        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()

        async with self._connect_lock:
            if self._connected is not None:
                return self._client if self._connected else None

            client = aioredis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            try:
                await client.ping()
            except (RedisError, OSError) as e:
                logger.warning("RedisClientManager: connection failed: %s", e)
                await client.aclose()
                self._connected = False
                return None

            self._client = client
            self._connected = True
            logger.info("RedisClientManager: connected pid=%d", os.getpid())
            return self._client

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as e:
                logger.warning("RedisClientManager: close error: %s", e)
            finally:
                self._client = None
                self._connected = None


async def get_async_redis_client() -> Optional[aioredis.Redis]:
    return await RedisClientManager.get_instance().get_client()


async def close_async_redis_client() -> None:
    await RedisClientManager.get_instance().close()


__all__ = [
    "RedisClientManager",
    "close_async_redis_client",
    "get_async_redis_client",
]

# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/__init__.py

Cliente Redis async compartido.
"""

from .client import (
    RedisClientManager,
    close_async_redis_client,
    get_async_redis_client,
)

__all__ = [
    "RedisClientManager",
    "close_async_redis_client",
    "get_async_redis_client",
]

# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/__init__.py

Stores clave/valor con TTL (memoria y Redis) y su fábrica.
"""

from .cache_backend import CacheBackend
from .factory import build_store
from .memory_store import InMemoryStore
from .redis_store import RedisStore

__all__ = ["CacheBackend", "InMemoryStore", "RedisStore", "build_store"]

# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/cache_backend.py

Interfaz base (ABC) para stores clave/valor asíncronos con TTL.

Define el contrato que cumplen los backends usados por el registro de
sesiones de checkout y el tracker de presencia:
- InMemoryStore: por proceso (tests, una sola instancia)
- RedisStore: compartido entre instancias (producción)

Los valores son dicts serializables a JSON.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheBackend(ABC):
    """
    Interfaz abstracta para stores clave/valor.

    Propiedades esperadas:
    - default_ttl: TTL por defecto en segundos (None = no expira)

    Métricas esperadas en get_stats():
    - size: Entradas actuales (aproximado en backends distribuidos)
    - hits / misses
    - expired_removals: Eliminaciones por TTL expirado
    - backend: nombre del backend
    """

    @property
    @abstractmethod
    def default_ttl(self) -> Optional[int]:
        """TTL por defecto en segundos. None si las entradas no expiran por defecto."""
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[dict[str, Any]]:
        """
        Obtiene un valor del store.

        Returns:
            Valor asociado o None si no existe/expiró
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> None:
        """
        Almacena (sobrescribe) un valor.

        Args:
            key: Clave única
            value: Dict serializable
            ttl: None usa default_ttl; positivo fija TTL específico
        """
        ...

    @abstractmethod
    async def set_if_absent(self, key: str, value: dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Escritura atómica "solo si no existe".

        Returns:
            True si este llamador creó la entrada, False si ya existía
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Elimina una entrada. True si existía."""
        ...

    @abstractmethod
    async def values(self, prefix: str) -> list[dict[str, Any]]:
        """Valores vivos cuyas claves comienzan con `prefix`."""
        ...

    @abstractmethod
    async def sweep(self) -> int:
        """
        Elimina entradas expiradas.

        Returns:
            Número de entradas eliminadas
        """
        ...

    @abstractmethod
    def get_stats(self) -> dict:
        """Estadísticas del store (ver docstring de la clase)."""
        ...

    async def close(self) -> None:
        """Libera recursos del backend (no-op por defecto)."""
        return None


__all__ = ["CacheBackend"]

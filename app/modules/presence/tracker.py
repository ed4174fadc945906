# -*- coding: utf-8 -*-
"""
backend/app/modules/presence/tracker.py

PresenceTracker: heartbeats de clientes con expiración por TTL.

Cada cliente envía un heartbeat cada ~10s; una sesión deja de contar
cuando su último heartbeat supera el TTL (45s por defecto). No hay
borrado explícito: la expiración ocurre al leer o en el barrido periódico.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.shared.cache import CacheBackend

logger = logging.getLogger(__name__)

KEY_PREFIX = "presence:"
TRUTHY_STRINGS = frozenset({"true", "1"})

Clock = Callable[[], float]


@dataclass(frozen=True)
class PresenceStats:
    online_users: int
    active_selections: int
    selected_pixels: int


def normalize_pixels(value: Any) -> int:
    """Entero >= 0; valores no numéricos cuentan como 0."""
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, int(round(number)))



def normalize_flag(value: Any) -> bool:
    """Solo true, un número distinto de 0 o "true"/"1" cuentan como verdadero."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return math.isfinite(value) and value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return False


class PresenceTracker:
    """
    Registro de sesiones vivas sobre un CacheBackend.

    Args:
        store: Backend clave/valor (memoria o Redis)
        ttl_seconds: Vida de una sesión sin heartbeat
        clock: Reloj de pared inyectable (pruebas)
    """

    def __init__(self, store: CacheBackend, ttl_seconds: int = 45, clock: Optional[Clock] = None):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock: Clock = clock or time.time

    async def touch(self, session_id: Optional[str], is_selecting: Any = False, selection_pixels: Any = 0) -> bool:
        """
        Registra o refresca una sesión.

        Returns:
            False si no hay session_id (beacon malformado, se ignora)
        """
        if not session_id or not str(session_id).strip():
            return False

        pixels = normalize_pixels(selection_pixels)
        record = {
            "sessionId": str(session_id),
            "lastSeenAt": self._clock(),
            "isSelecting": normalize_flag(is_selecting) or pixels > 0,
            "selectionPixels": pixels,
        }
        await self.store.set(f"{KEY_PREFIX}{session_id}", record, ttl=self.ttl_seconds)
        return True

    def _is_live(self, record: dict[str, Any], now: float) -> bool:
        last_seen = record.get("lastSeenAt")
        return isinstance(last_seen, (int, float)) and now - last_seen <= self.ttl_seconds

    async def sweep(self) -> int:
        return await self.store.sweep()

    async def get_stats(self) -> PresenceStats:
        """Barre expirados y agrega las sesiones vivas."""
        await self.sweep()
        now = self._clock()
        live = [r for r in await self.store.values(KEY_PREFIX) if self._is_live(r, now)]

        selecting = [r for r in live if r.get("isSelecting") or r.get("selectionPixels", 0) > 0]
        return PresenceStats(
            online_users=len(live),
            active_selections=len(selecting),
            selected_pixels=sum(int(r.get("selectionPixels", 0)) for r in selecting),
        )


__all__ = ["KEY_PREFIX", "PresenceStats", "PresenceTracker", "normalize_flag", "normalize_pixels"]

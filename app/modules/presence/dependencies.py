# -*- coding: utf-8 -*-
"""
backend/app/modules/presence/dependencies.py

Instancia global del PresenceTracker (memoria por defecto; Redis si el
lifespan lo configura).

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Optional

from app.shared.cache import CacheBackend, InMemoryStore, build_store
from app.shared.config import get_settings

from .tracker import PresenceTracker

_tracker: Optional[PresenceTracker] = None


def get_presence_tracker() -> PresenceTracker:
    global _tracker
    if _tracker is None:
        ttl = get_settings().presence_ttl_seconds
        _tracker = PresenceTracker(InMemoryStore(default_ttl=ttl), ttl_seconds=ttl)
    return _tracker


async def init_presence(store: Optional[CacheBackend] = None) -> PresenceTracker:
    """Construye el tracker con el backend disponible (lifespan)."""
    global _tracker
    ttl = get_settings().presence_ttl_seconds
    store = store or await build_store("presence", default_ttl=ttl)
    _tracker = PresenceTracker(store, ttl_seconds=ttl)
    return _tracker


def reset_presence() -> None:
    global _tracker
    _tracker = None


__all__ = ["get_presence_tracker", "init_presence", "reset_presence"]

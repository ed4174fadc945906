# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from .base import Base, JSONType, NAMING_CONVENTION
from .database import (
    check_database_health,
    create_all,
    dispose_engine,
    get_async_session,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "JSONType",
    "NAMING_CONVENTION",
    "check_database_health",
    "create_all",
    "dispose_engine",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "session_scope",
]

# Fin del archivo backend/app/shared/database/__init__.py

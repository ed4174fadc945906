# -*- coding: utf-8 -*-
"""
backend/app/core/db.py

Fachada para la capa de acceso a datos basada en SQLAlchemy async.
Envuelve `app.shared.database.database`.

Autor: YourPixels
Fecha: 2026-10-17
"""

from app.shared.database.database import (
    Base,
    check_database_health,
    get_async_session,
    get_engine,
    get_session_factory,
    session_scope,
)


__all__ = [
    "Base",
    "check_database_health",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "session_scope",
]

# Fin del archivo backend/app/core/db.py

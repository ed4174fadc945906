# -*- coding: utf-8 -*-
"""
backend/app/core/__init__.py

Fachada unificada para componentes centrales del backend YourPixels:
- Configuración (settings)
- Logging
- Motor de base de datos y sesiones

Autor: YourPixels
Fecha: 2026-10-17
"""

from .settings import get_settings
from .logging import setup_logging
from .db import (
    Base,
    check_database_health,
    get_async_session,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Base",
    "check_database_health",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "session_scope",
]

# Fin del archivo backend/app/core/__init__.py

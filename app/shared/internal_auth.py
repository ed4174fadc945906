# -*- coding: utf-8 -*-
"""
backend/app/shared/internal_auth.py

Autenticación de operador para endpoints administrativos (moderación).

Separado de auth_context.py (JWT de perfiles) para mantener
la separación de responsabilidades.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from app.shared.config import get_settings

logger = logging.getLogger(__name__)


async def require_admin_key(
    x_admin_key: Annotated[str | None, Header()] = None,
) -> bool:
    """
    Valida el header X-Admin-Key contra ADMIN_API_KEY.

    Raises:
        HTTPException 401: Si falta el header.
        HTTPException 403: Si la clave es inválida.
        HTTPException 500: Si la clave no está configurada en el backend.
    """
    settings = get_settings()

    if settings.admin_api_key is None or not settings.admin_api_key.get_secret_value():
        logger.error("admin_key_not_configured: ADMIN_API_KEY must be set for admin endpoints")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin key not configured",
        )

    if not x_admin_key:
        logger.warning("admin_auth_missing_header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Admin-Key header required",
        )

    # Comparación timing-safe
    if not secrets.compare_digest(x_admin_key, settings.admin_api_key.get_secret_value()):
        logger.warning("admin_auth_invalid_key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin key",
        )

    return True


AdminAuth = Annotated[bool, Depends(require_admin_key)]


__all__ = [
    "AdminAuth",
    "require_admin_key",
]

# -*- coding: utf-8 -*-
"""
backend/app/shared/auth_context.py

Dependencias FastAPI para obtener el perfil autenticado (`currentUser`)
a partir de un Bearer JWT. El claim `sub` es el profile_id.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from app.shared.utils.jwt_utils import decode_token

logger = logging.getLogger(__name__)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def extract_profile_id(payload: Optional[dict]) -> Optional[str]:
    """Extrae el profile_id (claim `sub`) de un payload JWT ya validado."""
    if not payload:
        return None
    sub = payload.get("sub")
    if sub is None or str(sub).strip() == "":
        return None
    return str(sub)


async def get_optional_profile_id(
    authorization: Annotated[str | None, Header()] = None,
) -> Optional[str]:
    """
    Perfil autenticado si hay token válido; None en cualquier otro caso.
    El checkout anónimo está permitido.
    """
    token = _bearer_token(authorization)
    if token is None:
        return None
    return extract_profile_id(decode_token(token))


async def require_profile_id(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """
    Perfil autenticado obligatorio.

    Raises:
        HTTPException 401: Si falta el token o es inválido.
    """
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    profile_id = extract_profile_id(decode_token(token))
    if profile_id is None:
        logger.warning("auth_context_invalid_token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile_id


CurrentProfileId = Annotated[str, Depends(require_profile_id)]
OptionalProfileId = Annotated[Optional[str], Depends(get_optional_profile_id)]


__all__ = [
    "CurrentProfileId",
    "OptionalProfileId",
    "extract_profile_id",
    "get_optional_profile_id",
    "require_profile_id",
]

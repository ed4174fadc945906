# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/jwt_utils.py

JWT helpers para YourPixels (python-jose):
- create_access_token(data, expires_delta?)
- decode_token(token)

El login/OAuth vive fuera de este servicio; aquí solo se validan
los tokens que identifican al perfil propietario de compras.

Autor: YourPixels
Actualizado: 2026-10-17
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging
import uuid

from jose import ExpiredSignatureError, JWTError, jwt

from app.shared.config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRE_MINUTES = 60


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Crea un JWT firmado con expiración.
    """
    settings = get_settings()
    to_encode = data.copy()
    iat = _now_utc()
    exp = iat + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": exp, "iat": iat, "jti": str(uuid.uuid4())})
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key.get_secret_value(),
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decodifica y valida un JWT. Devuelve None si es inválido o expiró.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError as e:
        logger.warning("Token expirado: %s", e)
        return None
    except JWTError as e:
        logger.warning("Token inválido: %s", e)
        return None

# Fin del módulo jwt_utils.py

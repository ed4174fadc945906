# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Determinista: base de datos SQLite en memoria, logging con poco ruido
y sin Redis.

Autor: YourPixels
Fecha: 2026-10-17
"""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    python_env: str = "test"

    log_level: str = "WARNING"
    log_format: str = "pretty"

    db_url: Optional[str] = "sqlite+aiosqlite:///:memory:"
    db_create_tables: bool = True
    redis_url: Optional[str] = None

    jwt_secret_key: SecretStr = SecretStr("test-secret-key-with-at-least-32-chars!!")
    admin_api_key: Optional[SecretStr] = SecretStr("test-admin-key")

    email_mode: str = "disabled"

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo backend/app/shared/config/settings_testing.py

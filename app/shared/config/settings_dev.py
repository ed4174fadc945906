# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_dev.py

Overrides para entorno de DESARROLLO (dev) usando Pydantic v2.

Autor: YourPixels
Fecha: 2026-10-17
"""

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class DevSettings(BaseAppSettings):
    """Configuración para entorno de desarrollo."""

    python_env: str = "development"

    # Logging legible en consola
    log_level: str = "DEBUG"
    log_format: str = "plain"

    # En local se crean las tablas al arrancar
    db_create_tables: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["DevSettings"]
# Fin del archivo backend/app/shared/config/settings_dev.py

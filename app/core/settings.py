# -*- coding: utf-8 -*-
"""
backend/app/core/settings.py

Fachada de configuración: reexpone la carga de settings
definida en `app.shared.config`.

Autor: YourPixels
Fecha: 2026-10-17
"""

from typing import cast

from app.shared.config.config_loader import get_settings as _get_settings
from app.shared.config.settings_base import BaseAppSettings


def get_settings() -> BaseAppSettings:
    """
    Devuelve la configuración global de la aplicación (según PYTHON_ENV).
    """
    return cast(BaseAppSettings, _get_settings())

# Fin del archivo backend/app/core/settings.py

# -*- coding: utf-8 -*-
"""
backend/app/shared/config/logging_config.py

Configuración centralizada de logging para YourPixels.
Soporta formato plain (desarrollo) y json (producción, python-json-logger).

Autor: YourPixels
Fecha: 2026-10-17
"""

import logging.config
from typing import Literal


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain"
) -> dict:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging raíz
        fmt: Formato de salida (plain, pretty, json)

    Returns:
        dict: La configuración aplicada (útil en pruebas)
    """
    use_json = fmt == "json"

    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s"
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        },
    }

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if use_json else "default",
            "stream": "ext://sys.stdout",
        }
    }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": {
            # Ruido de librerías HTTP
            "httpx": {"level": "WARNING"},
            "stripe": {"level": "WARNING"},
            "apscheduler": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(logging_config)
    return logging_config


__all__ = ["setup_logging"]
# Fin del archivo backend/app/shared/config/logging_config.py

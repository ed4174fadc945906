# -*- coding: utf-8 -*-
"""
backend/tests/shared/config/test_logging_config.py

setup_logging en formato plano y JSON (python-json-logger).

Autor: YourPixels
Fecha: 2026-10-17
"""

import logging

from app.shared.config.logging_config import setup_logging


def test_setup_logging_plain():
    setup_logging(level="DEBUG", fmt="plain")
    logging.getLogger("test_plain").debug("hello plain")

    assert any(isinstance(h, logging.StreamHandler) for h in logging.getLogger().handlers)


def test_setup_logging_json():
    setup_logging(level="INFO", fmt="json")
    logging.getLogger("test_json").info("hello json")

    formatters = [getattr(h, "formatter", None) for h in logging.getLogger().handlers]
    assert any(
        f is not None and f.__class__.__module__.startswith("pythonjsonlogger") for f in formatters
    ), "Se esperaba JsonFormatter activo en modo json"


def test_setup_logging_returns_config():
    config = setup_logging(level="WARNING", fmt="pretty")

    assert config["root"]["level"] == "WARNING"
# Fin del archivo backend/tests/shared/config/test_logging_config.py

# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Paquete principal 'app' del backend YourPixels.

Los módulos internos se importan como 'app.*' cuando la carpeta
'backend' está en PYTHONPATH (ver [tool.pytest.ini_options]).

Autor: YourPixels
Fecha: 2026-10-17
"""

# Fin del archivo backend/app/__init__.py

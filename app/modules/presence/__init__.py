# -*- coding: utf-8 -*-
"""
backend/app/modules/presence/__init__.py

Registro efímero de sesiones activas (heartbeats con TTL).

Autor: YourPixels
Fecha: 2026-10-17
"""

# -*- coding: utf-8 -*-
"""
backend/app/modules/stats/__init__.py

Estadísticas agregadas del tablero (ledger + presencia).

Autor: YourPixels
Fecha: 2026-10-17
"""

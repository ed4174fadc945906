# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/__init__.py

Ledger durable de compras pagadas del tablero.

Autor: YourPixels
Fecha: 2026-10-17
"""

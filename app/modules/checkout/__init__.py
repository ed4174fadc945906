# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/__init__.py

Orquestación de checkout: sesiones, adaptadores de proveedores de pago,
webhooks y coordinador de finalización.

Autor: YourPixels
Fecha: 2026-10-17
"""

# -*- coding: utf-8 -*-
"""
backend/app/observability/__init__.py

Autor: YourPixels
Fecha: 2026-10-17
"""

# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Utilidades compartidas: JWT, validación de enlaces y escaneo de contenido.
"""

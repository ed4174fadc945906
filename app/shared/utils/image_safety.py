# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/image_safety.py

Escaneo básico de contenido subido (data URL o referencia). No es
detección de fraude ni moderación real: marca candidatos para revisión.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SCAN_LIMIT_CHARS = 5000

ACTIVE_CONTENT_MARKERS = ("<script", "<svg", "javascript:", "data:text/html", "data:text/svg")

_BLOCKLIST = re.compile(r"(sex|porn|xxx|nude|nsfw|gore|violent|blood)", re.IGNORECASE)


@dataclass(frozen=True)
class SafetyVerdict:
    safe: bool
    confidence: float
    reason: str | None = None


def analyze(content: str | None) -> SafetyVerdict:
    """
    Analiza los primeros caracteres del contenido.

    Returns:
        SafetyVerdict con `safe` y la confianza del veredicto
    """
    if not content:
        return SafetyVerdict(safe=True, confidence=0.0)

    sample = str(content)[:SCAN_LIMIT_CHARS].lower()

    if any(marker in sample for marker in ACTIVE_CONTENT_MARKERS):
        return SafetyVerdict(safe=False, confidence=0.85, reason="active_content")

    if _BLOCKLIST.search(sample):
        return SafetyVerdict(safe=False, confidence=0.92, reason="blocklisted_term")

    return SafetyVerdict(safe=True, confidence=0.05)


__all__ = ["ACTIVE_CONTENT_MARKERS", "SafetyVerdict", "analyze"]

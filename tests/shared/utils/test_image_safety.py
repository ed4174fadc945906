# -*- coding: utf-8 -*-
"""
backend/tests/shared/utils/test_image_safety.py

Escaneo básico de contenido subido.

Autor: YourPixels
Fecha: 2026-10-17
"""

import pytest

from app.shared.utils.image_safety import SCAN_LIMIT_CHARS, analyze


def test_empty_content_is_safe():
    verdict = analyze(None)

    assert verdict.safe is True
    assert verdict.confidence == 0.0


@pytest.mark.parametrize(
    "content",
    [
        "data:text/html,<b>hi</b>",
        "data:image/svg+xml;utf8,<svg onload=x>",
        "<SCRIPT>alert(1)</SCRIPT>",
    ],
)
def test_active_content_is_flagged(content):
    verdict = analyze(content)

    assert verdict.safe is False
    assert verdict.reason == "active_content"


def test_blocklisted_term_is_flagged():
    verdict = analyze("https://cdn.example.com/nsfw-banner.png")

    assert verdict.safe is False
    assert verdict.reason == "blocklisted_term"


def test_plain_image_is_safe():
    assert analyze("data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAA").safe is True


def test_only_prefix_is_scanned():
    content = "data:image/png;base64," + "A" * SCAN_LIMIT_CHARS + "<script>"

    assert analyze(content).safe is True
# Fin del archivo backend/tests/shared/utils/test_image_safety.py

# -*- coding: utf-8 -*-
"""
backend/tests/shared/utils/test_url_validator.py

Validación y normalización de enlaces publicados.

Autor: YourPixels
Fecha: 2026-10-17
"""

import pytest

from app.shared.utils.url_validator import InvalidLinkError, validate_link


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://example.com", "https://example.com"),
        ("HTTP://Example.COM/Path", "http://example.com/Path"),
        ("https://shop.example.org:8443/a?utm_source=x&ref=px#frag", "https://shop.example.org:8443/a?ref=px"),
        ("  https://example.com/?q=1  ", "https://example.com/"),
    ],
)
def test_valid_links_are_normalized(raw, expected):
    assert validate_link(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        None,
        "javascript:alert(1)",
        "ftp://example.com/file",
        "https://",
        "http://localhost:8000",
        "http://api.localhost",
        "http://10.0.0.5/admin",
        "http://192.168.1.1",
        "http://172.20.0.1",
        "http://8.8.8.8",
        "http://[::1]/",
        "https://bit.ly/abc",
    ],
)
def test_rejected_links(raw):
    with pytest.raises(InvalidLinkError):
        validate_link(raw)


def test_public_172_range_is_allowed():
    assert validate_link("http://172.example.com") == "http://172.example.com"
# Fin del archivo backend/tests/shared/utils/test_url_validator.py

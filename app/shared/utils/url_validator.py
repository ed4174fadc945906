# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/url_validator.py

Validación y normalización de enlaces publicados en el tablero.

Reglas:
- Solo http/https con host
- Sin IPs literales, localhost ni rangos privados
- Sin acortadores (ocultan el destino real)
- Se reconstruye como esquema://host/path conservando solo `ref`

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qs

BLOCKED_SHORTENERS = frozenset({"bit.ly", "t.co", "goo.gl", "tinyurl.com", "ow.ly"})

_PRIVATE_172 = re.compile(r"^172\.(1[6-9]|2\d|3[01])\.")


class InvalidLinkError(ValueError):
    """El enlace no es publicable."""


def _is_private_or_ip(host: str) -> bool:
    if host == "localhost" or host.endswith(".localhost"):
        return True
    if host.startswith("10.") or host.startswith("192.168.") or _PRIVATE_172.match(host):
        return True
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def validate_link(raw: str) -> str:
    """
    Valida y normaliza un enlace.

    Args:
        raw: URL tal como la envía el cliente

    Returns:
        URL normalizada

    Raises:
        InvalidLinkError: Si el enlace no cumple las reglas
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidLinkError("Link is empty")

    try:
        parts = urlsplit(raw.strip())
        host = (parts.hostname or "").lower()
    except ValueError as e:
        raise InvalidLinkError(f"Malformed URL: {e}") from e

    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidLinkError("Only http and https links are allowed")
    if not host:
        raise InvalidLinkError("Link has no host")
    if _is_private_or_ip(host):
        raise InvalidLinkError("Private or IP hosts are not allowed")
    if host in BLOCKED_SHORTENERS:
        raise InvalidLinkError("URL shorteners are not allowed")

    netloc = host if parts.port is None else f"{host}:{parts.port}"
    ref = parse_qs(parts.query).get("ref")
    query = urlencode({"ref": ref[0]}) if ref else ""
    return urlunsplit((parts.scheme.lower(), netloc, parts.path, query, ""))


__all__ = ["BLOCKED_SHORTENERS", "InvalidLinkError", "validate_link"]

# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/email_sender.py

Contrato de envío de correo y factory.
Modos:
- console: stub que solo loguea (desarrollo)
- disabled: no hace nada (tests)

La entrega real de email es un colaborador externo; este servicio solo
publica notificaciones best-effort.

Autor: YourPixels
Actualizado: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from app.shared.config.settings_base import BaseAppSettings

logger = logging.getLogger(__name__)


class IEmailSender(Protocol):
    """Protocolo para implementaciones de email sender."""
    async def send(self, template: str, recipient: str, data: Mapping[str, Any]) -> None: ...


class StubEmailSender:
    """Implementación que no envía correos; solo hace logging (modo console)."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict]] = []

    async def send(self, template: str, recipient: str, data: Mapping[str, Any]) -> None:
        self.sent.append((template, recipient, dict(data)))
        logger.info("[CONSOLE EMAIL] %s → %s | keys=%s", template, recipient, sorted(data))


class NullEmailSender:
    async def send(self, template: str, recipient: str, data: Mapping[str, Any]) -> None:
        return None


class EmailSender:
    """Factory de email sender según settings.email_mode."""

    @staticmethod
    def from_settings(settings: BaseAppSettings) -> IEmailSender:
        mode = (settings.email_mode or "console").strip().lower()
        if mode == "disabled":
            return NullEmailSender()
        return StubEmailSender()


__all__ = ["EmailSender", "IEmailSender", "NullEmailSender", "StubEmailSender"]

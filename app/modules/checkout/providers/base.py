# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/providers/base.py

Contrato común de los adaptadores de pago y tipos normalizados.

Las respuestas crudas de cada SDK/API se normalizan en el borde del
adaptador; el resto del checkout solo ve ChargeHandle, ChargeStatus
y WebhookEvent.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from ..enums import ChargeState, PaymentProvider
from ..errors import ProviderUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ChargeHandle:
    """Cobro preautorizado: id del proveedor + datos para el SDK del navegador."""
    provider: PaymentProvider
    handle: str
    client: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChargeStatus:
    """Estado de un cobro consultado o capturado en el proveedor."""
    provider: PaymentProvider
    handle: str
    state: ChargeState
    transaction_id: str
    session_id: Optional[str] = None
    payer_email: Optional[str] = None
    amount_minor: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.state is ChargeState.SUCCEEDED


@dataclass(frozen=True)
class WebhookEvent:
    """
    Notificación autenticada del proveedor.

    `charge` viene resuelto cuando el evento basta por sí mismo para
    saber que el cobro se completó; si no, el adaptador lo resuelve
    con `resolve_webhook_event`.
    """
    provider: PaymentProvider
    event_id: Optional[str]
    event_type: str
    resource_id: Optional[str] = None
    session_id: Optional[str] = None
    charge: Optional[ChargeStatus] = None


class PaymentProviderAdapter(ABC):
    """
    Capacidades comunes: crear cobro, confirmar/capturar y verificar webhooks.
    """

    provider: PaymentProvider

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        ...

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise ProviderUnavailable(f"{self.provider.value} is not configured", provider=self.provider.value)

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        """Aplica el límite de tiempo por llamada al proveedor."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await awaitable
        except TimeoutError as e:
            logger.warning("provider_timeout provider=%s timeout=%.1fs", self.provider.value, self.timeout_seconds)
            raise ProviderUnavailable(
                f"{self.provider.value} timed out", provider=self.provider.value
            ) from e

    @abstractmethod
    async def create_charge(
        self,
        session_id: str,
        amount_minor: int,
        currency: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> ChargeHandle:
        """
        Preautoriza un cobro.

        Raises:
            ProviderUnavailable: Sin credenciales o proveedor inalcanzable
            ChargeCreationFailed: El proveedor rechazó la creación
        """

    @abstractmethod
    async def confirm_charge(self, handle: str) -> ChargeStatus:
        """
        Confirma el cobro del lado servidor (consulta o captura).

        Raises:
            ProviderUnavailable / CaptureFailed
        """

    @abstractmethod
    async def verify_webhook_signature(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        """True solo si la notificación está firmada por el proveedor."""

    @abstractmethod
    async def parse_webhook(self, headers: Mapping[str, str], raw_body: bytes) -> WebhookEvent:
        """
        Verifica y normaliza una notificación.

        Raises:
            SignatureVerificationFailed: Firma ausente o inválida
        """

    async def resolve_webhook_event(self, event: WebhookEvent) -> Optional[ChargeStatus]:
        """Cobro completado asociado al evento, o None si no aplica."""
        return event.charge if event.charge is not None and event.charge.succeeded else None

    async def aclose(self) -> None:
        return None


__all__ = ["ChargeHandle", "ChargeStatus", "PaymentProviderAdapter", "WebhookEvent"]

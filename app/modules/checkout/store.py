# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/store.py

Persistencia de sesiones de checkout sobre un CacheBackend.

Claves:
- checkout:session:{id}          registro de la sesión
- checkout:paid:{id}             reclamo atómico de pago (set-if-absent)
- checkout:handle:{prov}:{hid}   índice handle del proveedor -> sesión

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Optional

from app.shared.cache import CacheBackend

from .dto import CheckoutSession, Confirmation
from .enums import PaymentProvider

logger = logging.getLogger(__name__)

SESSION_PREFIX = "checkout:session:"
PAID_PREFIX = "checkout:paid:"
HANDLE_PREFIX = "checkout:handle:"


class CheckoutSessionStore:
    """Adaptador tipado entre CheckoutSession y el backend clave/valor."""

    def __init__(self, backend: CacheBackend, ttl_seconds: Optional[int] = None):
        self.backend = backend
        self.ttl_seconds = ttl_seconds

    async def save(self, session: CheckoutSession) -> None:
        await self.backend.set(f"{SESSION_PREFIX}{session.session_id}", session.to_record(), ttl=self.ttl_seconds)

    async def load(self, session_id: str) -> Optional[CheckoutSession]:
        record = await self.backend.get(f"{SESSION_PREFIX}{session_id}")
        if record is None:
            return None
        return CheckoutSession.from_record(record)

    async def claim_paid(self, session_id: str, confirmation: Confirmation) -> tuple[bool, Confirmation]:
        """
        Reclama la transición a pagado.

        Returns:
            (won, confirmation): el reclamo vigente, propio o del ganador previo
        """
        key = f"{PAID_PREFIX}{session_id}"
        won = await self.backend.set_if_absent(key, confirmation.to_record(), ttl=self.ttl_seconds)
        if won:
            return True, confirmation
        existing = await self.backend.get(key)
        if existing is None:
            # El reclamo expiró entre ambas lecturas; se reintenta una vez
            won = await self.backend.set_if_absent(key, confirmation.to_record(), ttl=self.ttl_seconds)
            if won:
                return True, confirmation
            existing = await self.backend.get(key)
        return False, Confirmation.from_record(existing) if existing else confirmation

    async def get_claim(self, session_id: str) -> Optional[Confirmation]:
        record = await self.backend.get(f"{PAID_PREFIX}{session_id}")
        return Confirmation.from_record(record) if record else None

    async def index_handle(self, provider: PaymentProvider, handle: str, session_id: str) -> None:
        await self.backend.set(
            f"{HANDLE_PREFIX}{provider.value}:{handle}",
            {"sessionId": session_id},
            ttl=self.ttl_seconds,
        )

    async def find_by_handle(self, provider: PaymentProvider, handle: str) -> Optional[str]:
        record = await self.backend.get(f"{HANDLE_PREFIX}{provider.value}:{handle}")
        return record.get("sessionId") if record else None

    async def sweep(self) -> int:
        return await self.backend.sweep()


__all__ = ["CheckoutSessionStore"]

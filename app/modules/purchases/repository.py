# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/repository.py

Repositorio de purchases con manejo de idempotencia y concurrencia.

La restricción única sobre payment_intent_id es el árbitro real de
concurrencia: si dos finalizaciones compiten, la segunda inserción
falla y se resuelve re-consultando la fila existente.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .enums import ModerationStatus
from .models import Purchase

logger = logging.getLogger(__name__)


class PurchaseRepository:
    """Operaciones de acceso a datos sobre purchases."""

    async def get_by_id(self, session: AsyncSession, purchase_id: str) -> Optional[Purchase]:
        return await session.get(Purchase, purchase_id)

    async def get_by_payment_intent_id(
        self,
        session: AsyncSession,
        payment_intent_id: str,
    ) -> Optional[Purchase]:
        stmt = select(Purchase).where(Purchase.payment_intent_id == payment_intent_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_or_get_existing(
        self,
        session: AsyncSession,
        values: dict[str, Any],
    ) -> tuple[Purchase, bool]:
        """
        Inserta una compra o devuelve la que ya ocupa su id o su transacción.

        Args:
            session: Sesión de base de datos
            values: Columnas de Purchase (incluye id y payment_intent_id)

        Returns:
            Tuple de (Purchase, created: bool). Con created=False la fila
            devuelta puede tener otro id (misma transacción) u otra
            transacción (mismo id); el llamador decide cómo tratarlo.
        """
        existing = await self.get_by_id(session, values["id"])
        if existing is None:
            existing = await self.get_by_payment_intent_id(session, values["payment_intent_id"])
        if existing is not None:
            return existing, False

        purchase = Purchase(**values)
        session.add(purchase)
        try:
            await session.flush()
            return purchase, True
        except IntegrityError as e:
            logger.info(
                "purchase_insert_conflict id=%s txn=%s, fetching existing",
                values["id"],
                values["payment_intent_id"],
            )
            await session.rollback()

            existing = await self.get_by_id(session, values["id"])
            if existing is None:
                existing = await self.get_by_payment_intent_id(session, values["payment_intent_id"])
            if existing is None:
                logger.error("IntegrityError but no existing purchase found: %s", e)
                raise
            return existing, False

    async def list_all(self, session: AsyncSession) -> Sequence[Purchase]:
        stmt = select(Purchase).order_by(Purchase.created_at.asc(), Purchase.id.asc())
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_profile(self, session: AsyncSession, profile_id: str) -> Sequence[Purchase]:
        stmt = (
            select(Purchase)
            .where(Purchase.profile_id == profile_id)
            .order_by(Purchase.created_at.desc(), Purchase.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def sum_area(self, session: AsyncSession) -> int:
        result = await session.execute(select(func.coalesce(func.sum(Purchase.area), 0)))
        return int(result.scalar_one())

    async def set_moderation(
        self,
        session: AsyncSession,
        purchase_id: str,
        status: ModerationStatus,
    ) -> Optional[Purchase]:
        purchase = await self.get_by_id(session, purchase_id)
        if purchase is None:
            return None
        purchase.moderation_status = status
        await session.flush()
        return purchase


__all__ = ["PurchaseRepository"]

# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/services.py

PurchaseLedger: almacén durable e idempotente de compras pagadas.

Reglas:
- Exactamente una compra por transacción externa capturada
- Reintentar la misma compra (mismo id + misma transacción) es idempotente
- Otra compra con la misma transacción se rechaza (PersistenceConflict)
- Tras crearse, solo la moderación o el propietario modifican la fila
- Todo error de almacenamiento sale como PersistenceFailure

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, AsyncIterator, Literal, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.checkout.errors import PersistenceConflict, PersistenceFailure

from .enums import ModerationStatus
from .models import Purchase
from .repository import PurchaseRepository
from .validators import ScreenedContent, Selection, screen_content

logger = logging.getLogger(__name__)

OWNER_EDITABLE_FIELDS = ("link", "uploadedImage", "imageTransform", "previewData")


@dataclass(frozen=True)
class PurchaseDraft:
    """Datos de una compra a registrar."""
    id: str
    selection: Selection
    price: Decimal
    currency: str
    provider: str
    payment_intent_id: str
    payer_email: Optional[str] = None
    profile_id: Optional[str] = None
    content: Optional[ScreenedContent] = None

    def to_values(self) -> dict[str, Any]:
        content = self.content or ScreenedContent()
        return {
            "id": self.id,
            "rect": self.selection.rect.to_dict(),
            "tiles": [t.to_dict() for t in self.selection.tiles],
            "area": self.selection.area,
            "price": self.price,
            "currency": self.currency,
            "link": content.link,
            "uploaded_image": content.uploaded_image,
            "image_transform": content.image_transform,
            "preview_data": content.preview_data,
            "moderation_status": content.moderation_status,
            "provider": self.provider,
            "payment_intent_id": self.payment_intent_id,
            "payer_email": self.payer_email,
            "profile_id": self.profile_id,
        }


@dataclass
class RecordOutcome:
    purchase: Purchase
    result: Literal["created", "already_recorded"]


class PurchaseLedger:
    """Servicio de alto nivel sobre PurchaseRepository."""

    def __init__(self, repo: Optional[PurchaseRepository] = None):
        self.repo = repo or PurchaseRepository()

    @asynccontextmanager
    async def _storage(self, session: AsyncSession, operation: str) -> AsyncIterator[None]:
        """Traduce SQLAlchemyError a PersistenceFailure tras el rollback."""
        try:
            yield
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("purchase_storage_failed operation=%s error=%s", operation, e)
            raise PersistenceFailure("Purchase storage is unavailable") from e

    async def record_purchase(self, session: AsyncSession, draft: PurchaseDraft) -> RecordOutcome:
        """
        Registra la compra de forma idempotente.

        Raises:
            PersistenceConflict: La transacción ya pertenece a otra compra,
                o el id ya existe con otra transacción
            PersistenceFailure: Error transitorio de almacenamiento
        """
        try:
            purchase, created = await self.repo.create_or_get_existing(session, draft.to_values())
            if created:
                await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("purchase_persist_failed id=%s txn=%s error=%s", draft.id, draft.payment_intent_id, e)
            raise PersistenceFailure("Could not persist purchase") from e

        if created:
            logger.info(
                "purchase_recorded id=%s area=%d price=%s provider=%s txn=%s",
                purchase.id,
                purchase.area,
                purchase.price,
                purchase.provider,
                purchase.payment_intent_id,
            )
            return RecordOutcome(purchase=purchase, result="created")

        if purchase.id == draft.id and purchase.payment_intent_id == draft.payment_intent_id:
            return RecordOutcome(purchase=purchase, result="already_recorded")

        logger.warning(
            "purchase_conflict draft_id=%s draft_txn=%s existing_id=%s existing_txn=%s",
            draft.id,
            draft.payment_intent_id,
            purchase.id,
            purchase.payment_intent_id,
        )
        raise PersistenceConflict(
            "Transaction already recorded for another purchase",
            details={"existing_purchase_id": purchase.id},
        )

    async def get(self, session: AsyncSession, purchase_id: str) -> Optional[Purchase]:
        async with self._storage(session, "get"):
            return await self.repo.get_by_id(session, purchase_id)

    async def get_by_transaction(self, session: AsyncSession, transaction_id: str) -> Optional[Purchase]:
        async with self._storage(session, "get_by_transaction"):
            return await self.repo.get_by_payment_intent_id(session, transaction_id)

    async def list_purchases(self, session: AsyncSession) -> Sequence[Purchase]:
        async with self._storage(session, "list_purchases"):
            return await self.repo.list_all(session)

    async def list_by_profile(self, session: AsyncSession, profile_id: str) -> Sequence[Purchase]:
        async with self._storage(session, "list_by_profile"):
            return await self.repo.list_by_profile(session, profile_id)

    async def sum_purchased_pixels(self, session: AsyncSession) -> int:
        async with self._storage(session, "sum_purchased_pixels"):
            return await self.repo.sum_area(session)

    async def update_moderation(
        self,
        session: AsyncSession,
        purchase_id: str,
        status: ModerationStatus,
    ) -> Optional[Purchase]:
        async with self._storage(session, "update_moderation"):
            purchase = await self.repo.set_moderation(session, purchase_id, status)
            if purchase is None:
                return None
            await session.commit()
        logger.info("purchase_moderated id=%s status=%s", purchase_id, status.value)
        return purchase

    async def update_owned_content(
        self,
        session: AsyncSession,
        profile_id: str,
        purchase_id: str,
        changes: Mapping[str, Any],
    ) -> Optional[Purchase]:
        """
        Actualiza el contenido publicado de una compra del propio perfil.

        Solo se tocan los campos presentes en `changes`. Una imagen nueva
        reinicia la moderación.

        Returns:
            Purchase actualizada o None si no existe o no es del perfil

        Raises:
            InvalidLinkError / InvalidTransform: Contenido inválido
            PersistenceFailure: Error de almacenamiento
        """
        async with self._storage(session, "update_owned_content"):
            purchase = await self.repo.get_by_id(session, purchase_id)
        if purchase is None or purchase.profile_id != profile_id:
            return None

        provided = {k: changes[k] for k in OWNER_EDITABLE_FIELDS if k in changes}
        screened = screen_content(provided, strict=True)

        if "link" in provided:
            purchase.link = screened.link
        if "imageTransform" in provided:
            purchase.image_transform = screened.image_transform
        if "previewData" in provided:
            purchase.preview_data = screened.preview_data
        if "uploadedImage" in provided:
            purchase.uploaded_image = screened.uploaded_image
            purchase.moderation_status = screened.moderation_status

        async with self._storage(session, "update_owned_content"):
            await session.commit()
        logger.info("purchase_content_updated id=%s fields=%s", purchase_id, sorted(provided))
        return purchase


__all__ = ["OWNER_EDITABLE_FIELDS", "PurchaseDraft", "PurchaseLedger", "RecordOutcome"]
# Fin del archivo backend/app/modules/purchases/services.py

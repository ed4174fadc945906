# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/models.py

Modelo ORM para la tabla purchases.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, Enum as SAEnum, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType

from .enums import ModerationStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Purchase(Base):
    """
    Compra pagada de una región del tablero.

    Invariante: una sola fila por transacción externa (payment_intent_id único).
    El id coincide con el id de la sesión de checkout que la originó.
    """

    __tablename__ = "purchases"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Geometría: rect {x,y,w,h}, tiles [{x,y,w,h}, ...], área en píxeles
    rect: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    tiles: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False)
    area: Mapped[int] = mapped_column(Integer, nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")

    # Contenido publicado (mutable solo por el propietario)
    link: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uploaded_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_transform: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    preview_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    moderation_status: Mapped[ModerationStatus] = mapped_column(
        SAEnum(
            ModerationStatus,
            name="moderation_status_enum",
            native_enum=False,
            length=16,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
        ),
        nullable=False,
        default=ModerationStatus.UNMODERATED,
    )

    # Pago
    provider: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_intent_id: Mapped[str] = mapped_column(String(255), nullable=False)
    payer_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    profile_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        UniqueConstraint("payment_intent_id", name="uq_purchases_payment_intent_id"),
        Index("ix_purchases_profile_id", "profile_id"),
        Index("ix_purchases_created_at", "created_at"),
    )

    @property
    def nsfw(self) -> Optional[bool]:
        return ModerationStatus(self.moderation_status).nsfw

    def __repr__(self) -> str:
        return (
            f"<Purchase id={self.id} area={self.area} price={self.price} "
            f"provider={self.provider} txn={self.payment_intent_id}>"
        )


__all__ = ["Purchase"]

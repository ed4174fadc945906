# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/schemas.py

Esquemas Pydantic del ledger de compras (contrato camelCase con el frontend).

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import ModerationStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PurchaseOut(_CamelModel):
    """Compra tal como se muestra en el tablero."""
    id: str
    rect: dict[str, int]
    tiles: list[dict[str, int]]
    area: int
    price: Decimal
    currency: str
    link: Optional[str] = None
    uploaded_image: Optional[str] = None
    image_transform: Optional[dict[str, float]] = None
    preview_data: Optional[dict[str, Any]] = None
    nsfw: Optional[bool] = None
    moderation_status: ModerationStatus
    created_at: datetime


class OwnedPurchaseOut(PurchaseOut):
    """Vista del propietario (incluye datos de pago)."""
    provider: str
    payment_intent_id: str


class PurchaseListResponse(BaseModel):
    purchases: list[PurchaseOut]


class OwnedPurchaseListResponse(BaseModel):
    purchases: list[OwnedPurchaseOut]


class OwnedPurchaseUpdate(_CamelModel):
    """Campos editables por el propietario; los ausentes no se tocan."""
    link: Optional[str] = None
    uploaded_image: Optional[str] = Field(default=None, max_length=5_000_000)
    image_transform: Optional[dict[str, Any]] = None
    preview_data: Optional[dict[str, Any]] = None

    def changes(self) -> dict[str, Any]:
        """Campos enviados explícitamente, en camelCase."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ModerationUpdate(_CamelModel):
    """Acepta `nsfw` (true/false/null) o `moderationStatus` explícito."""
    nsfw: Optional[bool] = None
    moderation_status: Optional[ModerationStatus] = None

    @model_validator(mode="after")
    def _one_of(self) -> "ModerationUpdate":
        if self.moderation_status is None and "nsfw" not in self.model_fields_set:
            raise ValueError("nsfw or moderationStatus is required")
        return self

    def resolve(self) -> ModerationStatus:
        if self.moderation_status is not None:
            return self.moderation_status
        return ModerationStatus.from_nsfw(self.nsfw)


__all__ = [
    "ModerationUpdate",
    "OwnedPurchaseListResponse",
    "OwnedPurchaseOut",
    "OwnedPurchaseUpdate",
    "PurchaseListResponse",
    "PurchaseOut",
]

# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/enums.py

Enums del ledger de compras.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional


class ModerationStatus(StrEnum):
    """
    Estado de moderación del contenido de una compra.

    El contrato público expone `nsfw` derivado:
    unmoderated -> null, safe -> false, flagged -> true.
    """
    UNMODERATED = "unmoderated"
    SAFE = "safe"
    FLAGGED = "flagged"

    @property
    def nsfw(self) -> Optional[bool]:
        if self is ModerationStatus.UNMODERATED:
            return None
        return self is ModerationStatus.FLAGGED

    @classmethod
    def from_nsfw(cls, nsfw: Optional[bool]) -> "ModerationStatus":
        if nsfw is None:
            return cls.UNMODERATED
        return cls.FLAGGED if nsfw else cls.SAFE


__all__ = ["ModerationStatus"]

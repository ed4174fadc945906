# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/dto.py

Tipos de datos del checkout. Las sesiones se guardan en el store como
dicts JSON (`to_record` / `from_record`).

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Literal, Optional

from .enums import CheckoutSessionStatus, FulfillmentState, PaymentProvider


@dataclass(frozen=True)
class Confirmation:
    """Registro de quién confirmó el pago de la sesión."""
    provider: PaymentProvider
    transaction_id: str
    payer_email: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        return {
            "provider": self.provider.value,
            "transactionId": self.transaction_id,
            "payerEmail": self.payer_email,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Confirmation":
        return cls(
            provider=PaymentProvider(record["provider"]),
            transaction_id=record["transactionId"],
            payer_email=record.get("payerEmail"),
        )


@dataclass(frozen=True)
class ProviderError:
    provider: str
    message: str
    error_code: str = "PROVIDER_ERROR"


@dataclass
class CheckoutSession:
    session_id: str
    amount_minor: int
    currency: str
    selection_area: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)
    profile_id: Optional[str] = None
    # provider -> {"handle": id, "client": {...datos para el SDK del navegador}}
    provider_handles: dict[str, dict[str, Any]] = field(default_factory=dict)
    provider_errors: list[ProviderError] = field(default_factory=list)
    status: CheckoutSessionStatus = CheckoutSessionStatus.PENDING
    confirmation: Optional[Confirmation] = None
    fulfillment: Optional[FulfillmentState] = None
    purchase_id: Optional[str] = None
    created_at: float = 0.0
    paid_at: Optional[float] = None

    @property
    def price(self) -> Decimal:
        return (Decimal(self.amount_minor) / Decimal(100)).quantize(Decimal("0.01"))

    @property
    def is_paid(self) -> bool:
        return self.status is CheckoutSessionStatus.PAID

    @property
    def available_methods(self) -> list[str]:
        return list(self.provider_handles)

    def handle_for(self, provider: PaymentProvider) -> Optional[str]:
        entry = self.provider_handles.get(provider.value)
        return entry.get("handle") if entry else None

    def to_record(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "amountMinor": self.amount_minor,
            "currency": self.currency,
            "selectionArea": self.selection_area,
            "metadata": self.metadata,
            "profileId": self.profile_id,
            "providerHandles": self.provider_handles,
            "providerErrors": [asdict(e) for e in self.provider_errors],
            "status": self.status.value,
            "confirmation": self.confirmation.to_record() if self.confirmation else None,
            "fulfillment": self.fulfillment.value if self.fulfillment else None,
            "purchaseId": self.purchase_id,
            "createdAt": self.created_at,
            "paidAt": self.paid_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CheckoutSession":
        confirmation = record.get("confirmation")
        fulfillment = record.get("fulfillment")
        return cls(
            session_id=record["sessionId"],
            amount_minor=int(record["amountMinor"]),
            currency=record["currency"],
            selection_area=record.get("selectionArea") or {},
            metadata=record.get("metadata") or {},
            profile_id=record.get("profileId"),
            provider_handles=record.get("providerHandles") or {},
            provider_errors=[ProviderError(**e) for e in record.get("providerErrors") or []],
            status=CheckoutSessionStatus(record.get("status", "pending")),
            confirmation=Confirmation.from_record(confirmation) if confirmation else None,
            fulfillment=FulfillmentState(fulfillment) if fulfillment else None,
            purchase_id=record.get("purchaseId"),
            created_at=float(record.get("createdAt") or 0.0),
            paid_at=record.get("paidAt"),
        )


@dataclass(frozen=True)
class MarkPaidResult:
    """`won` indica si esta llamada hizo la transición pending -> paid."""
    won: bool
    confirmation: Confirmation


@dataclass
class FinalizeResult:
    """Resultado de finalizar una sesión."""
    result: Literal["created", "already_paid", "duplicate", "needs_follow_up"]
    session_id: str
    provider: PaymentProvider
    transaction_id: str
    purchase_id: Optional[str] = None
    warning: Optional[str] = None


__all__ = [
    "CheckoutSession",
    "Confirmation",
    "FinalizeResult",
    "MarkPaidResult",
    "ProviderError",
]

# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/schemas.py

Esquemas Pydantic del checkout (camelCase hacia el frontend).

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .dto import CheckoutSession
from .enums import PaymentProvider


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateSessionRequest(_CamelModel):
    # amount se valida en el session manager (400 con error_code propio)
    selection_area: Optional[dict[str, Any]] = None
    amount: Any = None
    currency: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProviderErrorOut(_CamelModel):
    provider: str
    message: str
    error_code: str


class ConfirmationOut(_CamelModel):
    provider: PaymentProvider
    transaction_id: str


class SelectionSummary(_CamelModel):
    pixels: int
    tiles: int


class CheckoutSessionResponse(_CamelModel):
    session_id: str
    status: str
    amount_minor_units: int
    currency: str
    provider_handles: dict[str, dict[str, Any]]
    available_methods: list[str]
    provider_errors: list[ProviderErrorOut] = Field(default_factory=list)
    summary: SelectionSummary
    confirmation: Optional[ConfirmationOut] = None
    purchase_id: Optional[str] = None

    @classmethod
    def from_session(cls, session: CheckoutSession, summary: dict[str, int]) -> "CheckoutSessionResponse":
        confirmation = None
        if session.confirmation is not None:
            confirmation = ConfirmationOut(
                provider=session.confirmation.provider,
                transaction_id=session.confirmation.transaction_id,
            )
        return cls(
            session_id=session.session_id,
            status=session.status.value,
            amount_minor_units=session.amount_minor,
            currency=session.currency,
            provider_handles={name: entry.get("client", {}) for name, entry in session.provider_handles.items()},
            available_methods=session.available_methods,
            provider_errors=[
                ProviderErrorOut(provider=e.provider, message=e.message, error_code=e.error_code)
                for e in session.provider_errors
            ],
            summary=SelectionSummary(**summary),
            confirmation=confirmation,
            purchase_id=session.purchase_id,
        )


class AcknowledgeRequest(_CamelModel):
    provider: PaymentProvider
    payload: dict[str, Any] = Field(default_factory=dict)


class AcknowledgeResponse(_CamelModel):
    status: str = "acknowledged"
    result: str
    provider: PaymentProvider
    purchase_id: Optional[str] = None
    warning: Optional[str] = None


class CaptureResponse(_CamelModel):
    order_id: str
    status: str
    capture_id: str
    payer_email: Optional[str] = None
    session_id: Optional[str] = None
    result: Optional[str] = None
    warning: Optional[str] = None


__all__ = [
    "AcknowledgeRequest",
    "AcknowledgeResponse",
    "CaptureResponse",
    "CheckoutSessionResponse",
    "CreateSessionRequest",
]

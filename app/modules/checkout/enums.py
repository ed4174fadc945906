# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/enums.py

Enums del checkout.

Autor: YourPixels
Fecha: 2026-10-17
"""

from enum import StrEnum


class PaymentProvider(StrEnum):
    """Proveedores de pago soportados."""
    STRIPE = "stripe"
    PAYPAL = "paypal"


class CheckoutSessionStatus(StrEnum):
    """pending -> paid es la única transición legal."""
    PENDING = "pending"
    PAID = "paid"


class ChargeState(StrEnum):
    """Estado normalizado de un cobro en el proveedor."""
    SUCCEEDED = "succeeded"
    PROCESSING = "processing"
    REQUIRES_ACTION = "requires_action"
    PENDING = "pending"
    FAILED = "failed"
    CANCELED = "canceled"


class FulfillmentState(StrEnum):
    """Resultado de persistir la compra de una sesión pagada."""
    PERSISTED = "persisted"
    NEEDS_FOLLOW_UP = "needs_follow_up"


__all__ = ["ChargeState", "CheckoutSessionStatus", "FulfillmentState", "PaymentProvider"]

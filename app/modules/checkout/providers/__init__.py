# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/providers/__init__.py

Adaptadores de proveedores de pago (Stripe y PayPal).
"""

from .base import ChargeHandle, ChargeStatus, PaymentProviderAdapter, WebhookEvent
from .paypal_adapter import PayPalAdapter
from .stripe_adapter import StripeAdapter

__all__ = [
    "ChargeHandle",
    "ChargeStatus",
    "PayPalAdapter",
    "PaymentProviderAdapter",
    "StripeAdapter",
    "WebhookEvent",
]

# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/errors.py

Taxonomía de errores del checkout y la persistencia de compras.

Cada error lleva un `error_code` estable (contrato con la UI) y el status
HTTP sugerido. Las rutas los traducen a HTTPException sin detalle interno.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException


class CheckoutError(Exception):
    """Base de la taxonomía."""

    error_code = "CHECKOUT_ERROR"
    http_status = 500

    def __init__(self, message: str = "", *, provider: Optional[str] = None, details: Any = None):
        super().__init__(message or self.error_code)
        self.message = message or self.error_code
        self.provider = provider
        self.details = details

    def to_http(self) -> HTTPException:
        detail: dict[str, Any] = {"error_code": self.error_code, "message": self.message}
        if self.details is not None:
            detail["details"] = self.details
        return HTTPException(status_code=self.http_status, detail=detail)


class InvalidRequest(CheckoutError):
    """Entrada del cliente malformada (4xx, sin reintento)."""
    error_code = "INVALID_REQUEST"
    http_status = 400


class NoPaymentMethodsAvailable(CheckoutError):
    """Ningún proveedor pudo preautorizar la sesión."""
    error_code = "NO_PAYMENT_METHODS_AVAILABLE"
    http_status = 503


class SessionNotFound(CheckoutError):
    error_code = "SESSION_NOT_FOUND"
    http_status = 404


class PaymentNotCompleted(CheckoutError):
    """El proveedor aún no reporta el cobro como completado."""
    error_code = "PAYMENT_NOT_COMPLETED"
    http_status = 402


class ProviderUnavailable(CheckoutError):
    """Proveedor sin credenciales o temporalmente inalcanzable."""
    error_code = "PROVIDER_UNAVAILABLE"
    http_status = 503


class ChargeCreationFailed(CheckoutError):
    error_code = "CHARGE_CREATION_FAILED"
    http_status = 502


class CaptureFailed(CheckoutError):
    """Terminal para este intento; el comprador debe reintentar."""
    error_code = "CAPTURE_FAILED"
    http_status = 502


class SignatureVerificationFailed(CheckoutError):
    """Webhook descartado; nunca dispara fulfillment."""
    error_code = "SIGNATURE_VERIFICATION_FAILED"
    http_status = 400


class PersistenceConflict(CheckoutError):
    """El transaction id ya pertenece a otra compra."""
    error_code = "PERSISTENCE_CONFLICT"
    http_status = 409


class PersistenceFailure(CheckoutError):
    """Error transitorio de almacenamiento; finalize es reintentable."""
    error_code = "PERSISTENCE_FAILURE"
    http_status = 503


__all__ = [
    "CaptureFailed",
    "ChargeCreationFailed",
    "CheckoutError",
    "InvalidRequest",
    "NoPaymentMethodsAvailable",
    "PaymentNotCompleted",
    "PersistenceConflict",
    "PersistenceFailure",
    "ProviderUnavailable",
    "SessionNotFound",
    "SignatureVerificationFailed",
]

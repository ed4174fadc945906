# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_payments.py

Configuración de pagos para YourPixels.

Descripción:
    Centraliza credenciales de Stripe y PayPal, tiempos de espera
    de proveedores, vida de las sesiones de checkout y flags de seguridad.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Literal, Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


class PaymentsSettings(BaseSettings):
    """Configuración del sistema de pagos."""

    # =========================================================================
    # STRIPE
    # =========================================================================

    stripe_enabled: bool = Field(
        default=True,
        description="Habilita pagos con Stripe"
    )

    stripe_secret_key: Optional[str] = Field(
        default=None,
        description="Stripe secret key (sk_live_... o sk_test_...)"
    )

    stripe_publishable_key: Optional[str] = Field(
        default=None,
        description="Stripe publishable key (pk_live_... o pk_test_...)"
    )

    stripe_webhook_secret: Optional[str] = Field(
        default=None,
        description="Stripe webhook signing secret (whsec_...)"
    )

    stripe_webhook_tolerance_seconds: int = Field(
        default=300,
        description="Tolerancia de timestamp para firmas de webhooks Stripe"
    )

    # =========================================================================
    # PAYPAL
    # =========================================================================

    paypal_enabled: bool = Field(
        default=True,
        description="Habilita pagos con PayPal"
    )

    paypal_client_id: Optional[str] = Field(
        default=None,
        description="PayPal client ID"
    )

    paypal_client_secret: Optional[str] = Field(
        default=None,
        description="PayPal client secret"
    )

    paypal_mode: Literal["sandbox", "live"] = Field(
        default="sandbox",
        validation_alias=AliasChoices("paypal_mode", "paypal_env"),
        description="Modo de PayPal: 'sandbox' o 'live'"
    )

    paypal_webhook_id: Optional[str] = Field(
        default=None,
        description="PayPal webhook ID para validación de firmas"
    )

    @field_validator("paypal_mode", mode="before")
    @classmethod
    def _load_paypal_mode(cls, v: Optional[str]) -> str:
        """PAYPAL_ENV se acepta como alias histórico de PAYPAL_MODE."""
        return str(v or "sandbox").strip().lower()

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    default_currency: str = Field(
        default="EUR",
        description="Moneda por defecto de las sesiones de checkout"
    )

    provider_timeout_seconds: float = Field(
        default=10.0,
        description="Límite de tiempo por llamada a un proveedor de pago"
    )

    checkout_session_ttl_seconds: int = Field(
        default=86_400,
        description="Vida máxima de una sesión de checkout antes del barrido"
    )

    checkout_sweep_interval_seconds: int = Field(
        default=900,
        description="Intervalo del job que barre sesiones expiradas"
    )

    # =========================================================================
    # SEGURIDAD
    # =========================================================================

    allow_insecure_webhooks: bool = Field(
        default=False,
        validation_alias=AliasChoices("allow_insecure_webhooks", "payments_allow_insecure_webhooks"),
        description="Permite webhooks sin validación de firma (SOLO DESARROLLO)"
    )

    # =========================================================================
    # NOTIFICACIONES
    # =========================================================================

    send_payment_confirmation_email: bool = Field(
        default=True,
        description="Enviar email de confirmación al registrar la compra"
    )

    # =========================================================================
    # DERIVADOS
    # =========================================================================

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_enabled and self.stripe_secret_key)

    @property
    def paypal_configured(self) -> bool:
        return bool(self.paypal_enabled and self.paypal_client_id and self.paypal_client_secret)

    @property
    def paypal_base_url(self) -> str:
        return PAYPAL_BASE_URLS.get(self.paypal_mode, PAYPAL_BASE_URLS["sandbox"])

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton global
_payments_settings: Optional[PaymentsSettings] = None


def get_payments_settings() -> PaymentsSettings:
    """
    Obtiene la instancia global de configuración de pagos.

    Returns:
        PaymentsSettings: Configuración de pagos
    """
    global _payments_settings
    if _payments_settings is None:
        _payments_settings = PaymentsSettings()
    return _payments_settings


def reset_payments_settings() -> None:
    """Descarta el singleton (tests que cambian variables de entorno)."""
    global _payments_settings
    _payments_settings = None


__all__ = [
    "PAYPAL_BASE_URLS",
    "PaymentsSettings",
    "get_payments_settings",
    "reset_payments_settings",
]
# Fin del archivo backend/app/shared/config/settings_payments.py

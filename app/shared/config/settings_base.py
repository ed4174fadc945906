# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para YourPixels.
- Esta clase NO instancia singletons; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.
- La configuración de pasarelas vive en settings_payments.py.

Autor: YourPixels
Fecha: 2026-10-17
"""

from typing import Literal, Optional
from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="YourPixels", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="yourpixels", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, validation_alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=5, validation_alias="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(default=1800, validation_alias="DB_POOL_RECYCLE")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")
    db_create_tables: bool = Field(default=False, validation_alias="DB_CREATE_TABLES")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        URL de conexión para SQLAlchemy async.
        Prioriza DB_URL (normaliza el esquema postgres a asyncpg);
        cualquier otra URL async (p. ej. sqlite+aiosqlite) se respeta tal cual.
        """
        from urllib.parse import quote_plus

        if self.db_url:
            url = self.db_url
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+asyncpg://", 1)
            elif url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Redis (opcional, stores compartidos)
    # =========================
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")

    # =========================
    # HTTP Metrics
    # =========================
    http_metrics_enabled: bool = Field(default=True, validation_alias="HTTP_METRICS_ENABLED")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
    frontend_url: str = Field(default="http://localhost:5173", validation_alias="FRONTEND_URL")

    # =========================
    # Auth / JWT / Admin
    # =========================
    jwt_secret_key: SecretStr = Field(default=SecretStr("please-change-me"), validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: Literal["HS256", "RS256"] = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    admin_api_key: Optional[SecretStr] = Field(default=None, validation_alias="ADMIN_API_KEY")

    # =========================
    # Tablero de píxeles
    # =========================
    board_width: int = Field(default=1200, gt=0, validation_alias="BOARD_WIDTH")
    board_height: int = Field(default=900, gt=0, validation_alias="BOARD_HEIGHT")

    # =========================
    # Presencia y rate limiting
    # =========================
    presence_ttl_seconds: int = Field(default=45, gt=0, validation_alias="PRESENCE_TTL_SECONDS")
    heartbeat_rate_limit: int = Field(default=30, validation_alias="HEARTBEAT_RATE_LIMIT")
    webhook_rate_limit: int = Field(default=120, validation_alias="WEBHOOK_RATE_LIMIT")
    rate_limit_window_seconds: int = Field(default=60, validation_alias="RATE_LIMIT_WINDOW_SECONDS")

    # =========================
    # Email (solo notificaciones best-effort)
    # =========================
    email_mode: Literal["console", "disabled"] = Field(default="console", validation_alias="EMAIL_MODE")
    email_from: str = Field(default="no-reply@yourpixels.local", validation_alias="EMAIL_FROM")

    # =========================
    # Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["plain", "pretty", "json"] = Field(default="plain", validation_alias="LOG_FORMAT")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    @computed_field  # type: ignore[misc]
    @property
    def board_total_pixels(self) -> int:
        return self.board_width * self.board_height

    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_and_payments_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        jwt_key = self.jwt_secret_key.get_secret_value()
        weak_jwt = not jwt_key or jwt_key == "please-change-me" or len(jwt_key) < 32

        if self.is_prod:
            if weak_jwt:
                raise ValueError("JWT_SECRET_KEY debe tener ≥32 caracteres en producción")
            if self.admin_api_key is None or not self.admin_api_key.get_secret_value():
                raise ValueError("ADMIN_API_KEY es requerido en producción")
            if self.db_create_tables:
                logger.warning("DB_CREATE_TABLES=true en producción; usa migraciones")

        if self.is_dev and weak_jwt:
            logger.info("JWT_SECRET_KEY es débil o usa valor por defecto")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo backend/app/shared/config/settings_base.py

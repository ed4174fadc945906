# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy async: engine y session factory perezosos construidos a partir
de `settings.database_url` (asyncpg en despliegue, aiosqlite en pruebas).

Provee:
- get_engine() / get_session_factory()
- Dependencia FastAPI: get_async_session
- context manager: session_scope()
- create_all() para entornos sin migraciones
- check_database_health()

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.shared.config import get_settings
from app.shared.database.base import Base  # reutilizamos la Base única

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _build_engine(url: str) -> AsyncEngine:
    settings = get_settings()
    if url.startswith("sqlite"):
        # SQLite en memoria: una sola conexión compartida entre sesiones
        return create_async_engine(
            url,
            echo=settings.db_echo_sql,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        url,
        echo=settings.db_echo_sql,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )


def get_engine() -> AsyncEngine:
    """Devuelve (y crea en el primer uso) el engine global."""
    global _engine
    if _engine is None:
        url = get_settings().database_url
        _engine = _build_engine(url)
        logger.info("[DB] engine creado dialect=%s", _engine.dialect.name)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            class_=AsyncSession,
            autoflush=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Cierra el pool global (shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_all() -> None:
    """Crea las tablas declaradas (dev/test; en producción se usan migraciones)."""
    # Registrar modelos en el metadata antes de crear
    from app.modules.purchases import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[DB] tablas creadas/verificadas")


# ── Dependencia FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory()() as session:
        try:
            yield session
        except SQLAlchemyError:
            # rollback para liberar cualquier transacción/lock
            await session.rollback()
            raise


# ── Context manager reutilizable en jobs/tests
@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Args:
        timeout_s: Tiempo máximo de espera en segundos
        sql: Query SQL a ejecutar (default: "SELECT 1")

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with get_engine().connect() as conn:
                await conn.execute(text(sql))
        return True
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.warning("[DB] health check falló: %s", e)
        return False


__all__ = [
    "Base",
    "check_database_health",
    "create_all",
    "dispose_engine",
    "get_async_session",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
# Fin del archivo backend/app/shared/database/database.py

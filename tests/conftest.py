# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para YourPixels.

- PYTHON_ENV=test ANTES de importar la app (settings deterministas)
- Base de datos SQLite (aiosqlite) en archivo temporal por test, con
  NullPool: cada AsyncSession abre su propia conexión, así las carreras
  entre finalizaciones se resuelven contra la restricción única real
- Limpieza de singletons (checkout, presencia, rate limiters, settings)
"""

import os
import sys
import pathlib
from collections.abc import AsyncIterator

# -----------------------------------------------------------------------------
# 0) Entorno de pruebas (antes de cualquier import de app.*)
# -----------------------------------------------------------------------------
os.environ["PYTHON_ENV"] = "test"
os.environ.setdefault("PAYMENTS_ALLOW_INSECURE_WEBHOOKS", "false")
os.environ.setdefault("REDIS_URL", "")

BACKEND_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.shared.database.base import Base


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Cada test arranca sin estado global heredado."""
    from app.modules.checkout.dependencies import reset_checkout
    from app.modules.presence.dependencies import reset_presence
    from app.shared.config import reset_payments_settings
    from app.shared.middleware.rate_limiter import reset_rate_limiters

    reset_checkout()
    reset_presence()
    reset_payments_settings()
    reset_rate_limiters()
    yield
    reset_checkout()
    reset_presence()
    reset_payments_settings()
    reset_rate_limiters()


# -----------------------------------------------------------------------------
# 1) Base de datos
# -----------------------------------------------------------------------------
@pytest_asyncio.fixture
async def db_engine(tmp_path):
    # Registrar modelos en el metadata
    from app.modules.purchases import models  # noqa: F401

    url = f"sqlite+aiosqlite:///{tmp_path / 'yourpixels_test.db'}"
    engine = create_async_engine(url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, class_=AsyncSession, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


# Fin del archivo backend/tests/conftest.py

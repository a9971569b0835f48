"""Async engine construction for PostgreSQL via asyncpg."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = ["build_async_url", "create_engine"]

DRIVER = "postgresql+asyncpg"


def build_async_url(settings: DatabaseSettings) -> str:
    """Render the asyncpg URL with credentials percent-encoded."""
    return URL.create(
        drivername=DRIVER,
        username=settings.username,
        password=settings.password.get_secret_value(),
        host=settings.host,
        port=settings.port,
        database=settings.database,
    ).render_as_string(hide_password=False)


def create_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the engine shared by every request.

    The pool is capped at ``pool_max_connections`` with no overflow, and
    connections are pinged before reuse.
    """
    return create_async_engine(
        build_async_url(settings),
        pool_size=settings.pool_max_connections,
        max_overflow=0,
        pool_pre_ping=True,
    )

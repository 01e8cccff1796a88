"""Async SQLAlchemy session factory helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Create a reusable async session factory for the local accounts database."""

    engine = create_async_engine(database_url)
    return async_sessionmaker(engine, expire_on_commit=False)


def create_external_engine(database_url: str) -> AsyncEngine:
    """Create the shared engine used for external credential lookups."""

    return create_async_engine(database_url, pool_pre_ping=True)

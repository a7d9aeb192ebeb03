"""Async SQLAlchemy helpers.

Every database call in the portal goes through an ``AsyncSession``. The
engine and session factory are built once in ``create_app`` and parked on
``app.state``; request handlers receive a session through ``get_db``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from ..core.errors import DuplicateKeyError, StoreError

logger = logging.getLogger(__name__)

# ``Base`` is the parent class for every SQLAlchemy model defined in portal/models.
Base = declarative_base()


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``url``.

    SQLite runs without a pool: aiosqlite connections belong to the event
    loop that opened them. Server databases keep a small pre-pinged pool.
    """

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo, echo_pool=echo, poolclass=NullPool)
    return create_async_engine(
        url,
        echo=echo,
        echo_pool=echo,
        pool_size=10,
        pool_pre_ping=True,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def store_errors(action: str) -> AsyncIterator[None]:
    """Translate SQLAlchemy failures into the portal's ``StoreError`` family."""

    try:
        yield
    except IntegrityError as exc:
        raise DuplicateKeyError(f"{action}: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        raise StoreError(f"{action}: {exc}") from exc


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a session and guarantees cleanup."""

    factory: async_sessionmaker[AsyncSession] = request.app.state.db_sessionmaker
    async with factory() as db:
        yield db

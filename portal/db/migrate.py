"""Tiny home-grown migration helpers with plain-language explanations."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from .session import Base, store_errors

logger = logging.getLogger(__name__)

# Simple, idempotent migrations for SQLite databases created by older builds,
# where ``users`` existed without a uniqueness guarantee on ``username``.
# Other dialects get the constraint from ``create_all`` on fresh schemas.


def _table_columns(conn: Connection, table: str) -> list[dict[str, object]]:
    """Fetch SQLite's description of a table so we know what columns exist."""

    return [dict(row) for row in conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()]


def _has_unique_index(conn: Connection, table: str, column: str) -> bool:
    """True when some UNIQUE index (or constraint) covers exactly ``column``."""

    for index in conn.execute(text(f"PRAGMA index_list({table})")).mappings().all():
        if not index["unique"]:
            continue
        cols = [row["name"] for row in conn.execute(text(f"PRAGMA index_info({index['name']})")).mappings().all()]
        if cols == [column]:
            return True
    return False


def _create_index_if_not_exists(conn: Connection, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    """Build an index only if it hasn't already been defined."""

    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def _migrate_sqlite(conn: Connection) -> None:
    if not _table_columns(conn, "users"):
        return
    if not _has_unique_index(conn, "users", "username"):
        # Fails loudly if duplicates already exist; those need a human decision.
        logger.info("Adding UNIQUE index on users.username")
        _create_index_if_not_exists(conn, "users", "ux_users_username", ["username"], unique=True)


async def run_migrations(engine: AsyncEngine) -> None:
    """Create missing tables, then bring older SQLite schemas up to date."""

    # Importing the models registers them with the metadata.
    from .. import models  # noqa: F401

    async with store_errors("migrate schema"):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            if engine.dialect.name == "sqlite":
                await conn.run_sync(_migrate_sqlite)

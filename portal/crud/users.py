"""CRUD helpers for the ``users`` table."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import store_errors
from ..models.user import User


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    async with store_errors("look up user"):
        stmt = select(User).where(User.username == username).limit(1)
        return (await db.execute(stmt)).scalars().first()


async def username_exists(db: AsyncSession, username: str) -> bool:
    async with store_errors("check username"):
        stmt = select(func.count()).select_from(User).where(User.username == username)
        return bool(await db.scalar(stmt))


async def create_user(db: AsyncSession, username: str, password_hash: str) -> User:
    """Insert one user; a UNIQUE violation surfaces as ``DuplicateKeyError``."""

    user = User(username=username, password=password_hash)
    try:
        async with store_errors("create user"):
            db.add(user)
            await db.commit()
    except Exception:
        await db.rollback()
        raise
    return user

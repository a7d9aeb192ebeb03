"""Persistence for server-side browser sessions.

The browser only ever holds an opaque random token. Everything else (who is
logged in, the one-time flash message, the half-finished contact form) lives
in the ``sessions`` table next to an idle-expiry timestamp.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Callable

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.errors import SessionDestroyError
from ..db.session import store_errors
from ..models.session_record import SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:
    """Create/read/update/destroy session rows keyed by cookie token."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        *,
        max_age: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessionmaker = sessionmaker
        self.max_age = max_age
        self._clock = clock

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(32)

    def _now(self) -> int:
        return int(self._clock())

    async def load(self, token: str | None) -> dict[str, Any] | None:
        """Return the data stored for ``token``, or ``None`` if unknown or expired."""

        if not token:
            return None
        async with self._sessionmaker() as db:
            async with store_errors("load session"):
                record = await db.get(SessionRecord, token)
                if record is None:
                    return None
                if record.expires_at <= self._now():
                    await db.delete(record)
                    await db.commit()
                    logger.debug("session expired", extra={"extra_data": {"session": token[:8]}})
                    return None
                return dict(record.data or {})

    async def save(self, token: str, data: dict[str, Any]) -> None:
        """Upsert ``data`` and push the idle expiry forward."""

        expires_at = self._now() + self.max_age
        async with self._sessionmaker() as db:
            async with store_errors("save session"):
                record = await db.get(SessionRecord, token)
                if record is None:
                    db.add(SessionRecord(token=token, data=dict(data), expires_at=expires_at))
                else:
                    record.data = dict(data)
                    record.expires_at = expires_at
                await db.commit()

    async def destroy(self, token: str) -> None:
        try:
            async with self._sessionmaker() as db:
                await db.execute(delete(SessionRecord).where(SessionRecord.token == token))
                await db.commit()
        except SQLAlchemyError as exc:
            raise SessionDestroyError(f"destroy session: {exc}") from exc

    async def purge_expired(self) -> int:
        async with self._sessionmaker() as db:
            async with store_errors("purge sessions"):
                result = await db.execute(delete(SessionRecord).where(SessionRecord.expires_at <= self._now()))
                await db.commit()
        return result.rowcount or 0

"""Server-side storage for browser sessions."""

from __future__ import annotations

from sqlalchemy import JSON, Column, Integer, String

from ..db.session import Base


class SessionRecord(Base):
    """One row per live browser session; the cookie only carries ``token``."""

    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    expires_at = Column(Integer, nullable=False, index=True)  # unix seconds

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SessionRecord token={self.token[:8]}... expires_at={self.expires_at}>"


__all__ = ["SessionRecord"]

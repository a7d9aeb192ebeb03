"""Read-only video catalog shown on the landing page."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String, Text

from ..db.session import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    # file name relative to MOVIES_DIR, served under /movies
    filename = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)


__all__ = ["Video"]

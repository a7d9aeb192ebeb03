"""SQLAlchemy model for registered portal users."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String

from ..db.session import Base


class User(Base):
    """Account created through the registration form; never updated afterwards."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # UNIQUE at schema level so two concurrent registrations cannot both win.
    username = Column(String(255), nullable=False, unique=True)
    # bcrypt hash, the column keeps the historical name
    password = Column(String(255), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User {self.username}>"


__all__ = ["User"]

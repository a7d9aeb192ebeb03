"""Password hashing helpers built on ``bcrypt``."""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of its input and recent releases
# refuse longer passwords outright.
MAX_PASSWORD_BYTES = 72


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plain: str, rounds: int = 10) -> str:
    if not plain:
        raise ValueError("password must not be empty")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Constant-time comparison of ``plain`` against a stored bcrypt hash."""

    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash or over-long candidate
        return False

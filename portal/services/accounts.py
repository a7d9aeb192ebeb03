"""Registration and credential checks.

Both flows are thin: validate the form, run one query, hash or verify with
bcrypt. The bcrypt work is CPU bound, so it runs in the threadpool.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from ..core.errors import AuthError, ConflictError, DuplicateKeyError, ValidationError
from ..core.security import hash_password, password_too_long, verify_password
from ..crud.users import create_user, get_user_by_username, username_exists
from ..models.user import User

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 6
MIN_PASSWORD_LENGTH = 6

MISSING_CREDENTIALS = "Username and password are required"
USERNAME_TOO_SHORT = f"Username must be at least {MIN_USERNAME_LENGTH} characters"
PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
PASSWORD_TOO_LONG = "Password is too long"
USERNAME_TAKEN = "That username is already registered"
INVALID_CREDENTIALS = "Invalid username or password"


def validate_credentials(username: str | None, password: str | None) -> None:
    """Raise ``ValidationError`` for the first rule the pair breaks."""

    if not username or not password:
        raise ValidationError(public_message=MISSING_CREDENTIALS)
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(public_message=USERNAME_TOO_SHORT)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(public_message=PASSWORD_TOO_SHORT)
    if password_too_long(password):
        raise ValidationError(public_message=PASSWORD_TOO_LONG)


async def register_user(db: AsyncSession, username: str, password: str, *, rounds: int = 10) -> User:
    validate_credentials(username, password)
    if await username_exists(db, username):
        raise ConflictError(public_message=USERNAME_TAKEN)
    password_hash = await run_in_threadpool(hash_password, password, rounds)
    try:
        user = await create_user(db, username, password_hash)
    except DuplicateKeyError as exc:
        # lost the race against a concurrent registration of the same name
        raise ConflictError(str(exc), public_message=USERNAME_TAKEN) from exc
    logger.info("Registered user %s", username)
    return user


@lru_cache(maxsize=None)
def _placeholder_hash(rounds: int) -> str:
    return hash_password("placeholder-password", rounds)


def _burn_verify(password: str, rounds: int) -> None:
    verify_password(password, _placeholder_hash(rounds))


async def authenticate(db: AsyncSession, username: str, password: str, *, rounds: int = 10) -> User:
    """Return the matching user or raise ``AuthError``.

    Unknown users and wrong passwords produce the same public message, and an
    unknown user still costs one bcrypt check at the configured cost so the
    response time does not tell the two apart.
    """

    user = await get_user_by_username(db, username)
    if user is None:
        await run_in_threadpool(_burn_verify, password, rounds)
        raise AuthError("unknown user", public_message=INVALID_CREDENTIALS)
    if not await run_in_threadpool(verify_password, password, user.password):
        raise AuthError("password mismatch", public_message=INVALID_CREDENTIALS)
    return user

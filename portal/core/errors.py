from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from starlette import status

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


class PortalError(Exception):
    """Base class for every error the portal raises on purpose.

    ``public_message`` is what the browser is allowed to see; the exception's
    own message may carry more detail for the logs.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "A server error occurred"

    def __init__(self, message: str | None = None, *, public_message: str | None = None) -> None:
        if public_message is not None:
            self.public_message = public_message
        super().__init__(message or self.public_message)


class FormError(PortalError):
    """User input problem; the handler re-renders its form with the message."""

    status_code = status.HTTP_200_OK


class ValidationError(FormError):
    pass


class ConflictError(FormError):
    public_message = "That username is already registered"


class AuthError(FormError):
    public_message = "Invalid username or password"


class BadRequestError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Bad request"


class StoreError(PortalError):
    public_message = "A server error occurred"


class DuplicateKeyError(StoreError):
    """A UNIQUE constraint rejected an insert."""


class TransportError(PortalError):
    public_message = "Failed to send mail"


class SessionDestroyError(PortalError):
    public_message = "Logout failed"


class LoginRequired(Exception):
    """Raised by the auth gate; always answered with a redirect to the login page."""


async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_302_FOUND)

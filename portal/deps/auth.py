"""The auth gate shared by every page that needs a logged-in user."""

from __future__ import annotations

from fastapi import Request

from ..core.errors import LoginRequired
from ..middlewares.request_id import set_principal

SESSION_USER_KEY = "user_id"
SESSION_USERNAME_KEY = "username"


def is_logged_in(request: Request) -> bool:
    session = request.scope.get("session")
    return bool(session and session.get(SESSION_USER_KEY))


async def require_login(request: Request) -> None:
    """
    Gate for protected routes: the session must carry the user id written by
    the login flow. Otherwise ``LoginRequired`` is raised before the route body
    runs and the app answers with a redirect to /login.
    """
    if not is_logged_in(request):
        raise LoginRequired()
    set_principal(str(request.session.get(SESSION_USERNAME_KEY) or request.session[SESSION_USER_KEY]))


__all__ = ["SESSION_USER_KEY", "SESSION_USERNAME_KEY", "is_logged_in", "require_login", "set_principal"]

from __future__ import annotations

import logging
from typing import Any, Literal

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.errors import SessionDestroyError, StoreError
from ..crud.sessions import SessionStore

logger = logging.getLogger(__name__)


class ServerSession(dict):
    """The dict behind ``request.session`` plus the token it is stored under."""

    def __init__(self, data: dict[str, Any] | None = None, *, token: str | None = None) -> None:
        super().__init__(data or {})
        self.token = token
        self.destroyed = False

    @property
    def is_new(self) -> bool:
        return self.token is None


class ServerSessionMiddleware(BaseHTTPMiddleware):
    """Load the session named by the cookie before the route runs, persist it after.

    Empty sessions are never written, so anonymous page views leave no rows
    behind. Any session that is written gets its idle expiry renewed.
    """

    def __init__(  # type: ignore[override]
        self,
        app,
        *,
        store: SessionStore,
        cookie_name: str,
        max_age: int,
        https_only: bool = False,
        same_site: Literal["lax", "strict", "none"] = "lax",
        skip_paths: tuple[str, ...] = (),
    ) -> None:
        super().__init__(app)
        self.store = store
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.https_only = https_only
        self.same_site = same_site
        self.skip_paths = skip_paths

    def _skips(self, path: str) -> bool:
        return any(path == prefix or path.startswith(prefix + "/") for prefix in self.skip_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._skips(request.url.path):
            # static files, health and metrics never read or write the session
            request.scope["session"] = ServerSession()
            return await call_next(request)
        token = request.cookies.get(self.cookie_name)
        data = await self.store.load(token)
        # unknown or expired tokens are never reused; a fresh one is issued on save
        session = ServerSession(data, token=token) if data is not None else ServerSession()
        request.scope["session"] = session
        logger.debug(
            "session.loaded",
            extra={"extra_data": {"session_new": session.is_new, "cookie_max_age": self.max_age}},
        )

        response = await call_next(request)

        if session.destroyed:
            response.delete_cookie(self.cookie_name, path="/")
            return response
        if not session:
            if not session.is_new:
                await self.store.destroy(session.token)
                response.delete_cookie(self.cookie_name, path="/")
            return response
        if session.is_new:
            session.token = self.store.new_token()
        await self.store.save(session.token, dict(session))
        response.set_cookie(
            self.cookie_name,
            session.token,
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self.https_only,
            samesite=self.same_site,
        )
        return response


async def destroy_session(request: Request, store: SessionStore) -> None:
    """Delete the current session row; the middleware then expires the cookie."""

    session = request.session
    if isinstance(session, ServerSession):
        if session.token:
            await store.destroy(session.token)
        session.destroyed = True
    session.clear()


async def regenerate_session(request: Request, store: SessionStore) -> None:
    """Drop the row behind the current token and keep the data under a new one.

    Called when the session gains privileges, so a token handed out before
    login never becomes an authenticated one.
    """

    session = request.session
    if isinstance(session, ServerSession) and session.token:
        try:
            await store.destroy(session.token)
        except SessionDestroyError as exc:
            raise StoreError(str(exc)) from exc
        session.token = None

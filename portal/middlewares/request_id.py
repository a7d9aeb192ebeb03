"""Correlation ids and the per-request ``request.completed`` log line."""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("portal.request")


@dataclass
class RequestContext:
    """Who and what the current request is, for log records.

    The object is shared by reference with the task that runs the route, so a
    principal recorded by the auth gate is visible here once the response
    comes back.
    """

    request_id: str
    principal: str | None = None


request_ctx_var: ContextVar[RequestContext | None] = ContextVar("request_ctx", default=None)


def current_request() -> RequestContext | None:
    return request_ctx_var.get()


def set_principal(principal: str) -> None:
    ctx = request_ctx_var.get()
    if ctx is not None:
        ctx.principal = principal


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id (taken from the client if it sent one)."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ctx = RequestContext(request_id=request.headers.get(self.header_name) or uuid4().hex)
        reset_token = request_ctx_var.set(ctx)
        request.state.request_id = ctx.request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed = (time.perf_counter() - start) * 1000
            response.headers[self.header_name] = ctx.request_id
            response.headers.setdefault("X-Response-Time", f"{elapsed:.2f}ms")
            logger.info(
                "request.completed",
                extra={
                    "extra_data": {
                        "method": request.method,
                        "path": request.url.path,
                        "status": response.status_code,
                        "duration_ms": round(elapsed, 2),
                    }
                },
            )
        finally:
            request_ctx_var.reset(reset_token)
        return response

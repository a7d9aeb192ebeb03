from __future__ import annotations

from .request_id import RequestContext, RequestIdMiddleware, current_request, request_ctx_var
from .security_headers import SecurityHeadersMiddleware
from .server_session import ServerSession, ServerSessionMiddleware, destroy_session, regenerate_session

__all__ = [
    "RequestContext",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "ServerSession",
    "ServerSessionMiddleware",
    "current_request",
    "destroy_session",
    "regenerate_session",
    "request_ctx_var",
]

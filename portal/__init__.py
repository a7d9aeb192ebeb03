"""Application factory and top-level wiring for the Movie Portal.

This module is the glue that brings together configuration, the database,
server-side sessions, HTML templates, routers, and error handling. It gives a
new developer a bird's-eye view of *what* pieces exist, *when* they are
initialised, and *how* they reach the request handlers.

Nothing here lives at module level: ``create_app`` builds the engine, the
session store and the mail transport for one application instance and hands
them to handlers through ``app.state``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator

from .core.config import AppSettings, get_settings
from .core.errors import LoginRequired, PortalError, login_required_handler, portal_error_handler
from .core.jinja import get_templates
from .crud.sessions import SessionStore
from .db.migrate import run_migrations
from .db.session import build_engine, build_sessionmaker
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware, ServerSessionMiddleware
from .services.mailer import Mailer, build_mailer

logger = logging.getLogger(__name__)

SESSIONLESS_PATHS = ("/css", "/movies", "/health", "/metrics")


def create_app(settings: AppSettings | None = None, *, mailer: Mailer | None = None) -> FastAPI:
    settings = settings or get_settings()

    # ---------- Store & sessions ----------
    # The engine manages the connection pool; the session store keeps browser
    # sessions in the same database, keyed by the cookie token.
    engine = build_engine(settings.database_url, echo=settings.DB_ECHO)
    db_sessionmaker = build_sessionmaker(engine)
    session_store = SessionStore(db_sessionmaker, max_age=settings.SESSION_MAX_AGE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ``run_migrations`` creates tables for brand-new databases and upgrades
        # existing ones, so the app is self-starting in development and tests.
        await run_migrations(engine)
        purged = await session_store.purge_expired()
        if purged:
            logger.info("Purged %d expired sessions", purged)
        logger.info("%s ready on database %s", settings.APP_NAME, engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            await engine.dispose()

    # ---------- App init ----------
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.db_sessionmaker = db_sessionmaker
    app.state.session_store = session_store
    app.state.mailer = mailer or build_mailer(settings)
    app.state.templates = get_templates(settings.TEMPLATES_DIR, app_name=settings.APP_NAME)

    # Static: the stylesheet and the video files the listing links to.
    settings.movies_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/css", StaticFiles(directory=str(settings.STATIC_DIR / "css"), check_dir=False), name="css")
    app.mount("/movies", StaticFiles(directory=str(settings.movies_dir)), name="movies")

    # ---------- Middleware ----------
    # Added innermost first: request ids wrap everything, the session is
    # loaded just before routing and saved right after.
    app.add_middleware(
        ServerSessionMiddleware,
        store=session_store,
        cookie_name=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        https_only=settings.SESSION_HTTPS_ONLY,
        skip_paths=SESSIONLESS_PATHS,
    )
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.SESSION_HTTPS_ONLY)
    app.add_middleware(RequestIdMiddleware)

    # ---------- Routers ----------
    from .routers import auth_ui as auth_ui_router
    from .routers import contact as contact_router
    from .routers import ui as ui_router

    # login/registration (no session required)
    app.include_router(auth_ui_router.router)
    # video listing (auth gate applied at router level)
    app.include_router(ui_router.router)
    app.include_router(contact_router.router)

    # ---------- Exception handling ----------
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(LoginRequired, login_required_handler)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, bool]:
        return {"ok": True}

    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, include_in_schema=False)

    return app


__all__ = ["create_app"]

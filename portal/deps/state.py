"""Accessors for the collaborators ``create_app`` parks on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from ..core.config import AppSettings
from ..crud.sessions import SessionStore
from ..services.mailer import Mailer


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer

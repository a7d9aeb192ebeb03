"""Beginner-friendly overview for this module.

WHAT: Registration, login and logout pages for the Movie Portal.
WHEN: Invoked for /register, /login and /logout; none of them need a session.
WHY: Creates accounts and turns valid credentials into a logged-in session.
HOW: Each handler validates the form, runs one store query, then renders a
     template or redirects.

File: portal/routers/auth_ui.py
"""


from __future__ import annotations
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import AppSettings
from ..core.errors import BadRequestError, FormError
from ..core.jinja import render
from ..crud.sessions import SessionStore
from ..db.session import get_db
from ..deps.auth import SESSION_USER_KEY, SESSION_USERNAME_KEY, set_principal, is_logged_in
from ..deps.state import get_app_settings, get_session_store
from ..middlewares import destroy_session, regenerate_session
from ..services.accounts import MISSING_CREDENTIALS, authenticate, register_user

FLASH_KEY = "flash_success"
LOGIN_SUCCESS = "Login successful!"

router = APIRouter()


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request):
    return render(request, "register.html", {"error": None, "username": ""})


@router.post("/register", response_class=HTMLResponse)
async def register_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
    settings: AppSettings = Depends(get_app_settings),
):
    try:
        await register_user(db, username, password, rounds=settings.BCRYPT_ROUNDS)
    except FormError as exc:
        return render(request, "register.html", {"error": exc.public_message, "username": username})
    return RedirectResponse(url="/login", status_code=302)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    if is_logged_in(request):
        return RedirectResponse(url="/", status_code=302)
    return render(request, "login.html", {"error": None, "username": ""})


@router.post("/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
    settings: AppSettings = Depends(get_app_settings),
    store: SessionStore = Depends(get_session_store),
):
    if not username or not password:
        raise BadRequestError("login form incomplete", public_message=MISSING_CREDENTIALS)
    try:
        user = await authenticate(db, username, password, rounds=settings.BCRYPT_ROUNDS)
    except FormError as exc:
        return render(request, "login.html", {"error": exc.public_message, "username": username})
    # a token issued before login must not carry the new identity
    await regenerate_session(request, store)
    request.session[SESSION_USER_KEY] = user.id
    request.session[SESSION_USERNAME_KEY] = user.username
    request.session[FLASH_KEY] = LOGIN_SUCCESS
    set_principal(user.username)
    return RedirectResponse(url="/", status_code=302)


@router.get("/logout")
async def logout(request: Request, store: SessionStore = Depends(get_session_store)):
    await destroy_session(request, store)
    return RedirectResponse(url="/login", status_code=302)

"""Three-step contact wizard: form, confirmation, send.

The entered values travel in the session between the form and the
confirmation page; nothing is written to the database.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from ..core.config import AppSettings
from ..core.jinja import render
from ..deps.state import get_app_settings, get_mailer
from ..schemas.contact import ContactForm
from ..services.contact import SESSION_FORM_KEY, send_contact_mail
from ..services.mailer import Mailer

router = APIRouter(tags=["contact"])


@router.get("/contact", response_class=HTMLResponse)
async def contact_page(request: Request):
    form = ContactForm.model_validate(request.session.get(SESSION_FORM_KEY) or {})
    return render(request, "contact/contact.html", form.model_dump())


@router.post("/confirm", response_class=HTMLResponse)
async def contact_confirm(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    message: str = Form(""),
):
    form = ContactForm(name=name, email=email, message=message)
    request.session[SESSION_FORM_KEY] = form.model_dump()
    return render(request, "contact/confirm.html", form.model_dump())


@router.post("/send", response_class=HTMLResponse)
async def contact_send(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    message: str = Form(""),
    mailer: Mailer = Depends(get_mailer),
    settings: AppSettings = Depends(get_app_settings),
):
    form = ContactForm(name=name, email=email, message=message)
    await send_contact_mail(mailer, settings.contact_recipient, form)
    return render(request, "contact/thanks.html")


@router.get("/thanks", response_class=HTMLResponse)
async def thanks_page(request: Request):
    return render(request, "contact/thanks.html")

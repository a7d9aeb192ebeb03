"""Helper utilities for teaching Jinja2 how to present our data.

Templates are the presentation layer. This module builds the shared
``Jinja2Templates`` instance (once per app, inside ``create_app``) and
registers the few helpers the pages use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

from fastapi.templating import Jinja2Templates

MOVIES_URL_PREFIX = "/movies"


def _movie_url(filename: Any) -> str:
    """Turn a catalog file name into the URL the /movies static mount serves."""

    if not filename:
        return ""
    return f"{MOVIES_URL_PREFIX}/{quote(str(filename).lstrip('/'))}"


def get_templates(directory: Path, *, app_name: str = "") -> Jinja2Templates:
    """Create a ``Jinja2Templates`` instance with our standard helpers registered."""

    templates = Jinja2Templates(directory=str(directory))
    env = templates.env
    env.filters["movie_url"] = _movie_url
    env.globals["app_name"] = app_name
    return templates


def render(request: Any, name: str, context: dict[str, Any] | None = None, *, status_code: int = 200):
    """Render ``name`` with the templates instance built by ``create_app``."""

    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code)

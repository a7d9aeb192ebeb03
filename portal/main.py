"""ASGI entry point: ``uvicorn portal.main:app``."""

from .core.config import get_settings
from .core.logging import configure_logging
from . import create_app

settings = get_settings()
configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
app = create_app(settings)
